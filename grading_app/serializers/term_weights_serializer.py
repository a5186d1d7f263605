from rest_framework import serializers
from grading_app.models import TermWeights, Term
from grading_app.utils import LabelChoiceField

class TermWeightsSerializer(serializers.ModelSerializer):
    term = LabelChoiceField(choices=Term.choices)

    class Meta:
        model = TermWeights
        fields = [
            'weights_id',
            'academic_year',
            'term',
            'formative_weight',
            'summative_weight',
        ]
        read_only_fields = ('weights_id',)

    def validate(self, attrs):
        formative = attrs.get('formative_weight', getattr(self.instance, 'formative_weight', None))
        summative = attrs.get('summative_weight', getattr(self.instance, 'summative_weight', None))
        if formative is not None and summative is not None and formative + summative != 100:
            raise serializers.ValidationError(
                f"Formative and summative weights must sum to 100%. Current sum: {formative + summative}%"
            )
        return attrs
