from rest_framework import serializers

from grading_app.models import AggregationStrategy, AssessmentType, PerformanceScale, Term
from grading_app.utils import LabelChoiceField


# ── output ───────────────────────────────────────────────
class BandSerializer(serializers.Serializer):
    level          = serializers.CharField()
    label          = serializers.CharField()
    min_percentage = serializers.FloatField()
    max_percentage = serializers.FloatField()
    points         = serializers.IntegerField(allow_null=True)


class CompositeResultSerializer(serializers.Serializer):
    formative_average = serializers.FloatField(allow_null=True)
    summative_score   = serializers.FloatField(allow_null=True)
    weighted_score    = serializers.IntegerField()
    level             = BandSerializer()


class TypeAverageSerializer(serializers.Serializer):
    assessment_type = serializers.CharField()
    count           = serializers.IntegerField()
    average         = serializers.FloatField()
    weight          = serializers.FloatField()


class ReportLineSerializer(serializers.Serializer):
    learner_id    = serializers.CharField()
    learning_area = serializers.CharField()
    status        = serializers.CharField()
    reason        = serializers.CharField()
    result        = CompositeResultSerializer(allow_null=True)
    breakdown     = TypeAverageSerializer(many=True)


# ── input ────────────────────────────────────────────────
class ClassifyRequestSerializer(serializers.Serializer):
    """Either a percentage or a raw mark (raw_score + max_score)."""
    percentage = serializers.FloatField(required=False)
    raw_score  = serializers.FloatField(required=False)
    max_score  = serializers.FloatField(required=False)

    def validate(self, attrs):
        has_pct = "percentage" in attrs
        has_mark = "raw_score" in attrs and "max_score" in attrs
        if has_pct == has_mark:
            raise serializers.ValidationError(
                "Provide either 'percentage' or both 'raw_score' and 'max_score'."
            )
        return attrs


class MarkSerializer(serializers.Serializer):
    # range checks are left to the engine so a bad mark only fails its own learner
    raw_score = serializers.FloatField()
    max_score = serializers.FloatField()
    remarks   = serializers.CharField(required=False, allow_blank=True, default="")


class FormativeMarkSerializer(MarkSerializer):
    weight          = serializers.FloatField(required=False, min_value=0, default=1.0)
    assessment_type = LabelChoiceField(choices=AssessmentType.choices, required=False)


class WeightsSourceSerializer(serializers.Serializer):
    """
    Weights come from the stored term configuration (academic_year + term)
    or are given explicitly as whole percentages.
    The scale is given by scale_id or looked up from grade / learning_area.
    """
    scale_id         = serializers.PrimaryKeyRelatedField(
        source="scale", required=False,
        queryset=PerformanceScale.objects.prefetch_related("bands"))
    grade            = serializers.CharField(required=False, allow_blank=True)
    learning_area    = serializers.CharField(required=False, allow_blank=True)
    academic_year    = serializers.IntegerField(required=False)
    term             = LabelChoiceField(choices=Term.choices, required=False)
    formative_weight = serializers.FloatField(required=False)
    summative_weight = serializers.FloatField(required=False)

    def validate(self, attrs):
        if "scale" not in attrs and not (attrs.get("grade") or attrs.get("learning_area")):
            raise serializers.ValidationError(
                "Provide 'scale_id' or a 'grade' / 'learning_area' to look the scale up."
            )
        stored = "academic_year" in attrs and "term" in attrs
        explicit = "formative_weight" in attrs and "summative_weight" in attrs
        if stored == explicit:
            raise serializers.ValidationError(
                "Provide either 'academic_year' and 'term' or "
                "'formative_weight' and 'summative_weight'."
            )
        return attrs


class CompositeRequestSerializer(WeightsSourceSerializer):
    formative_average = serializers.FloatField()
    summative_score   = serializers.FloatField()


class LearnerMarksSerializer(serializers.Serializer):
    learner_id    = serializers.CharField()
    learning_area = serializers.CharField(required=False, allow_blank=True, default="")
    formative     = FormativeMarkSerializer(many=True, required=False, default=list)
    summative     = MarkSerializer(required=False, allow_null=True, default=None)


class TermReportRequestSerializer(WeightsSourceSerializer):
    strategy = LabelChoiceField(choices=AggregationStrategy.choices, required=False)
    n_value  = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    learners = LearnerMarksSerializer(many=True)
