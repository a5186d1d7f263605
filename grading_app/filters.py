import django_filters as filters
from grading_app.models import PerformanceScale, TermWeights

class PerformanceScaleFilter(filters.FilterSet):
    # exact keys e.g. grade=GRADE 4, scale_type=CBC
    grade         = filters.CharFilter(field_name="grade", lookup_expr="iexact")
    learning_area = filters.CharFilter(field_name="learning_area", lookup_expr="iexact")
    scale_type    = filters.CharFilter(field_name="scale_type", lookup_expr="exact")
    active        = filters.BooleanFilter(field_name="active")

    class Meta:
        model = PerformanceScale
        fields = ["grade", "learning_area", "scale_type", "active"]

class TermWeightsFilter(filters.FilterSet):
    academic_year = filters.NumberFilter(field_name="academic_year", lookup_expr="exact")
    term          = filters.CharFilter(field_name="term", lookup_expr="exact")  # use keys e.g. TERM_1

    class Meta:
        model = TermWeights
        fields = ["academic_year", "term"]
