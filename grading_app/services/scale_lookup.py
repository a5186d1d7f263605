from grading_app.exceptions import ConfigurationError
from grading_app.models import (
    AggregationConfig, AggregationStrategy, PerformanceScale, ScaleType, TermWeights
)
from grading_app.services.aggregation_math import AggregationRule


def _by_specificity(candidates, grade, learning_area):
    """
    Pick the most specific candidate:
    grade + learning area -> grade only -> learning area only -> neither.
    """
    grade = grade or ""
    learning_area = learning_area or ""
    for want_grade, want_area in (
        (grade, learning_area),
        (grade, ""),
        ("", learning_area),
        ("", ""),
    ):
        for c in candidates:
            if c.grade == want_grade and c.learning_area == want_area:
                return c
    return None


def resolve_scale(grade: str = "", learning_area: str = "",
                  scale_type: str = ScaleType.CBC) -> PerformanceScale:
    """
    Most specific active scale for a grade / learning area.
    There is no built-in fallback scale: nothing configured is an error.
    """
    candidates = list(
        PerformanceScale.objects
        .filter(scale_type=scale_type, active=True)
        .prefetch_related("bands")
    )
    scale = _by_specificity(candidates, grade, learning_area)
    if scale is None:
        raise ConfigurationError(
            f"No active {scale_type} performance scale configured for "
            f"grade={grade or '*'} learning_area={learning_area or '*'}"
        )
    return scale


def resolve_aggregation_config(grade: str = "", learning_area: str = "") -> AggregationRule:
    """Configured aggregation for untyped marks in a context; simple average when unconfigured."""
    config = _by_specificity(
        list(AggregationConfig.objects.filter(assessment_type="")), grade, learning_area
    )
    if config is None:
        return AggregationRule(strategy=AggregationStrategy.SIMPLE_AVERAGE)
    return config.as_rule()


def resolve_type_rules(grade: str = "", learning_area: str = "") -> dict[str, AggregationRule]:
    """Most specific rule per assessment type (QUIZ, CAT, ...) configured for a context."""
    by_type: dict[str, list] = {}
    for config in AggregationConfig.objects.exclude(assessment_type=""):
        by_type.setdefault(config.assessment_type, []).append(config)

    rules = {}
    for assessment_type, candidates in by_type.items():
        config = _by_specificity(candidates, grade, learning_area)
        if config is not None:
            rules[assessment_type] = config.as_rule()
    return rules


def resolve_term_weights(academic_year: int, term: str):
    try:
        return TermWeights.objects.get(academic_year=academic_year, term=term).as_weights()
    except TermWeights.DoesNotExist:
        raise ConfigurationError(
            f"No formative/summative weights configured for {academic_year} {term}"
        ) from None
