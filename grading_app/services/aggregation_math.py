from collections import Counter
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Mapping

from grading_app.exceptions import ConfigurationError
from grading_app.services.scale_math import (
    _field, _ordered_bands, _percentage, _scale_name, percentage_of,
)


def _d(x) -> Decimal:
    return Decimal(str(x))


def _round2(x: float | Decimal) -> float:
    return float(_d(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _round1(x: float | Decimal) -> float:
    return float(_d(x).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


SIMPLE_AVERAGE = "SIMPLE_AVERAGE"
BEST_N = "BEST_N"
DROP_LOWEST_N = "DROP_LOWEST_N"
WEIGHTED_AVERAGE = "WEIGHTED_AVERAGE"
MEDIAN = "MEDIAN"
MULTI_TYPE_WEIGHTED = "MULTI_TYPE_WEIGHTED"

DEFAULT_N = {BEST_N: 3, DROP_LOWEST_N: 1}


@dataclass(frozen=True)
class WeightedScore:
    percentage: float
    weight: float = 1.0
    assessment_type: str = ""


@dataclass(frozen=True)
class FormativeMark:
    """A raw formative mark with its own weight and assessment type (QUIZ, CAT, ...)."""
    raw_score: float
    max_score: float
    weight: float = 1.0
    assessment_type: str = ""
    remarks: str = ""


@dataclass(frozen=True)
class AggregationRule:
    strategy: str = SIMPLE_AVERAGE
    n_value: int | None = None
    weight: float = 1.0


@dataclass(frozen=True)
class TypeAverage:
    assessment_type: str
    count: int
    average: float
    weight: float


@dataclass(frozen=True)
class FormativeBreakdown:
    average: float | None
    breakdown: tuple = ()
    total_assessments: int = 0
    strategy: str = MULTI_TYPE_WEIGHTED


def _weight(value) -> Decimal:
    try:
        weight = _d(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ConfigurationError(f"Assessment weight {value!r} is not a number") from None
    if not weight.is_finite() or weight < 0:
        raise ConfigurationError(
            f"Assessment weight {value!r} must be a non-negative finite number"
        )
    return weight


def _as_weighted(item) -> tuple[Decimal, Decimal]:
    weight = _weight(_field(item, "weight", 1))
    if _field(item, "max_score") is not None:
        return _d(percentage_of(item)), weight
    if _field(item, "percentage") is not None:
        return _percentage(_field(item, "percentage")), weight
    return _percentage(item), weight


def _mean(values: list[Decimal]) -> Decimal:
    return sum(values, Decimal("0")) / len(values)


def aggregate_scores(scores: Iterable, strategy: str = SIMPLE_AVERAGE, n_value: int | None = None) -> float | None:
    """
    Reduce a learner's formative percentages to one average (2dp).

    `scores` may hold plain percentages, ScoreEntry-like marks,
    FormativeMark or WeightedScore items. A bad item weight raises
    ConfigurationError whatever the strategy. Returns None when there are no scores at all, so
    missing evidence is never mistaken for a zero.

    Strategies:
    - SIMPLE_AVERAGE    mean of all scores
    - BEST_N            mean of the best n (default 3)
    - DROP_LOWEST_N     mean after dropping the lowest n (default 1)
    - WEIGHTED_AVERAGE  sum(p * w) / sum(w), weight defaults to 1
    - MEDIAN
    """
    items = [_as_weighted(s) for s in scores]
    if not items:
        return None

    if n_value is None:
        n_value = DEFAULT_N.get(strategy)
    if n_value is not None and n_value < 0:
        raise ConfigurationError(f"{strategy} needs a non-negative n (got {n_value})")

    percentages = [p for p, _ in items]

    if strategy == SIMPLE_AVERAGE:
        return _round2(_mean(percentages))

    if strategy == BEST_N:
        if n_value == 0:
            raise ConfigurationError("BEST_N with n=0 keeps no scores")
        best = sorted(percentages, reverse=True)[:n_value]
        return _round2(_mean(best))

    if strategy == DROP_LOWEST_N:
        keep = len(percentages) - n_value
        if keep <= 0:
            raise ConfigurationError(
                f"DROP_LOWEST_N with n={n_value} drops all {len(percentages)} scores"
            )
        kept = sorted(percentages, reverse=True)[:keep]
        return _round2(_mean(kept))

    if strategy == WEIGHTED_AVERAGE:
        total_weight = sum((w for _, w in items), Decimal("0"))
        if total_weight == 0:
            raise ConfigurationError("Assessment weights sum to zero")
        weighted_sum = sum((p * w for p, w in items), Decimal("0"))
        return _round2(weighted_sum / total_weight)

    if strategy == MEDIAN:
        ordered = sorted(percentages)
        mid = len(ordered) // 2
        if len(ordered) % 2 == 0:
            return _round2((ordered[mid - 1] + ordered[mid]) / 2)
        return _round2(ordered[mid])

    raise ConfigurationError(f"Unknown aggregation strategy {strategy!r}")


def aggregate_by_type(scores: Iterable, rules: Mapping[str, AggregationRule] | None = None,
                      default: AggregationRule | None = None) -> FormativeBreakdown:
    """
    Group formative items by `assessment_type` and reduce each group with
    its own rule, then combine the group averages:

    overall = sum(type_average * type_weight) / sum(type_weight)   (2dp)

    Types without an entry in `rules` use `default` (simple average,
    weight 1). Untyped items form their own "" group. Returns an average of
    None when there are no items.
    """
    rules = rules or {}
    default = default or AggregationRule()

    groups: dict[str, list] = {}
    for item in scores:
        groups.setdefault(_field(item, "assessment_type", "") or "", []).append(item)
    if not groups:
        return FormativeBreakdown(average=None)

    breakdown = []
    weighted_sum, total_weight = Decimal("0"), Decimal("0")
    for assessment_type, items in groups.items():
        rule = rules.get(assessment_type, default)
        average = aggregate_scores(items, rule.strategy, rule.n_value)
        weight = _weight(rule.weight)
        weighted_sum += _d(average) * weight
        total_weight += weight
        breakdown.append(TypeAverage(
            assessment_type=assessment_type,
            count=len(items),
            average=average,
            weight=float(weight),
        ))

    if total_weight == 0:
        raise ConfigurationError(
            f"Assessment type weights sum to zero ({', '.join(t or '<untyped>' for t in groups)})"
        )
    return FormativeBreakdown(
        average=_round2(weighted_sum / total_weight),
        breakdown=tuple(breakdown),
        total_assessments=sum(t.count for t in breakdown),
    )


# ── Rubric points ────────────────────────────────────────────────────────

def average_points(bands: Iterable) -> float | None:
    """Mean of the `points` of the given bands (1dp). Bands without points are skipped."""
    points = [_d(_field(b, "points")) for b in bands if _field(b, "points") is not None]
    if not points:
        return None
    return _round1(_mean(points))


def band_for_points(points, scale):
    """
    Band whose `points` equals `points` rounded half-up to a whole number.
    Raises ConfigurationError when the scale has no such band.
    """
    target = int(_d(points).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    for band in _ordered_bands(scale):
        if _field(band, "points") == target:
            return band
    raise ConfigurationError(
        f"Performance scale '{_scale_name(scale)}' has no band worth {target} points",
        scale=_scale_name(scale),
    )


def level_distribution(bands: Iterable) -> dict[str, int]:
    return dict(Counter(_field(b, "level") for b in bands))
