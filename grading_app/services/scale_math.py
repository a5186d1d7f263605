import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from grading_app.exceptions import ConfigurationError, InvalidScoreError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
# Widest sliver between two adjacent bands that still counts as contiguous.
# Scales stored with whole-number bounds (0-49, 50-74) leave (49, 50) uncovered.
GRID_STEP = Decimal("1")
WEIGHT_TOLERANCE = Decimal("1e-9")


def _d(x) -> Decimal:
    return Decimal(str(x))


def _round_whole(x: float | Decimal) -> int:
    """Round half-up to a whole percentage point."""
    return int(_d(x).quantize(ONE, rounding=ROUND_HALF_UP))


def _clamp(pct: Decimal) -> Decimal:
    return max(ZERO, min(HUNDRED, pct))


def _fmt(x: Decimal) -> str:
    return format(x.normalize(), "f")


def _field(obj, name: str, default=None):
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _percentage(value) -> Decimal:
    try:
        pct = _d(value)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidScoreError(f"Percentage {value!r} is not a number") from None
    if not pct.is_finite():
        raise InvalidScoreError(f"Percentage {value!r} is not a finite number")
    return pct


# ── Engine records ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class PerformanceBand:
    level: str
    min_percentage: float
    max_percentage: float
    points: int | None = None
    label: str = ""
    description: str = ""

    def contains(self, percentage) -> bool:
        return _d(self.min_percentage) <= _d(percentage) <= _d(self.max_percentage)


@dataclass(frozen=True)
class PerformanceScale:
    name: str
    bands: tuple[PerformanceBand, ...] = ()

    @classmethod
    def from_bands(cls, name: str, bands: Iterable[Any]) -> "PerformanceScale":
        """
        Build a scale from any band-shaped objects (dataclasses, model
        instances or dicts). Bands are re-ordered by min_percentage.
        """
        converted = [
            PerformanceBand(
                level=_field(b, "level"),
                min_percentage=float(_field(b, "min_percentage")),
                max_percentage=float(_field(b, "max_percentage")),
                points=_field(b, "points"),
                label=_field(b, "label", "") or "",
                description=_field(b, "description", "") or "",
            )
            for b in bands
        ]
        converted.sort(key=lambda b: _d(b.min_percentage))
        return cls(name=name, bands=tuple(converted))


@dataclass(frozen=True)
class ScoreEntry:
    raw_score: float
    max_score: float
    remarks: str = ""


@dataclass(frozen=True)
class Weights:
    formative: float
    summative: float

    @classmethod
    def from_percentages(cls, formative_pct, summative_pct) -> "Weights":
        return cls(
            formative=float(_d(formative_pct) / HUNDRED),
            summative=float(_d(summative_pct) / HUNDRED),
        )


@dataclass(frozen=True)
class CompositeResult:
    formative_average: float
    summative_score: float
    weighted_score: int
    level: Any


# ── Scale access ─────────────────────────────────────────────────────────

def _scale_name(scale) -> str:
    name = _field(scale, "name")
    return str(name) if name else "<unnamed scale>"


def _bounds(band, scale_name: str) -> tuple[Decimal, Decimal]:
    try:
        low = _d(_field(band, "min_percentage"))
        high = _d(_field(band, "max_percentage"))
    except (InvalidOperation, ValueError, TypeError):
        raise ConfigurationError(
            f"Performance scale '{scale_name}' has a band ({_field(band, 'level')!r}) "
            f"with non-numeric bounds",
            scale=scale_name,
        ) from None
    if not (low.is_finite() and high.is_finite()):
        raise ConfigurationError(
            f"Performance scale '{scale_name}' has a band ({_field(band, 'level')!r}) "
            f"with non-finite bounds",
            scale=scale_name,
        )
    return low, high


def _ordered_bands(scale) -> list:
    # A bare iterable of bands is accepted as an unnamed scale.
    bands = scale if isinstance(scale, (list, tuple)) else _field(scale, "bands", ())
    if hasattr(bands, "all"):
        bands = bands.all()
    name = _scale_name(scale)
    return sorted(bands, key=lambda b: _bounds(b, name)[0])


# ── Operations ───────────────────────────────────────────────────────────

def percentage_of(score) -> int:
    """
    Percentage for a single mark.

    Formula:
    percentage = raw_score / max_score × 100, rounded half-up to a whole point.

    - max_score <= 0 or raw_score < 0 raise InvalidScoreError.
    - raw_score > max_score is clamped to 100 and logged as a warning.
    """
    raw_value = _field(score, "raw_score")
    max_value = _field(score, "max_score")
    try:
        raw, maximum = _d(raw_value), _d(max_value)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidScoreError(
            f"Score {raw_value!r}/{max_value!r} is not numeric",
            raw_score=raw_value, max_score=max_value,
        ) from None
    if not (raw.is_finite() and maximum.is_finite()):
        raise InvalidScoreError(
            f"Score {raw_value!r}/{max_value!r} is not finite",
            raw_score=raw_value, max_score=max_value,
        )

    if maximum <= 0:
        raise InvalidScoreError(
            f"Max score must be positive (got {max_value})",
            raw_score=raw_value, max_score=max_value,
        )
    if raw < 0:
        raise InvalidScoreError(
            f"Raw score cannot be negative (got {raw_value})",
            raw_score=raw_value, max_score=max_value,
        )
    if raw > maximum:
        logger.warning(
            "Raw score %s exceeds max score %s; clamping to 100%%", raw_value, max_value
        )
        return 100

    return _round_whole(raw * HUNDRED / maximum)


def classify(percentage, scale):
    """
    Return the band of `scale` that contains `percentage`.

    The percentage is clamped to [0, 100]. Bands are scanned by
    min_percentage ascending and the first band with
    min <= percentage <= max wins. A percentage that falls in a sliver of
    at most one point between two adjacent bands belongs to the lower one.

    Raises ConfigurationError when the scale has no bands or no band
    covers the percentage.
    """
    name = _scale_name(scale)
    pct = _clamp(_percentage(percentage))
    bands = _ordered_bands(scale)
    if not bands:
        raise ConfigurationError(
            f"Performance scale '{name}' has no bands; cannot classify {_fmt(pct)}%",
            scale=name, percentage=float(pct),
        )

    previous, previous_high = None, None
    for band in bands:
        low, high = _bounds(band, name)
        if low <= pct <= high:
            return band
        if previous is not None and previous_high < pct < low and low - previous_high <= GRID_STEP:
            return previous
        previous, previous_high = band, high

    raise ConfigurationError(
        f"Performance scale '{name}' has no band covering {_fmt(pct)}%",
        scale=name, percentage=float(pct),
    )


def _coerce_weights(weights) -> tuple[Decimal, Decimal]:
    if isinstance(weights, Mapping):
        missing = [k for k in ("formative", "summative") if k not in weights]
        if missing:
            raise ConfigurationError(f"Weights are missing {', '.join(missing)}")
        formative, summative = weights["formative"], weights["summative"]
    elif hasattr(weights, "formative") and hasattr(weights, "summative"):
        formative, summative = weights.formative, weights.summative
    else:
        try:
            formative, summative = weights
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Weights must be a (formative, summative) pair, got {weights!r}"
            ) from None

    try:
        fw, sw = _d(formative), _d(summative)
    except (InvalidOperation, ValueError, TypeError):
        raise ConfigurationError(
            f"Weights must be numeric (got {formative!r}, {summative!r})"
        ) from None
    if not (fw.is_finite() and sw.is_finite()) or fw < 0 or sw < 0:
        raise ConfigurationError(
            f"Weights must be non-negative numbers (got {formative!r}, {summative!r})"
        )

    total = fw + sw
    if abs(total - ONE) > WEIGHT_TOLERANCE:
        raise ConfigurationError(
            f"Formative and summative weights must sum to 1.0 "
            f"(got {_fmt(fw)} + {_fmt(sw)} = {_fmt(total)})"
        )
    return fw, sw


def composite(formative_average, summative_score, weights, scale) -> CompositeResult:
    """
    Combine a formative average and a summative score into one level.

    Formula:
    weighted = formative_average × formative_weight + summative_score × summative_weight
    rounded half-up to a whole point, then classified against `scale`.

    `weights` is a Weights, a (formative, summative) pair or a mapping with
    those keys; they must sum to 1.0 (±1e-9).
    """
    fw, sw = _coerce_weights(weights)
    formative = _clamp(_percentage(formative_average))
    summative = _clamp(_percentage(summative_score))

    weighted = _round_whole(formative * fw + summative * sw)
    band = classify(weighted, scale)

    return CompositeResult(
        formative_average=float(formative),
        summative_score=float(summative),
        weighted_score=weighted,
        level=band,
    )


def validate_scale(scale) -> tuple:
    """
    Check that the bands of `scale` are well formed, do not overlap and
    jointly cover 0..100 (slivers up to one point between neighbours are
    allowed). Every problem found is listed in a single ConfigurationError.

    Returns the bands ordered by min_percentage.
    """
    name = _scale_name(scale)
    bands = _ordered_bands(scale)
    if not bands:
        raise ConfigurationError(
            f"Performance scale '{name}' has no bands",
            scale=name, problems=["no bands"],
        )

    problems = []
    seen = set()
    for band in bands:
        level = _field(band, "level")
        low, high = _bounds(band, name)
        if level in seen:
            problems.append(f"level {level} is defined more than once")
        seen.add(level)
        if low < ZERO or high > HUNDRED:
            problems.append(f"{level}: bounds {_fmt(low)}-{_fmt(high)} fall outside 0-100")
        if low > high:
            problems.append(f"{level}: min {_fmt(low)} is greater than max {_fmt(high)}")

    first_low = _bounds(bands[0], name)[0]
    if first_low > ZERO:
        problems.append(f"percentages below {_fmt(first_low)} are not covered")

    for prev, band in zip(bands, bands[1:]):
        prev_high = _bounds(prev, name)[1]
        low = _bounds(band, name)[0]
        if low <= prev_high:
            problems.append(
                f"{_field(prev, 'level')} and {_field(band, 'level')} overlap "
                f"at {_fmt(low)}-{_fmt(min(prev_high, _bounds(band, name)[1]))}"
            )
        elif low - prev_high > GRID_STEP:
            problems.append(
                f"percentages between {_fmt(prev_high)} and {_fmt(low)} are not covered"
            )

    last_high = _bounds(bands[-1], name)[1]
    if last_high < HUNDRED:
        problems.append(f"percentages above {_fmt(last_high)} are not covered")

    if problems:
        raise ConfigurationError(
            f"Performance scale '{name}' is invalid: " + "; ".join(problems),
            scale=name, problems=problems,
        )
    return tuple(bands)
