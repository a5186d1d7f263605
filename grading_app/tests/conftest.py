import pytest
from uuid import uuid4
from rest_framework.test import APIClient
from grading_app.models import (
    PerformanceScale, PerformanceBand, TermWeights, AggregationConfig,
    ScaleType, Term
)
from grading_app.services import scale_math

# (level, min, max, points)
EXAMPLE_BANDS = [
    ("NY", 0, 49, 1),
    ("AE", 50, 74, 2),
    ("ME", 75, 89, 3),
    ("EE", 90, 100, 4),
]

# no band for 30-39
GAPPED_BANDS = [
    ("NY", 0, 29, 1),
    ("AE", 40, 74, 2),
    ("ME", 75, 89, 3),
    ("EE", 90, 100, 4),
]


def engine_scale(name, rows):
    return scale_math.PerformanceScale.from_bands(
        name,
        [scale_math.PerformanceBand(level, low, high, points) for level, low, high, points in rows],
    )


@pytest.fixture
def example_scale():
    return engine_scale("Example CBC", EXAMPLE_BANDS)


@pytest.fixture
def gapped_scale():
    return engine_scale("Gapped CBC", GAPPED_BANDS)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def create_scale(db):
    def _create_scale(bands=EXAMPLE_BANDS, **kw):
        defaults = dict(
            name=f"Scale {uuid4().hex[:8]}",
            scale_type=ScaleType.CBC,
        )
        defaults.update(kw)
        scale = PerformanceScale.objects.create(**defaults)
        for level, low, high, points in bands:
            PerformanceBand.objects.create(
                scale=scale, level=level, label=level,
                min_percentage=low, max_percentage=high, points=points,
            )
        return scale
    return _create_scale


@pytest.fixture
def create_weights(db):
    def _create_weights(**kw):
        defaults = dict(
            academic_year=2025,
            term=Term.TERM_1,
            formative_weight=60,
            summative_weight=40,
        )
        defaults.update(kw)
        return TermWeights.objects.create(**defaults)
    return _create_weights


@pytest.fixture
def create_aggregation(db):
    def _create_aggregation(**kw):
        return AggregationConfig.objects.create(**kw)
    return _create_aggregation
