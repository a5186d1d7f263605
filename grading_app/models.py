import uuid
from django.db import models
from django.utils import timezone

from grading_app.services import scale_math
from grading_app.services.aggregation_math import AggregationRule

# ── Lookup / Enum helpers ────────────────────────────────────────────────

class ScaleType(models.TextChoices):
    CBC       = "CBC",       "CBC Rubric"
    SUMMATIVE = "SUMMATIVE", "Summative"

class Term(models.TextChoices):
    TERM_1 = "TERM_1", "Term 1"
    TERM_2 = "TERM_2", "Term 2"
    TERM_3 = "TERM_3", "Term 3"

class AggregationStrategy(models.TextChoices):
    SIMPLE_AVERAGE   = "SIMPLE_AVERAGE",   "Simple average"
    BEST_N           = "BEST_N",           "Best N"
    DROP_LOWEST_N    = "DROP_LOWEST_N",    "Drop lowest N"
    WEIGHTED_AVERAGE = "WEIGHTED_AVERAGE", "Weighted average"
    MEDIAN           = "MEDIAN",           "Median"

class AssessmentType(models.TextChoices):
    OPENER     = "OPENER",     "Opener"
    WEEKLY     = "WEEKLY",     "Weekly"
    MONTHLY    = "MONTHLY",    "Monthly"
    CAT        = "CAT",        "CAT"
    MID_TERM   = "MID_TERM",   "Mid term"
    ASSIGNMENT = "ASSIGNMENT", "Assignment"
    PROJECT    = "PROJECT",    "Project"
    PRACTICAL  = "PRACTICAL",  "Practical"
    QUIZ       = "QUIZ",       "Quiz"
    OTHER      = "OTHER",      "Other"


# ── Performance scales ───────────────────────────────────────────────────
class PerformanceScale(models.Model):
    scale_id      = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name          = models.CharField(max_length=180, unique=True)
    scale_type    = models.CharField(max_length=10, choices=ScaleType.choices, default=ScaleType.CBC)
    grade         = models.CharField(max_length=40, blank=True)    # blank = every grade
    learning_area = models.CharField(max_length=120, blank=True)   # blank = every learning area
    active        = models.BooleanField(default=True)
    created_at    = models.DateTimeField(default=timezone.now)
    updated_at    = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def to_engine(self) -> scale_math.PerformanceScale:
        """Immutable snapshot of this scale for the grading engine (no colours)."""
        return scale_math.PerformanceScale.from_bands(self.name, self.bands.all())


class PerformanceBand(models.Model):
    band_id        = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    scale          = models.ForeignKey(PerformanceScale, on_delete=models.CASCADE, related_name="bands")
    level          = models.CharField(max_length=12)               # e.g. EE, ME, AE, BE, NY
    label          = models.CharField(max_length=60, blank=True)
    description    = models.TextField(blank=True)
    min_percentage = models.DecimalField(max_digits=5, decimal_places=2)
    max_percentage = models.DecimalField(max_digits=5, decimal_places=2)
    points         = models.PositiveSmallIntegerField(null=True, blank=True)
    color          = models.CharField(max_length=9, blank=True)    # display only

    class Meta:
        ordering = ["scale", "min_percentage"]
        constraints = [
            models.UniqueConstraint(fields=["scale", "level"], name="uniq_level_per_scale")
        ]

    def __str__(self):
        return f"{self.level} ({self.min_percentage}-{self.max_percentage})"


# ── Weight configuration ---------------------------------------------------
class TermWeights(models.Model):
    weights_id       = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    academic_year    = models.PositiveSmallIntegerField()
    term             = models.CharField(max_length=6, choices=Term.choices)
    formative_weight = models.PositiveSmallIntegerField()          # whole percent
    summative_weight = models.PositiveSmallIntegerField()
    created_at       = models.DateTimeField(default=timezone.now)
    updated_at       = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Term weights"
        ordering = ["-academic_year", "term"]
        constraints = [
            models.UniqueConstraint(fields=["academic_year", "term"], name="uniq_weights_per_term")
        ]

    def __str__(self):
        return f"{self.academic_year} {self.get_term_display()}: {self.formative_weight}/{self.summative_weight}"

    def as_weights(self) -> scale_math.Weights:
        return scale_math.Weights.from_percentages(self.formative_weight, self.summative_weight)


class AggregationConfig(models.Model):
    config_id       = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    grade           = models.CharField(max_length=40, blank=True)
    learning_area   = models.CharField(max_length=120, blank=True)
    assessment_type = models.CharField(max_length=10, choices=AssessmentType.choices, blank=True)  # blank = untyped marks
    strategy        = models.CharField(max_length=16, choices=AggregationStrategy.choices,
                                       default=AggregationStrategy.SIMPLE_AVERAGE)
    n_value         = models.PositiveSmallIntegerField(null=True, blank=True)
    weight          = models.DecimalField(max_digits=5, decimal_places=2, default=1)  # share of this type in the formative average
    created_at      = models.DateTimeField(default=timezone.now)
    updated_at      = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["grade", "learning_area", "assessment_type"],
                                    name="uniq_aggregation_per_context")
        ]

    def __str__(self):
        scope = " / ".join(p for p in (self.grade, self.learning_area, self.assessment_type) if p) or "All"
        return f"{scope}: {self.strategy}"

    def as_rule(self) -> AggregationRule:
        return AggregationRule(strategy=self.strategy, n_value=self.n_value, weight=float(self.weight))
