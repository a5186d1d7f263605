from django.contrib import admin
from .import models as m
from grading_app.exceptions import ConfigurationError
from grading_app.services.scale_math import validate_scale


# ───────────────────────────────
#  Performance scales
# ───────────────────────────────
class PerformanceBandInline(admin.TabularInline):
    model = m.PerformanceBand
    extra = 0
    fields = ("level", "label", "min_percentage", "max_percentage", "points", "color")


@admin.register(m.PerformanceScale)
class PerformanceScaleAdmin(admin.ModelAdmin):
    list_display = ("name", "scale_type", "grade", "learning_area", "active", "band_count", "updated_at")
    list_filter = ("scale_type", "active", "grade")
    search_fields = ("name", "grade", "learning_area")
    inlines = [PerformanceBandInline]
    actions = ["check_coverage"]

    @admin.display(description="Bands")
    def band_count(self, obj):
        return obj.bands.count()

    @admin.action(description="Check bands cover 0-100 without gaps or overlaps")
    def check_coverage(self, request, queryset):
        invalid = 0
        for scale in queryset:
            try:
                validate_scale(scale.to_engine())
            except ConfigurationError as e:
                invalid += 1
                self.message_user(request, str(e), level="error")
        self.message_user(request, f"Checked {queryset.count()} scales, {invalid} invalid.")


# ───────────────────────────────
#  Term weights
# ───────────────────────────────
@admin.register(m.TermWeights)
class TermWeightsAdmin(admin.ModelAdmin):
    list_display = ("academic_year", "term", "formative_weight", "summative_weight")
    list_editable = ("formative_weight", "summative_weight")
    list_filter = ("academic_year", "term")


# ───────────────────────────────
#  Formative aggregation
# ───────────────────────────────
@admin.register(m.AggregationConfig)
class AggregationConfigAdmin(admin.ModelAdmin):
    list_display = ("grade", "learning_area", "assessment_type", "strategy", "n_value", "weight")
    list_filter = ("strategy", "assessment_type")
    search_fields = ("grade", "learning_area")
