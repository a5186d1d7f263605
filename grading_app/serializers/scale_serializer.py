from django.db import transaction
from rest_framework import serializers

from grading_app.exceptions import ConfigurationError
from grading_app.models import PerformanceBand, PerformanceScale, ScaleType
from grading_app.services.scale_math import PerformanceScale as EngineScale, validate_scale
from grading_app.utils import LabelChoiceField


class PerformanceBandSerializer(serializers.ModelSerializer):
    class Meta:
        model = PerformanceBand
        fields = [
            "band_id",
            "level",
            "label",
            "description",
            "min_percentage",
            "max_percentage",
            "points",
            "color",
        ]
        read_only_fields = ("band_id",)

    def validate(self, attrs):
        low, high = attrs.get("min_percentage"), attrs.get("max_percentage")
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError(
                f"min_percentage must not exceed max_percentage ({attrs.get('level')})"
            )
        return attrs


class PerformanceScaleSerializer(serializers.ModelSerializer):
    """
    • Bands are nested and written together with the scale.
    • The band set must cover 0-100 without gaps or overlaps.
    """
    scale_type = LabelChoiceField(choices=ScaleType.choices, required=False)
    bands      = PerformanceBandSerializer(many=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = PerformanceScale
        fields = [
            "scale_id",
            "name",
            "scale_type",
            "grade",
            "learning_area",
            "active",
            "bands",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("scale_id", "created_at", "updated_at")

    def validate(self, attrs):
        bands = attrs.get("bands")
        if bands is None:
            return attrs
        name = attrs.get("name") or getattr(self.instance, "name", "")
        try:
            validate_scale(EngineScale.from_bands(name, bands))
        except ConfigurationError as e:
            raise serializers.ValidationError({"bands": e.problems or [str(e)]})
        return attrs

    # ── create / update helpers ──────────────────────────
    @transaction.atomic
    def create(self, validated_data):
        bands = validated_data.pop("bands")
        scale = PerformanceScale.objects.create(**validated_data)
        PerformanceBand.objects.bulk_create(
            [PerformanceBand(scale=scale, **band) for band in bands]
        )
        return scale

    @transaction.atomic
    def update(self, instance, validated_data):
        bands = validated_data.pop("bands", None)
        instance = super().update(instance, validated_data)
        if bands is not None:
            # band sets are replaced wholesale; a partial band set could open gaps
            instance.bands.all().delete()
            PerformanceBand.objects.bulk_create(
                [PerformanceBand(scale=instance, **band) for band in bands]
            )
        return instance
