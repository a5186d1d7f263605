import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PerformanceScale",
            fields=[
                ("scale_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=180, unique=True)),
                ("scale_type", models.CharField(choices=[("CBC", "CBC Rubric"), ("SUMMATIVE", "Summative")], default="CBC", max_length=10)),
                ("grade", models.CharField(blank=True, max_length=40)),
                ("learning_area", models.CharField(blank=True, max_length=120)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="PerformanceBand",
            fields=[
                ("band_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("level", models.CharField(max_length=12)),
                ("label", models.CharField(blank=True, max_length=60)),
                ("description", models.TextField(blank=True)),
                ("min_percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                ("max_percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                ("points", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("color", models.CharField(blank=True, max_length=9)),
                ("scale", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bands", to="grading_app.performancescale")),
            ],
            options={
                "ordering": ["scale", "min_percentage"],
            },
        ),
        migrations.AddConstraint(
            model_name="performanceband",
            constraint=models.UniqueConstraint(fields=("scale", "level"), name="uniq_level_per_scale"),
        ),
        migrations.CreateModel(
            name="TermWeights",
            fields=[
                ("weights_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("academic_year", models.PositiveSmallIntegerField()),
                ("term", models.CharField(choices=[("TERM_1", "Term 1"), ("TERM_2", "Term 2"), ("TERM_3", "Term 3")], max_length=6)),
                ("formative_weight", models.PositiveSmallIntegerField()),
                ("summative_weight", models.PositiveSmallIntegerField()),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "Term weights",
                "ordering": ["-academic_year", "term"],
            },
        ),
        migrations.AddConstraint(
            model_name="termweights",
            constraint=models.UniqueConstraint(fields=("academic_year", "term"), name="uniq_weights_per_term"),
        ),
        migrations.CreateModel(
            name="AggregationConfig",
            fields=[
                ("config_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("grade", models.CharField(blank=True, max_length=40)),
                ("learning_area", models.CharField(blank=True, max_length=120)),
                ("strategy", models.CharField(choices=[("SIMPLE_AVERAGE", "Simple average"), ("BEST_N", "Best N"), ("DROP_LOWEST_N", "Drop lowest N"), ("WEIGHTED_AVERAGE", "Weighted average"), ("MEDIAN", "Median")], default="SIMPLE_AVERAGE", max_length=16)),
                ("n_value", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.AddConstraint(
            model_name="aggregationconfig",
            constraint=models.UniqueConstraint(fields=("grade", "learning_area"), name="uniq_aggregation_per_context"),
        ),
    ]
