from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("grading_app", "0001_initial"),
    ]

    operations = [
        migrations.RemoveConstraint(
            model_name="aggregationconfig",
            name="uniq_aggregation_per_context",
        ),
        migrations.AddField(
            model_name="aggregationconfig",
            name="assessment_type",
            field=models.CharField(blank=True, choices=[("OPENER", "Opener"), ("WEEKLY", "Weekly"), ("MONTHLY", "Monthly"), ("CAT", "CAT"), ("MID_TERM", "Mid term"), ("ASSIGNMENT", "Assignment"), ("PROJECT", "Project"), ("PRACTICAL", "Practical"), ("QUIZ", "Quiz"), ("OTHER", "Other")], max_length=10),
        ),
        migrations.AddField(
            model_name="aggregationconfig",
            name="weight",
            field=models.DecimalField(decimal_places=2, default=1, max_digits=5),
        ),
        migrations.AddConstraint(
            model_name="aggregationconfig",
            constraint=models.UniqueConstraint(fields=("grade", "learning_area", "assessment_type"), name="uniq_aggregation_per_context"),
        ),
    ]
