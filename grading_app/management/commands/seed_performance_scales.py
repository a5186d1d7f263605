# grading_app/management/commands/seed_performance_scales.py
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from grading_app import models as m

DEFAULT_GRADES = ["GRADE 1", "GRADE 2", "GRADE 3", "GRADE 4", "GRADE 5", "GRADE 6"]
DEFAULT_LEARNING_AREAS = [
    "MATHEMATICAL ACTIVITIES",
    "ENGLISH LANGUAGE ACTIVITIES",
    "KISWAHILI LANGUAGE ACTIVITIES",
    "ENVIRONMENTAL ACTIVITIES",
    "CREATIVE ACTIVITIES",
    "RELIGIOUS EDUCATION",
]

# (level, label, min, max, points, color)
CBC_RUBRIC = [
    ("EE", "Exceeding Expectations",   90, 100, 5, "#22c55e"),
    ("ME", "Meeting Expectations",     75,  89, 4, "#3b82f6"),
    ("AE", "Approaching Expectations", 50,  74, 3, "#eab308"),
    ("BE", "Below Expectations",       25,  49, 2, "#f97316"),
    ("NY", "Not Yet",                   0,  24, 1, "#ef4444"),
]

DETAILED_CBC_RUBRIC = [
    ("EE1", "Outstanding",   90, 100, 8, "#10b981"),
    ("EE2", "Very High",     75,  89, 7, "#34d399"),
    ("ME1", "High Average",  58,  74, 6, "#3b82f6"),
    ("ME2", "Average",       41,  57, 5, "#60a5fa"),
    ("AE1", "Low Average",   31,  40, 4, "#f59e0b"),
    ("AE2", "Below Average", 21,  30, 3, "#fbbf24"),
    ("BE1", "Low",           11,  20, 2, "#ef4444"),
    ("BE2", "Very Low",       0,  10, 1, "#b91c1c"),
]

FOUR_LEVEL = [
    ("EE", "Level 4", 80, 100, 4, "#10b981"),
    ("ME", "Level 3", 50,  79, 3, "#3b82f6"),
    ("AE", "Level 2", 30,  49, 2, "#f59e0b"),
    ("BE", "Level 1",  0,  29, 1, "#ef4444"),
]

SUMMATIVE_GRADES = [
    ("A", "Excellent",     80, 100, 4, "#10b981"),
    ("B", "Good",          60,  79, 3, "#3b82f6"),
    ("C", "Average",       50,  59, 2, "#f59e0b"),
    ("D", "Below Average", 40,  49, 1, "#ef4444"),
    ("E", "Fail",           0,  39, 0, "#991b1b"),
]

DESCRIPTIONS = {
    4: "{learner} consistently and with high level of accuracy displays the knowledge, skills and attitudes/values.",
    3: "{learner} displays the knowledge, skills and attitudes/values with good understanding.",
    2: "{learner} displays the knowledge, skills and attitudes/values with basic understanding.",
    1: "{learner} attempts to display the knowledge, skills and attitudes; needs support.",
}


class Command(BaseCommand):
    help = ("Seed the standard and detailed (8-level) CBC, per-grade and summative "
            "performance scales plus default term weights.")

    def add_arguments(self, parser):
        parser.add_argument("--grades", nargs="*", default=DEFAULT_GRADES)
        parser.add_argument("--learning-areas", nargs="*", default=DEFAULT_LEARNING_AREAS)
        parser.add_argument("--year", type=int, default=None,
                            help="Academic year for the default 60/40 term weights (defaults to this year).")

    def handle(self, *args, **options):
        self.created = 0
        self.skipped = 0

        with transaction.atomic():
            self._scale("Standard CBC Rubric", m.ScaleType.CBC, CBC_RUBRIC)
            # school-wide too; only one CBC scale per context may be active
            self._scale("Detailed CBC Rubric", m.ScaleType.CBC, DETAILED_CBC_RUBRIC, active=False)
            self._scale("Standard Summative Grading", m.ScaleType.SUMMATIVE, SUMMATIVE_GRADES)

            for grade in options["grades"]:
                for area in options["learning_areas"]:
                    self._scale(
                        f"{grade} - {area}", m.ScaleType.CBC, FOUR_LEVEL,
                        grade=grade, learning_area=area, describe=True,
                    )

            year = options["year"] or timezone.now().year
            for term in m.Term.values:
                _, made = m.TermWeights.objects.get_or_create(
                    academic_year=year, term=term,
                    defaults=dict(formative_weight=60, summative_weight=40),
                )
                if made:
                    self.stdout.write(f"Term weights {year} {term}: 60/40")

        self.stdout.write(self.style.SUCCESS(
            f"✓ Performance scales seeded: {self.created} created, {self.skipped} skipped"
        ))

    def _scale(self, name, scale_type, rows, *, grade="", learning_area="", describe=False, active=True):
        if m.PerformanceScale.objects.filter(name=name).exists():
            self.skipped += 1
            self.stdout.write(self.style.WARNING(f"Skipping existing: {name}"))
            return

        scale = m.PerformanceScale.objects.create(
            name=name, scale_type=scale_type, grade=grade, learning_area=learning_area, active=active,
        )
        m.PerformanceBand.objects.bulk_create([
            m.PerformanceBand(
                scale=scale,
                level=level,
                label=label,
                min_percentage=low,
                max_percentage=high,
                points=points,
                color=color,
                description=DESCRIPTIONS.get(points, "") if describe else "",
            )
            for level, label, low, high, points, color in rows
        ])
        self.created += 1
