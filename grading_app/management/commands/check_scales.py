from django.core.management.base import BaseCommand, CommandError
from grading_app.exceptions import ConfigurationError
from grading_app.models import PerformanceScale
from grading_app.services.scale_math import validate_scale


class Command(BaseCommand):
    help = "Check every stored performance scale for gaps, overlaps and out-of-range bands."

    def add_arguments(self, parser):
        parser.add_argument("--active-only", action="store_true")

    def handle(self, *args, **options):
        qs = PerformanceScale.objects.prefetch_related("bands")
        if options["active_only"]:
            qs = qs.filter(active=True)

        invalid = []
        for scale in qs:
            try:
                validate_scale(scale.to_engine())
            except ConfigurationError as e:
                invalid.append(scale.name)
                self.stdout.write(self.style.ERROR(f"✗ {scale.name}"))
                for problem in e.problems:
                    self.stdout.write(f"    - {problem}")

        if invalid:
            raise CommandError(f"{len(invalid)} performance scale(s) are invalid: {', '.join(invalid)}")
        self.stdout.write(self.style.SUCCESS(f"All {qs.count()} performance scales are valid."))
