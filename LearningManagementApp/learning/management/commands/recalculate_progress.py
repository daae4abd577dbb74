from django.core.management.base import BaseCommand

from LearningManagementApp.domain.services.progress_service import recompute_all


class Command(BaseCommand):
    help = "Recompute the progress of every enrollment from its graded assignments and quiz answers."

    def add_arguments(self, parser):
        parser.add_argument(
            "--course", type=int, action="append", dest="course_ids",
            help="Limit to a course id (repeatable).",
        )

    def handle(self, *args, **options):
        processed = recompute_all(options.get("course_ids"))
        self.stdout.write(self.style.SUCCESS(f"Recomputed progress for {processed} enrollments"))
