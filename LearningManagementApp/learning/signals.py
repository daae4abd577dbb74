"""Signal handlers for the learning domain (keep progress in step when graded work is deleted)."""

import logging
from typing import Any

from django.db import transaction
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from LearningManagementApp.learning.models import Assignment, Quiz, QuizSubmission, StudentAssignment

logger = logging.getLogger(__name__)


def _schedule_recompute(course_id: int, student_ids: list[int]) -> None:
    from LearningManagementApp.domain.services.progress_service import recompute_progress_for

    def run() -> None:
        for student_id in student_ids:
            recompute_progress_for(course_id, student_id)
        logger.debug("Recomputed progress of %s students in course %s after deletion", len(student_ids), course_id)

    transaction.on_commit(run)


@receiver(pre_delete, sender=Assignment)
def recompute_after_assignment_delete(
    sender: type[Assignment],
    instance: Assignment,
    **kwargs: Any,
) -> None:
    """Graded rows of a deleted assignment stop counting; recompute once the delete commits."""
    student_ids = list(
        StudentAssignment.objects.filter(assignment=instance, grade__isnull=False)
        .values_list("student_id", flat=True)
    )
    if student_ids:
        _schedule_recompute(instance.course_id, student_ids)


@receiver(pre_delete, sender=Quiz)
def recompute_after_quiz_delete(
    sender: type[Quiz],
    instance: Quiz,
    **kwargs: Any,
) -> None:
    student_ids = list(QuizSubmission.objects.filter(quiz=instance).values_list("student_id", flat=True))
    if student_ids:
        _schedule_recompute(instance.course_id, student_ids)
