"""Progress aggregation for (student, course) enrollments.

Progress is the unweighted mean of two channel averages:
    assignments: mean grade over graded rows only (0 when none are graded)
    quizzes:     mean of COALESCE(score, 0) over the student's answers (0 when none)
    progress  =  floor((assignments + quizzes) / 2)

Each channel counts for half regardless of how many items it holds.
Passing / Needs Improvement is derived at display time from an explicit
``PlatformSettings`` value and never stored.
"""

import logging
import math
from dataclasses import dataclass

from django.db import transaction
from django.db.models import Avg, FloatField, QuerySet, Value
from django.db.models.functions import Coalesce

from LearningManagementApp.core.access import Capability, Viewer, ensure_course_manager
from LearningManagementApp.core.choices import Standing
from LearningManagementApp.core.config import PlatformSettings
from LearningManagementApp.core.exceptions import translate_store_errors
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.learning.models import QuizSubmission, StudentAssignment
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentProgress:
    course_id: int
    course_title: str
    progress: int
    standing: Standing


@dataclass(frozen=True)
class CourseProgressRow:
    course_id: int
    course_title: str
    enrollment_count: int
    average_progress: float


def assignment_average(course_id: int, student_id: int) -> float:
    """Mean grade over the student's graded assignment rows in the course; ungraded rows are excluded."""
    value = (
        StudentAssignment.objects.graded()
        .filter(assignment__course_id=course_id, student_id=student_id)
        .aggregate(avg=Avg("grade", output_field=FloatField()))["avg"]
    )
    return float(value) if value is not None else 0.0


def quiz_average(course_id: int, student_id: int) -> float:
    """Mean quiz score for the student in the course, a missing score counting as 0."""
    value = (
        QuizSubmission.objects
        .filter(quiz__course_id=course_id, student_id=student_id)
        .aggregate(avg=Avg(Coalesce("score", Value(0), output_field=FloatField())))["avg"]
    )
    return float(value) if value is not None else 0.0


def combine_channel_averages(assignment_avg: float, quiz_avg: float) -> int:
    """``floor((a + q) / 2)``: truncation, never rounding."""
    return math.floor((assignment_avg + quiz_avg) / 2)


def classify_standing(progress: int, settings: PlatformSettings) -> Standing:
    if progress >= settings.pass_threshold:
        return Standing.PASSING
    return Standing.NEEDS_IMPROVEMENT


def recompute_progress_for(course_id: int, student_id: int) -> int | None:
    """Recompute and persist progress for one enrollment.

    Runs inside a transaction holding a row lock on the enrollment, so two
    concurrent recomputations for the same pair are applied one after the
    other. Returns the new progress, or None when the student is not
    enrolled (nothing is written).
    """
    with transaction.atomic():
        enrollment = (
            Enrollment.objects.select_for_update()
            .filter(course_id=course_id, student_id=student_id)
            .first()
        )
        if enrollment is None:
            logger.debug("No enrollment for course=%s student=%s; progress untouched", course_id, student_id)
            return None
        progress = combine_channel_averages(
            assignment_average(course_id, student_id),
            quiz_average(course_id, student_id),
        )
        if enrollment.progress != progress:
            enrollment.progress = progress
            enrollment.save(update_fields=["progress"])
        logger.debug("Progress course=%s student=%s -> %s", course_id, student_id, progress)
        return progress


@translate_store_errors
def recompute_progress(course: Course, student: User) -> int | None:
    return recompute_progress_for(course.pk, student.pk)


@translate_store_errors
def recompute_all(course_ids: list[int] | None = None) -> int:
    """Recompute every enrollment (optionally limited to some courses); returns the number processed."""
    qs = Enrollment.objects.all()
    if course_ids:
        qs = qs.filter(course_id__in=course_ids)
    count = 0
    for course_id, student_id in list(qs.order_by("pk").values_list("course_id", "student_id")):
        recompute_progress_for(course_id, student_id)
        count += 1
    logger.info("Recomputed progress for %s enrollments", count)
    return count


def student_overview(student: User, settings: PlatformSettings) -> list[EnrollmentProgress]:
    """The student's enrollments with progress and display-time standing."""
    rows = Enrollment.objects.for_student(student).select_related("course").order_by("course__title", "pk")
    return [
        EnrollmentProgress(
            course_id=e.course_id,
            course_title=e.course.title,
            progress=e.progress,
            standing=classify_standing(e.progress, settings),
        )
        for e in rows
    ]


def course_progress_report(viewer_user: User) -> list[CourseProgressRow]:
    """Average progress per course (admin reports)."""
    Viewer.for_user(viewer_user).require(Capability.VIEW_REPORTS)
    courses: QuerySet[Course] = Course.objects.with_report_figures().order_by("title", "pk")
    return [
        CourseProgressRow(
            course_id=c.pk,
            course_title=c.title,
            enrollment_count=c.enrollment_count,
            average_progress=round(float(c.average_progress or 0.0), 2),
        )
        for c in courses
    ]


@dataclass(frozen=True)
class RosterRow:
    student_id: int
    username: str
    progress: int
    standing: Standing


def course_roster(actor: User, course: Course, settings: PlatformSettings) -> list[RosterRow]:
    """Per-student progress of one course, classified with the given settings.

    Raises:
        PermissionDenied: actor is neither admin nor the course instructor.
    """
    ensure_course_manager(actor, course)
    rows = Enrollment.objects.for_course(course).select_related("student").order_by("student__username")
    return [
        RosterRow(
            student_id=e.student_id,
            username=e.student.username,
            progress=e.progress,
            standing=classify_standing(e.progress, settings),
        )
        for e in rows
    ]
