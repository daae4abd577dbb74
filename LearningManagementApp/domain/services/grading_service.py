"""Grading engine: instructor grades on assignment rows and automatic quiz scoring.

Rules:
- Grades are integers in 0–100; anything else is rejected before a write.
- Only the course instructor (or an admin) grades.
- Quiz answers are options 1–4, scored ``total_points`` when correct and 0 otherwise.
- One answer per (quiz, student); answering again replaces the earlier answer.
Every accepted grade or answer recomputes the enrollment progress, notifies
the student and appends an activity log entry, all in one transaction.
"""

import logging
from typing import Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from LearningManagementApp.core.access import RoleVisitor, Viewer, ensure_course_manager, ensure_enrolled_student
from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.exceptions import NotFoundError, ValidationError, translate_store_errors
from LearningManagementApp.courses.models import Course
from LearningManagementApp.domain.services import notification_service, progress_service
from LearningManagementApp.learning.models import QUIZ_OPTION_COUNT, Quiz, QuizSubmission, StudentAssignment
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)

MIN_GRADE = 0
MAX_GRADE = 100


def validate_grade(value: Any) -> int:
    """Return ``value`` if it is an integer grade within 0–100.

    Raises:
        ValidationError: non-integer (booleans included) or out of range.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Grade must be an integer")
    if not MIN_GRADE <= value <= MAX_GRADE:
        raise ValidationError(f"Grade must be between {MIN_GRADE} and {MAX_GRADE}")
    return value


def validate_option(value: Any) -> int:
    if value is None:
        raise ValidationError("Please select an answer")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Selected option must be an integer")
    if not 1 <= value <= QUIZ_OPTION_COUNT:
        raise ValidationError(f"Selected option must be between 1 and {QUIZ_OPTION_COUNT}")
    return value


def score_quiz_answer(quiz: Quiz, selected_option: int) -> int:
    return quiz.total_points if selected_option == quiz.correct_option else 0


@translate_store_errors
@transaction.atomic
def grade_assignment(
    actor: User,
    student_assignment: StudentAssignment,
    grade: int,
    feedback: str = "",
) -> StudentAssignment:
    """Store a grade and feedback on a student's assignment row.

    Raises:
        PermissionDenied: actor neither admin nor the course instructor.
        ValidationError: grade not an integer in 0–100.
        NotFoundError: the row disappeared.
    """
    course = student_assignment.assignment.course
    ensure_course_manager(actor, course)
    validate_grade(grade)

    try:
        row = (
            StudentAssignment.objects.select_for_update()
            .select_related("assignment", "student")
            .get(pk=student_assignment.pk)
        )
    except StudentAssignment.DoesNotExist as exc:
        raise NotFoundError("Student assignment not found") from exc

    row.grade = grade
    row.feedback = feedback or ""
    row.save(update_fields=["grade", "feedback"])

    progress_service.recompute_progress_for(course.pk, row.student_id)

    title = row.assignment.title
    notification_service.notify(
        row.student, f"Your assignment '{title}' was graded: {grade}", NotificationType.GRADE
    )
    notification_service.log_activity(actor, f"Graded assignment: {title} for student: {row.student.username}")
    logger.info("Assignment row %s graded %s by %s", row.pk, grade, actor.username)
    return row


@translate_store_errors
@transaction.atomic
def submit_quiz_answer(student: User, quiz: Quiz, selected_option: int) -> QuizSubmission:
    """Score and store the student's answer, replacing any earlier answer.

    Raises:
        ValidationError: option missing or not in 1–4.
        PermissionDenied: not an enrolled student of the quiz's course.
    """
    validate_option(selected_option)
    ensure_enrolled_student(student, quiz.course)

    score = score_quiz_answer(quiz, selected_option)
    submission, created = QuizSubmission.objects.select_for_update().update_or_create(
        quiz=quiz,
        student=student,
        defaults={
            "selected_option": selected_option,
            "score": score,
            "submitted_date": timezone.now(),
        },
    )
    if not created:
        logger.info("Quiz %s answer replaced for student %s", quiz.pk, student.username)

    progress_service.recompute_progress_for(quiz.course_id, student.pk)

    notification_service.log_activity(student, f"Submitted quiz answer for: {quiz.title}")
    notification_service.notify(student, f"Quiz answer submitted: {quiz.title}", NotificationType.SUBMISSION)
    return submission


def list_assignment_submissions(actor: User, course: Course) -> QuerySet[StudentAssignment]:
    """Rows of the course that carry submission text (instructor grading queue)."""
    ensure_course_manager(actor, course)
    return (
        StudentAssignment.objects.in_course(course).submitted()
        .select_related("assignment", "student")
        .order_by("assignment__title", "student__username")
    )


def list_quiz_submissions(actor: User, course: Course) -> QuerySet[QuizSubmission]:
    ensure_course_manager(actor, course)
    return (
        QuizSubmission.objects.in_course(course)
        .select_related("quiz", "student")
        .order_by("quiz__title", "student__username")
    )


class StudentAssignmentScope(RoleVisitor[QuerySet[StudentAssignment]]):
    """Assignment rows each role may see."""

    def _base(self) -> QuerySet[StudentAssignment]:
        return StudentAssignment.objects.select_related("assignment__course", "student")

    def visit_admin(self, viewer: Viewer) -> QuerySet[StudentAssignment]:
        return self._base()

    def visit_instructor(self, viewer: Viewer) -> QuerySet[StudentAssignment]:
        return self._base().for_instructor(viewer.user)

    def visit_student(self, viewer: Viewer) -> QuerySet[StudentAssignment]:
        return self._base().for_student(viewer.user)


def visible_student_assignments(user: User) -> QuerySet[StudentAssignment]:
    return Viewer.for_user(user).accept(StudentAssignmentScope()).order_by("pk")
