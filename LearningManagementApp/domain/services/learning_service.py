"""Domain service functions for assignments, assignment submissions, quizzes and course materials.

Fan-out rule: creating an assignment inserts one StudentAssignment row for
each student enrolled at that moment. Students enrolling later get no row,
so they can neither submit nor be graded for that assignment.
"""

import logging
from datetime import date

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from LearningManagementApp.core.access import Capability, Viewer, can_view_course_content, ensure_course_manager
from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.exceptions import NotFoundError, ValidationError, translate_store_errors
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.domain.services import notification_service
from LearningManagementApp.learning.models import (
    QUIZ_MAX_POINTS,
    QUIZ_OPTION_COUNT,
    Assignment,
    Material,
    Quiz,
    StudentAssignment,
)
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)


def _require_text(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


@translate_store_errors
@transaction.atomic
def create_assignment(
    actor: User,
    course: Course,
    title: str,
    deadline: date | None,
    description: str = "",
) -> Assignment:
    """Create an assignment and fan out rows to the currently enrolled students.

    Raises:
        PermissionDenied: actor is neither admin nor the course instructor.
        ValidationError: empty title.
    """
    ensure_course_manager(actor, course)
    title = _require_text(title, "Assignment title")

    assignment = Assignment.objects.create(
        course=course, title=title, description=description or "", deadline=deadline
    )
    student_ids = Enrollment.objects.student_ids(course)
    StudentAssignment.objects.bulk_create(
        [StudentAssignment(assignment=assignment, student_id=sid) for sid in student_ids]
    )
    logger.info("Assignment %s fanned out to %s students", assignment.pk, len(student_ids))

    notification_service.notify_course_students(course, f"New assignment added: {title}")
    notification_service.log_activity(actor, f"Added assignment: {title} to course: {course.title}")
    return assignment


@translate_store_errors
@transaction.atomic
def submit_assignment(student: User, assignment: Assignment, text: str) -> StudentAssignment:
    """Store (or overwrite) the student's submission text.

    Raises:
        ValidationError: empty text.
        NotFoundError: no row for this student (enrolled after the assignment was created).
    """
    Viewer.for_user(student).require(Capability.SUBMIT_WORK, "Student role required")
    text = _require_text(text, "Submission text")
    try:
        row = StudentAssignment.objects.select_for_update().get(assignment=assignment, student=student)
    except StudentAssignment.DoesNotExist as exc:
        raise NotFoundError("No assignment record for this student") from exc

    row.submission = text
    row.submitted_date = timezone.localdate()
    row.save(update_fields=["submission", "submitted_date"])

    notification_service.log_activity(student, f"Submitted assignment: {assignment.title}")
    notification_service.notify(student, f"Assignment submitted: {assignment.title}", NotificationType.SUBMISSION)
    return row


def validate_quiz_definition(options: list[str], correct_option: int, total_points: int) -> list[str]:
    """Check a quiz has exactly four non-empty options, a 1-based correct option and 1..100 points."""
    if not isinstance(options, (list, tuple)) or len(options) != QUIZ_OPTION_COUNT:
        raise ValidationError(f"A quiz needs exactly {QUIZ_OPTION_COUNT} options")
    cleaned = [str(o).strip() for o in options]
    if not all(cleaned):
        raise ValidationError("Quiz options must not be empty")
    if isinstance(correct_option, bool) or not isinstance(correct_option, int) \
            or not 1 <= correct_option <= QUIZ_OPTION_COUNT:
        raise ValidationError(f"Correct option must be between 1 and {QUIZ_OPTION_COUNT}")
    if isinstance(total_points, bool) or not isinstance(total_points, int) \
            or not 1 <= total_points <= QUIZ_MAX_POINTS:
        raise ValidationError(f"Total points must be an integer between 1 and {QUIZ_MAX_POINTS}")
    return cleaned


@translate_store_errors
@transaction.atomic
def create_quiz(
    actor: User,
    course: Course,
    title: str,
    question: str,
    options: list[str],
    correct_option: int,
    total_points: int = 100,
) -> Quiz:
    """Create a single-question quiz (course instructor or admin)."""
    ensure_course_manager(actor, course)
    title = _require_text(title, "Quiz title")
    question = _require_text(question, "Quiz question")
    cleaned = validate_quiz_definition(options, correct_option, total_points)
    quiz = Quiz.objects.create(
        course=course,
        title=title,
        question=question,
        options=cleaned,
        correct_option=correct_option,
        total_points=total_points,
    )
    notification_service.notify_course_students(course, f"New quiz added to course: {course.title}")
    notification_service.log_activity(actor, f"Added quiz: {title} to course: {course.title}")
    return quiz


def list_student_assignments(student: User, course: Course) -> QuerySet[StudentAssignment]:
    """The student's own rows in ``course`` (only assignments created while enrolled)."""
    return (
        StudentAssignment.objects.for_student(student).in_course(course)
        .select_related("assignment")
        .order_by("assignment__deadline", "assignment__pk")
    )


def _ensure_course_visible(user: User, course: Course) -> None:
    if not can_view_course_content(Viewer.for_user(user), course):
        raise NotFoundError("Course not found")


def list_assignments(user: User, course: Course) -> QuerySet[Assignment]:
    _ensure_course_visible(user, course)
    return Assignment.objects.filter(course=course).order_by("deadline", "pk")


def list_quizzes(user: User, course: Course) -> QuerySet[Quiz]:
    _ensure_course_visible(user, course)
    return Quiz.objects.filter(course=course).order_by("pk")


@translate_store_errors
@transaction.atomic
def delete_assignment(actor: User, assignment: Assignment) -> None:
    """Delete one assignment with its student rows (course instructor or admin).

    Progress of students whose rows were graded is recomputed once the
    delete commits (see ``learning.signals``).
    """
    ensure_course_manager(actor, assignment)
    course, title = assignment.course, assignment.title
    assignment.delete()
    notification_service.log_activity(actor, f"Deleted assignment: {title} from course: {course.title}")


@translate_store_errors
@transaction.atomic
def delete_quiz(actor: User, quiz: Quiz) -> None:
    ensure_course_manager(actor, quiz)
    course, title = quiz.course, quiz.title
    quiz.delete()
    notification_service.log_activity(actor, f"Deleted quiz: {title} from course: {course.title}")


@translate_store_errors
@transaction.atomic
def add_material(actor: User, course: Course, title: str, content: str = "") -> Material:
    """Publish a text material to the course and tell the enrolled students about it."""
    ensure_course_manager(actor, course)
    title = _require_text(title, "Material title")
    material = Material.objects.create(
        course=course, title=title, content=content or "", upload_date=timezone.localdate()
    )
    notification_service.notify_course_students(course, f"New material added: {title}")
    notification_service.log_activity(actor, f"Added material to course: {course.title}")
    return material


def list_materials(user: User, course: Course) -> QuerySet[Material]:
    _ensure_course_visible(user, course)
    return Material.objects.filter(course=course).order_by("-upload_date", "-pk")
