"""Course lifecycle and enrollment.

Admins create, edit and delete courses; students enroll in approved
courses. An enrollment starts at progress 0 and is only ever changed by the
progress aggregator afterwards.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.access import Capability, RoleVisitor, Viewer
from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.exceptions import NotFoundError, ValidationError, translate_store_errors
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.domain.services import notification_service
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)

COURSE_FIELDS = ("title", "description", "instructor", "approved")


def _validate_instructor(instructor: User | None) -> None:
    if instructor is None:
        return
    if not Viewer.for_user(instructor).can(Capability.TEACH):
        raise ValidationError("Assigned instructor must have the Instructor role")


def _validate_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Course title is required")
    if len(title) > Course._meta.get_field("title").max_length:
        raise ValidationError("Course title is too long")
    return title


@translate_store_errors
@transaction.atomic
def enroll_student(student: User, course: Course) -> Enrollment:
    """Enroll a student in an approved course.

    Raises:
        PermissionDenied: user is not a student.
        ValidationError: course not approved or already enrolled.
    """
    Viewer.for_user(student).require(Capability.ENROLL, "Only students can enroll")
    if not course.approved:
        raise ValidationError("Course is not open for enrollment")
    if Enrollment.objects.filter(student=student, course=course).exists():
        raise ValidationError("Already enrolled")
    try:
        with transaction.atomic():
            enrollment = Enrollment.objects.create(student=student, course=course, progress=0)
    except IntegrityError as exc:
        raise ValidationError("Already enrolled") from exc

    notification_service.log_activity(student, f"Enrolled in course: {course.title}")
    notification_service.notify(student, f"Enrolled in course: {course.title}", NotificationType.ENROLLMENT)
    logger.info("Student %s enrolled in course %s", student.username, course.pk)
    return enrollment


@translate_store_errors
@transaction.atomic
def create_course(
    admin: User,
    title: str,
    description: str = "",
    instructor: User | None = None,
    approved: bool = False,
) -> Course:
    """Create a course (admin only)."""
    Viewer.for_user(admin).require(Capability.MANAGE_COURSES, "Admin role required")
    title = _validate_title(title)
    _validate_instructor(instructor)
    course = Course.objects.create(
        title=title, description=description or "", instructor=instructor, approved=approved
    )
    notification_service.log_activity(admin, f"Added course: {title}")
    notification_service.notify(admin, f"Course added: {title}", NotificationType.COURSE)
    return course


@translate_store_errors
@transaction.atomic
def update_course(admin: User, course: Course, **fields) -> Course:
    """Update title, description, instructor or approval (admin only)."""
    Viewer.for_user(admin).require(Capability.MANAGE_COURSES, "Admin role required")
    unknown = set(fields) - set(COURSE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown course fields: {', '.join(sorted(unknown))}")
    if "title" in fields:
        fields["title"] = _validate_title(fields["title"])
    if "instructor" in fields:
        _validate_instructor(fields["instructor"])
    for name, value in fields.items():
        setattr(course, name, value)
    course.save()
    notification_service.log_activity(admin, f"Updated course: {course.title}")
    notification_service.notify(admin, f"Course updated: {course.title}", NotificationType.COURSE)
    return course


@translate_store_errors
@transaction.atomic
def delete_course(admin: User, course: Course) -> None:
    """Delete a course together with its enrollments, assignments and quizzes (admin only)."""
    Viewer.for_user(admin).require(Capability.MANAGE_COURSES, "Admin role required")
    title = course.title
    course.delete()
    notification_service.log_activity(admin, f"Deleted course: {title}")
    notification_service.notify(admin, f"Course deleted: {title}", NotificationType.COURSE)


class CourseScope(RoleVisitor[QuerySet[Course]]):
    """Courses each role gets listed."""

    def visit_admin(self, viewer: Viewer) -> QuerySet[Course]:
        return Course.objects.all()

    def visit_instructor(self, viewer: Viewer) -> QuerySet[Course]:
        return Course.objects.taught_by(viewer.user)

    def visit_student(self, viewer: Viewer) -> QuerySet[Course]:
        return Course.objects.filter(Q(approved=True) | Q(enrollments__student=viewer.user)).distinct()


def list_courses_for(viewer: Viewer) -> QuerySet[Course]:
    return viewer.accept(CourseScope()).select_related("instructor").order_by("title", "pk")


def get_course(viewer: Viewer, course_id: int) -> Course:
    """A course visible to the viewer (admins, its instructor, students of approved courses)."""
    try:
        return list_courses_for(viewer).get(pk=course_id)
    except Course.DoesNotExist as exc:
        raise NotFoundError("Course not found") from exc


def enrollments_for(student: User) -> QuerySet[Enrollment]:
    if not Viewer.for_user(student).can(Capability.ENROLL):
        raise PermissionDenied("Only students have enrollments")
    return Enrollment.objects.for_student(student).select_related("course").order_by("course__title")
