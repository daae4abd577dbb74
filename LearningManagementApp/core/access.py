"""Role capabilities, viewer dispatch and object access helpers.

Code that needs to branch on a user's role resolves a ``Viewer`` and either
asks it for a ``Capability`` or hands it a ``RoleVisitor``; the role string
stored on the user is read in exactly one place (``Viewer.for_user``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.choices import UserRole
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.learning.models import Assignment, Material, Quiz, QuizSubmission, StudentAssignment
from LearningManagementApp.messaging.models import Message

T = TypeVar("T")


class Capability(Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_COURSES = "manage_courses"
    MANAGE_ANY_COURSE_CONTENT = "manage_any_course_content"
    TEACH = "teach"
    ENROLL = "enroll"
    SUBMIT_WORK = "submit_work"
    VIEW_LOGS = "view_logs"
    VIEW_REPORTS = "view_reports"
    MANAGE_SETTINGS = "manage_settings"
    RESOLVE_HELP = "resolve_help"
    REQUEST_HELP = "request_help"


class RoleVisitor(ABC, Generic[T]):
    """Double-dispatch target: one method per role."""

    @abstractmethod
    def visit_admin(self, viewer: "Viewer") -> T: ...

    @abstractmethod
    def visit_instructor(self, viewer: "Viewer") -> T: ...

    @abstractmethod
    def visit_student(self, viewer: "Viewer") -> T: ...


class AdminRole:
    name: ClassVar[UserRole] = UserRole.ADMIN
    capabilities: ClassVar[frozenset[Capability]] = frozenset({
        Capability.MANAGE_USERS,
        Capability.MANAGE_COURSES,
        Capability.MANAGE_ANY_COURSE_CONTENT,
        Capability.VIEW_LOGS,
        Capability.VIEW_REPORTS,
        Capability.MANAGE_SETTINGS,
        Capability.RESOLVE_HELP,
        Capability.REQUEST_HELP,
    })

    def accept(self, visitor: RoleVisitor[T], viewer: "Viewer") -> T:
        return visitor.visit_admin(viewer)


class InstructorRole:
    name: ClassVar[UserRole] = UserRole.INSTRUCTOR
    capabilities: ClassVar[frozenset[Capability]] = frozenset({
        Capability.TEACH,
        Capability.REQUEST_HELP,
    })

    def accept(self, visitor: RoleVisitor[T], viewer: "Viewer") -> T:
        return visitor.visit_instructor(viewer)


class StudentRole:
    name: ClassVar[UserRole] = UserRole.STUDENT
    capabilities: ClassVar[frozenset[Capability]] = frozenset({
        Capability.ENROLL,
        Capability.SUBMIT_WORK,
        Capability.REQUEST_HELP,
    })

    def accept(self, visitor: RoleVisitor[T], viewer: "Viewer") -> T:
        return visitor.visit_student(viewer)


Role = AdminRole | InstructorRole | StudentRole

_ROLES: dict[str, Role] = {
    UserRole.ADMIN: AdminRole(),
    UserRole.INSTRUCTOR: InstructorRole(),
    UserRole.STUDENT: StudentRole(),
}


@dataclass(frozen=True)
class Viewer:
    """The acting user together with the capability set of their role."""
    user: Any
    role: Role

    @classmethod
    def for_user(cls, user) -> "Viewer":
        """Resolve the viewer for an authenticated user.

        Raises:
            PermissionDenied: anonymous user or unknown role.
        """
        if user is None or not getattr(user, "is_authenticated", False):
            raise PermissionDenied("Authentication required")
        role = _ROLES.get(user.role)
        if role is None:
            raise PermissionDenied(f"Unknown role: {user.role}")
        return cls(user=user, role=role)

    def can(self, capability: Capability) -> bool:
        return capability in self.role.capabilities

    def require(self, capability: Capability, message: str | None = None) -> None:
        if not self.can(capability):
            raise PermissionDenied(message or f"{self.role.name} role cannot {capability.value}")

    def accept(self, visitor: RoleVisitor[T]) -> T:
        return self.role.accept(visitor, self)


class DashboardVisitor(RoleVisitor[list[str]]):
    """Dashboard sections shown to each role."""

    def visit_admin(self, viewer: Viewer) -> list[str]:
        return [
            "User Management", "Course Management", "Data Management", "System Logs",
            "Notifications", "Reports", "Settings", "Help Messages",
        ]

    def visit_instructor(self, viewer: Viewer) -> list[str]:
        return ["Course Overview", "Course Content", "Grading", "Communication", "Notifications"]

    def visit_student(self, viewer: Viewer) -> list[str]:
        return ["Overview", "My Courses", "Notifications", "Help"]


def course_from(obj: Any) -> Course | None:
    if obj is None:
        return None
    if isinstance(obj, Course):
        return obj
    if isinstance(obj, (Assignment, Quiz, Material, Enrollment, Message)):
        return obj.course
    if isinstance(obj, StudentAssignment):
        return obj.assignment.course
    if isinstance(obj, QuizSubmission):
        return obj.quiz.course
    return getattr(obj, "course", None)


def is_instructor(user, course: Course | None) -> bool:
    return bool(user and course and course.instructor_id == user.id)


def is_enrolled(user, course: Course | None) -> bool:
    if not (user and course):
        return False
    return Enrollment.objects.filter(course=course, student=user).exists()


def can_manage_course(viewer: Viewer, obj: Any) -> bool:
    """Admins manage every course; instructors only the ones they teach."""
    if viewer.can(Capability.MANAGE_ANY_COURSE_CONTENT):
        return True
    return viewer.can(Capability.TEACH) and is_instructor(viewer.user, course_from(obj))


def ensure_course_manager(user, obj: Any) -> Viewer:
    """Return the viewer, raising PermissionDenied unless they may manage the course of ``obj``."""
    viewer = Viewer.for_user(user)
    if not can_manage_course(viewer, obj):
        raise PermissionDenied("Course instructor or admin required")
    return viewer


def ensure_enrolled_student(user, course: Course) -> Viewer:
    viewer = Viewer.for_user(user)
    viewer.require(Capability.SUBMIT_WORK, "Student role required")
    if not is_enrolled(user, course):
        raise PermissionDenied("Not enrolled in course")
    return viewer


def can_view_course_content(viewer: Viewer, course: Course) -> bool:
    """Managers of the course and its enrolled students see assignments and quizzes."""
    return can_manage_course(viewer, course) or is_enrolled(viewer.user, course)
