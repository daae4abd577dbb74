"""Custom DRF permission classes built on viewer capabilities and course management rights."""

from typing import Any

from django.shortcuts import get_object_or_404
from rest_framework.permissions import SAFE_METHODS, BasePermission
from rest_framework.request import Request

from LearningManagementApp.core.access import Capability, Viewer, can_manage_course
from LearningManagementApp.courses.models import Course


class CapabilityPermission(BasePermission):
    """Grant access when the requesting user's role carries ``capability``."""
    capability: Capability

    def has_permission(self, request: Request, view: Any) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return Viewer.for_user(user).can(self.capability)


class CanManageCourses(CapabilityPermission):
    capability = Capability.MANAGE_COURSES


class CanManageUsers(CapabilityPermission):
    capability = Capability.MANAGE_USERS


class CanViewLogs(CapabilityPermission):
    capability = Capability.VIEW_LOGS


class CanViewReports(CapabilityPermission):
    capability = Capability.VIEW_REPORTS


class CanManageSettingsOrReadOnly(CapabilityPermission):
    """Everyone authenticated may read the platform settings; only admins change them."""
    capability = Capability.MANAGE_SETTINGS

    def has_permission(self, request: Request, view: Any) -> bool:
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)


class IsCourseManager(BasePermission):
    """Write access on nested course routes limited to the course instructor or an admin (reads pass)."""

    def _course_from_view(self, view: Any) -> Course | None:
        course = getattr(view, "_resolved_course", None)
        if course:
            return course
        course_pk = getattr(view, "kwargs", {}).get("course_pk")
        if course_pk is None:
            return None
        course = get_object_or_404(Course, pk=course_pk)
        view._resolved_course = course
        return course

    def has_permission(self, request: Request, view: Any) -> bool:
        if request.method in SAFE_METHODS:
            return True
        course = self._course_from_view(view)
        if course is None:
            return True
        return can_manage_course(Viewer.for_user(request.user), course)

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        if request.method in SAFE_METHODS:
            return True
        return can_manage_course(Viewer.for_user(request.user), obj)


class IsRecipient(BasePermission):
    """Object belongs to the requesting user (notifications via ``user``, messages via ``receiver``)."""

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        owner_id = getattr(obj, "user_id", None)
        if owner_id is None:
            owner_id = getattr(obj, "receiver_id", None)
        return owner_id == request.user.id
