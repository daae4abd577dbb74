"""Notification and activity-log sink.

Every mutating service reports here: one notification for the affected user
(subject to the platform notification switch) and one append-only log row.
"""

import logging

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.access import Capability, Viewer
from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.config import PlatformSettings, load_platform_settings
from LearningManagementApp.core.exceptions import translate_store_errors
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.messaging.models import CONTENT_MAX_LENGTH, ActivityLog, Notification
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)


def _clip(text: str) -> str:
    return text[:CONTENT_MAX_LENGTH]


def notify(
    user: User,
    content: str,
    notification_type: str,
    settings: PlatformSettings | None = None,
) -> Notification | None:
    """Persist a notification for ``user``.

    Returns None (nothing written) when notifications are switched off.
    """
    settings = settings or load_platform_settings()
    if not settings.notifications_enabled:
        logger.debug("Notifications disabled; dropping %r for user %s", content, user.pk)
        return None
    return Notification.objects.create(
        user=user, content=_clip(content), type=notification_type, created_at=timezone.now()
    )


def notify_course_students(
    course: Course,
    content: str,
    notification_type: str = NotificationType.COURSE_UPDATE,
    settings: PlatformSettings | None = None,
) -> list[Notification]:
    """One notification per student currently enrolled in ``course``."""
    settings = settings or load_platform_settings()
    if not settings.notifications_enabled:
        return []
    now = timezone.now()
    student_ids = Enrollment.objects.student_ids(course)
    return Notification.objects.bulk_create(
        [Notification(user_id=sid, content=_clip(content), type=notification_type, created_at=now) for sid in student_ids]
    )


def log_activity(user: User | None, activity: str) -> ActivityLog:
    """Append a row to the activity log and mirror it to the Python logger."""
    entry = ActivityLog.objects.create(user=user, activity=_clip(activity), timestamp=timezone.now())
    logger.info("activity user=%s: %s", getattr(user, "username", None), entry.activity)
    return entry


@translate_store_errors
@transaction.atomic
def mark_read(user: User, notification: Notification) -> Notification:
    """Mark one of the user's own notifications as read."""
    if notification.user_id != user.id:
        raise PermissionDenied("Not your notification")
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=["is_read"])
    return notification


@translate_store_errors
@transaction.atomic
def clear_notifications(user: User) -> int:
    """Delete all of the user's notifications; returns how many were removed."""
    deleted, _ = Notification.objects.filter(user=user).delete()
    return deleted


def unread_count(user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


def notifications_for(user: User) -> QuerySet[Notification]:
    return Notification.objects.filter(user=user)


def list_logs(admin: User) -> QuerySet[ActivityLog]:
    Viewer.for_user(admin).require(Capability.VIEW_LOGS)
    return ActivityLog.objects.select_related("user")


@translate_store_errors
@transaction.atomic
def clear_logs(admin: User) -> int:
    """Bulk admin clear of the activity log; the clear itself is recorded afterwards."""
    Viewer.for_user(admin).require(Capability.VIEW_LOGS)
    deleted, _ = ActivityLog.objects.all().delete()
    log_activity(admin, f"Cleared {deleted} log entries")
    return deleted
