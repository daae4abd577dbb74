import pytest
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.config import PlatformSettings
from LearningManagementApp.domain.services import notification_service, settings_service
from LearningManagementApp.messaging.models import ActivityLog, Notification

pytestmark = pytest.mark.django_db


def test_notify_truncates_content(student):
    note = notification_service.notify(student, "x" * 250, NotificationType.MESSAGE)
    assert len(note.content) == 200
    assert note.created_at is not None
    assert notification_service.unread_count(student) == 1


def test_notify_skipped_when_disabled(student):
    settings = PlatformSettings(notifications_enabled=False)
    assert notification_service.notify(student, "hi", NotificationType.MESSAGE, settings=settings) is None
    assert not Notification.objects.exists()


def test_persisted_switch_disables_notifications(admin, student):
    settings_service.update_platform_settings(admin, notifications_enabled=False)
    assert notification_service.notify(student, "hi", NotificationType.MESSAGE) is None
    assert notification_service.log_activity(student, "still logged").pk


def test_course_broadcast_targets_enrolled_students(course, student, other_student, enrollment):
    sent = notification_service.notify_course_students(course, "Exam moved")
    assert [n.user_id for n in sent] == [student.pk]
    assert not Notification.objects.filter(user=other_student).exists()


def test_mark_read_only_by_owner(student, other_student):
    note = notification_service.notify(student, "hi", NotificationType.MESSAGE)
    with pytest.raises(PermissionDenied):
        notification_service.mark_read(other_student, note)
    notification_service.mark_read(student, note)
    note.refresh_from_db()
    assert note.is_read
    assert notification_service.unread_count(student) == 0


def test_clear_notifications(student, other_student):
    notification_service.notify(student, "a", NotificationType.MESSAGE)
    notification_service.notify(student, "b", NotificationType.MESSAGE)
    notification_service.notify(other_student, "c", NotificationType.MESSAGE)
    assert notification_service.clear_notifications(student) == 2
    assert Notification.objects.filter(user=other_student).count() == 1


def test_log_activity_truncates(student):
    entry = notification_service.log_activity(student, "y" * 300)
    assert len(entry.activity) == 200


def test_clear_logs_admin_only(admin, student):
    notification_service.log_activity(student, "one")
    with pytest.raises(PermissionDenied):
        notification_service.clear_logs(student)
    notification_service.clear_logs(admin)
    assert list(ActivityLog.objects.values_list("activity", flat=True)) == ["Cleared 1 log entries"]
