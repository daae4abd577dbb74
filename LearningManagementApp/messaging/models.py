"""Messaging models: notifications, the activity log, course messages and help desk requests."""

from django.conf import settings
from django.db import models
from django.utils import timezone

from LearningManagementApp.core.choices import HelpStatus, NotificationType

User = settings.AUTH_USER_MODEL

CONTENT_MAX_LENGTH = 200


class Notification(models.Model):
    """A message addressed to one user, tagged with a type and a read flag."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="notifications")
    content = models.CharField(max_length=CONTENT_MAX_LENGTH)
    type = models.CharField(max_length=20, choices=NotificationType.choices)
    created_at = models.DateTimeField(default=timezone.now)
    is_read = models.BooleanField(default=False)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"[{self.type}] {self.content}"


class ActivityLog(models.Model):
    """Append-only activity entry; the user reference survives account deletion as NULL."""
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="activity_logs")
    activity = models.CharField(max_length=CONTENT_MAX_LENGTH)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "logs"
        ordering = ["-timestamp", "-id"]


class Message(models.Model):
    """Direct message from an instructor to an enrolled student within a course."""
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sent_messages")
    receiver = models.ForeignKey(User, on_delete=models.CASCADE, related_name="received_messages")
    course = models.ForeignKey("courses.Course", on_delete=models.CASCADE, related_name="messages")
    content = models.TextField()
    sent_time = models.DateTimeField(default=timezone.now)
    is_read = models.BooleanField(default=False)

    class Meta:
        db_table = "messages"
        ordering = ["-sent_time", "-id"]


class HelpMessage(models.Model):
    """Help desk request raised by any user and resolved by an admin."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="help_messages")
    message = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=HelpStatus.choices, default=HelpStatus.PENDING)

    class Meta:
        db_table = "help_messages"
        ordering = ["-created_at", "-id"]
