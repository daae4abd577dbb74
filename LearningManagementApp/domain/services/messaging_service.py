"""Instructor-to-student course messages and the help desk."""

import logging

from django.db import transaction
from django.db.models import QuerySet
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.access import Capability, Viewer, ensure_course_manager, is_enrolled
from LearningManagementApp.core.choices import HelpStatus, NotificationType
from LearningManagementApp.core.exceptions import ValidationError, translate_store_errors
from LearningManagementApp.courses.models import Course
from LearningManagementApp.domain.services import notification_service
from LearningManagementApp.messaging.models import HelpMessage, Message
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)


def _require_text(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} must not be empty")
    return value


@translate_store_errors
@transaction.atomic
def send_message(sender: User, receiver: User, course: Course, content: str) -> Message:
    """Send a message from the course instructor (or an admin) to an enrolled student."""
    ensure_course_manager(sender, course)
    content = _require_text(content, "Message")
    if not is_enrolled(receiver, course):
        raise ValidationError("Receiver is not enrolled in this course")
    message = Message.objects.create(sender=sender, receiver=receiver, course=course, content=content)
    notification_service.notify(
        receiver, f"New message from instructor in course: {course.title}", NotificationType.MESSAGE
    )
    notification_service.log_activity(sender, f"Sent message to: {receiver.username} in course: {course.title}")
    return message


def inbox(user: User) -> QuerySet[Message]:
    return Message.objects.filter(receiver=user).select_related("sender", "course")


def outbox(user: User) -> QuerySet[Message]:
    return Message.objects.filter(sender=user).select_related("receiver", "course")


@translate_store_errors
@transaction.atomic
def mark_message_read(user: User, message: Message) -> Message:
    if message.receiver_id != user.id:
        raise PermissionDenied("Only the receiver can mark a message as read")
    if not message.is_read:
        message.is_read = True
        message.save(update_fields=["is_read"])
    return message


@translate_store_errors
@transaction.atomic
def send_help_message(user: User, text: str) -> HelpMessage:
    Viewer.for_user(user).require(Capability.REQUEST_HELP)
    text = _require_text(text, "Help message")
    help_message = HelpMessage.objects.create(user=user, message=text)
    notification_service.log_activity(user, "Sent help message")
    return help_message


def list_help_messages(user: User) -> QuerySet[HelpMessage]:
    """Admins see every request, everyone else only their own."""
    viewer = Viewer.for_user(user)
    qs = HelpMessage.objects.select_related("user")
    if viewer.can(Capability.RESOLVE_HELP):
        return qs
    return qs.filter(user=user)


@translate_store_errors
@transaction.atomic
def resolve_help_message(admin: User, help_message: HelpMessage) -> HelpMessage:
    Viewer.for_user(admin).require(Capability.RESOLVE_HELP, "Admin role required")
    if help_message.status != HelpStatus.RESOLVED:
        help_message.status = HelpStatus.RESOLVED
        help_message.save(update_fields=["status"])
        notification_service.log_activity(admin, f"Resolved help message from: {help_message.user.username}")
    return help_message
