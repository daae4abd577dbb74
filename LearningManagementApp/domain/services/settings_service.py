"""Admin edits of the persisted platform configuration."""

import logging

from django.db import transaction

from LearningManagementApp.core.access import Capability, Viewer
from LearningManagementApp.core.config import PlatformSettings, load_platform_settings
from LearningManagementApp.core.exceptions import ValidationError, translate_store_errors
from LearningManagementApp.core.models import PlatformConfiguration
from LearningManagementApp.domain.services import notification_service
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)


def _clean_threshold(value) -> float:
    if isinstance(value, bool):
        raise ValidationError("Pass threshold must be a number")
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Pass threshold must be a number") from exc
    if not 0.0 <= value <= 100.0:
        raise ValidationError("Pass threshold must be between 0 and 100")
    return value


@translate_store_errors
@transaction.atomic
def update_platform_settings(
    admin: User,
    pass_threshold: float | None = None,
    notifications_enabled: bool | None = None,
) -> PlatformSettings:
    """Change the pass threshold and/or the notification switch; returns the new settings."""
    Viewer.for_user(admin).require(Capability.MANAGE_SETTINGS, "Admin role required")
    row = PlatformConfiguration.load()
    row = PlatformConfiguration.objects.select_for_update().get(pk=row.pk)
    if pass_threshold is not None:
        row.pass_threshold = _clean_threshold(pass_threshold)
    if notifications_enabled is not None:
        row.notifications_enabled = bool(notifications_enabled)
    row.save()
    notification_service.log_activity(
        admin,
        f"Updated settings: threshold={row.pass_threshold}, notifications={row.notifications_enabled}",
    )
    logger.info("Platform settings changed by %s", admin.username)
    return load_platform_settings()
