"""Platform settings as an explicit value passed to the code that needs it."""

from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class PlatformSettings:
    pass_threshold: float = 70.0
    notifications_enabled: bool = True


def default_platform_settings() -> PlatformSettings:
    """Settings built only from the Django ``LMS`` block (no database read)."""
    defaults = getattr(settings, "LMS", {})
    return PlatformSettings(
        pass_threshold=float(defaults.get("PASS_THRESHOLD", 70.0)),
        notifications_enabled=bool(defaults.get("NOTIFICATIONS_ENABLED", True)),
    )


def load_platform_settings() -> PlatformSettings:
    """Snapshot of the persisted configuration row."""
    from LearningManagementApp.core.models import PlatformConfiguration

    row = PlatformConfiguration.load()
    return PlatformSettings(
        pass_threshold=row.pass_threshold,
        notifications_enabled=row.notifications_enabled,
    )
