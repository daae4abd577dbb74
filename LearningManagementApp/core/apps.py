"""Core app configuration and startup checks (platform defaults sanity)."""

from django.apps import AppConfig
from django.conf import settings
from django.core.checks import Error, register


def check_platform_defaults(app_configs, **kwargs):
    """Reject an ``LMS`` settings block whose pass threshold is outside 0–100."""
    defaults = getattr(settings, "LMS", {})
    threshold = defaults.get("PASS_THRESHOLD", 70.0)
    try:
        threshold = float(threshold)
    except (TypeError, ValueError):
        return [Error(f"LMS PASS_THRESHOLD is not a number: {threshold!r}", id="core.E001")]
    if not 0.0 <= threshold <= 100.0:
        return [Error(f"LMS PASS_THRESHOLD must be within 0–100, got {threshold}", id="core.E002")]
    return []


class CoreConfig(AppConfig):
    """AppConfig registering a system check for the platform defaults."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "LearningManagementApp.core"

    def ready(self):
        register()(check_platform_defaults)
