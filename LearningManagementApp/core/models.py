"""Persisted, admin-editable platform configuration (single row)."""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from LearningManagementApp.core.config import default_platform_settings


class PlatformConfiguration(models.Model):
    """Singleton row holding the pass threshold and the notification switch.

    Read it through ``core.config.load_platform_settings`` which turns the
    row into an immutable ``PlatformSettings`` value.
    """
    SINGLETON_PK = 1

    pass_threshold = models.FloatField(
        default=70.0, validators=[MinValueValidator(0.0), MaxValueValidator(100.0)]
    )
    notifications_enabled = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "platform_configuration"

    def __str__(self) -> str:
        return f"PlatformConfiguration(threshold={self.pass_threshold}, notifications={self.notifications_enabled})"

    @classmethod
    def load(cls) -> "PlatformConfiguration":
        """Fetch the row, creating it from the Django ``LMS`` defaults on first use."""
        defaults = default_platform_settings()
        row, _ = cls.objects.get_or_create(
            pk=cls.SINGLETON_PK,
            defaults={
                "pass_threshold": defaults.pass_threshold,
                "notifications_enabled": defaults.notifications_enabled,
            },
        )
        return row
