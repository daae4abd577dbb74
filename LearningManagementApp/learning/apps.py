"""Learning app configuration (registers signal handlers)."""

from django.apps import AppConfig

class LearningConfig(AppConfig):
    """AppConfig for the learning domain (assignments, quizzes and their submissions)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "LearningManagementApp.learning"
    label = "learning"

    def ready(self):
        """Import signal handlers to connect Django model signals."""
        from LearningManagementApp.learning import signals  # noqa: F401
