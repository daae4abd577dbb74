from django.contrib.auth.models import AbstractUser
from django.db import models

from LearningManagementApp.core.choices import UserRole

class User(AbstractUser):
    """Account with a unique username and email and one of three roles."""
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.STUDENT)
    REQUIRED_FIELDS = ["email"]

    class Meta(AbstractUser.Meta):
        db_table = "users"

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"
