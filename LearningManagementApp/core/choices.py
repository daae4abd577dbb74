"""Typed enumerations (TextChoices) for user roles, notification types, help desk status and standing."""
from django.db import models

class UserRole(models.TextChoices):
    """System-level role assigned to a user account."""
    ADMIN = "Admin", "Admin"
    INSTRUCTOR = "Instructor", "Instructor"
    STUDENT = "Student", "Student"

class NotificationType(models.TextChoices):
    """Type tag stored on every notification."""
    GRADE = "Grade", "Grade"
    SUBMISSION = "Submission", "Submission"
    ENROLLMENT = "Enrollment", "Enrollment"
    COURSE = "Course", "Course"
    COURSE_UPDATE = "Course Update", "Course Update"
    MESSAGE = "Message", "Message"
    USER = "User", "User"

class HelpStatus(models.TextChoices):
    """Lifecycle of a help desk message."""
    PENDING = "Pending", "Pending"
    RESOLVED = "Resolved", "Resolved"

class Standing(models.TextChoices):
    """Display-time classification of an enrollment's progress."""
    PASSING = "Passing", "Passing"
    NEEDS_IMPROVEMENT = "Needs Improvement", "Needs Improvement"
