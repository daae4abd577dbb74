"""Learning domain models: Assignment, StudentAssignment, Quiz, QuizSubmission, Material."""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from simple_history.models import HistoricalRecords

from LearningManagementApp.courses.models import Course
from LearningManagementApp.courses.querysets import QuizSubmissionQuerySet, StudentAssignmentQuerySet

User = settings.AUTH_USER_MODEL

QUIZ_OPTION_COUNT = 4
QUIZ_MAX_POINTS = 100


class Assignment(models.Model):
    """Course work with a deadline; creating one fans out a StudentAssignment per enrolled student."""
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="assignments")
    title = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    deadline = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "assignments"

    def __str__(self) -> str:
        return self.title


class StudentAssignment(models.Model):
    """One student's row for one assignment: submission text, grade (0–100 or NULL) and feedback."""
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name="student_rows")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="student_assignments")
    submission = models.TextField(null=True, blank=True)
    grade = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    feedback = models.TextField(blank=True, default="")
    submitted_date = models.DateField(null=True, blank=True)
    history = HistoricalRecords()

    objects = StudentAssignmentQuerySet.as_manager()

    class Meta:
        db_table = "student_assignments"
        constraints = [
            models.UniqueConstraint(fields=["assignment", "student"], name="uq_assignment_student"),
        ]


class Quiz(models.Model):
    """Single-question quiz with four options and a 1-based correct option."""
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="quizzes")
    title = models.CharField(max_length=100)
    question = models.TextField()
    options = models.JSONField(default=list)
    correct_option = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(QUIZ_OPTION_COUNT)]
    )
    total_points = models.PositiveSmallIntegerField(
        default=QUIZ_MAX_POINTS, validators=[MinValueValidator(1), MaxValueValidator(QUIZ_MAX_POINTS)]
    )

    class Meta:
        db_table = "quizzes"
        verbose_name_plural = "quizzes"

    def __str__(self) -> str:
        return self.title


class QuizSubmission(models.Model):
    """A student's answer to a quiz (unique per quiz+student; resubmission overwrites)."""
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="quiz_submissions")
    selected_option = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(QUIZ_OPTION_COUNT)]
    )
    score = models.PositiveIntegerField(null=True, blank=True)
    submitted_date = models.DateTimeField(default=timezone.now)
    history = HistoricalRecords()

    objects = QuizSubmissionQuerySet.as_manager()

    class Meta:
        db_table = "quiz_submissions"
        constraints = [
            models.UniqueConstraint(fields=["quiz", "student"], name="uq_quiz_student"),
        ]


class Material(models.Model):
    """Text material published to a course; readable by its managers and enrolled students."""
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="materials")
    title = models.CharField(max_length=100)
    content = models.TextField(blank=True, default="")
    upload_date = models.DateField(default=timezone.localdate)

    class Meta:
        db_table = "materials"

    def __str__(self) -> str:
        return self.title
