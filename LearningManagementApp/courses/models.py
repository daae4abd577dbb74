"""Course domain models: Course, Enrollment."""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from simple_history.models import HistoricalRecords

from LearningManagementApp.courses.querysets import CourseQuerySet, EnrollmentQuerySet


User = settings.AUTH_USER_MODEL

class Course(models.Model):
    """A course created by an admin and taught by an (optional) instructor.

    Fields:
        title: Human readable course title.
        description: Optional longer text.
        instructor: FK to the teaching user; set to NULL if that user is deleted.
        approved: Whether students may enroll.
        history: Audit history (django-simple-history).
    """
    title = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    instructor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="taught_courses"
    )
    approved = models.BooleanField(default=False)
    history = HistoricalRecords()

    objects = CourseQuerySet.as_manager()

    class Meta:
        db_table = "courses"

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"


class Enrollment(models.Model):
    """Binding of one student to one course, carrying the aggregated progress.

    Fields:
        student: Enrolled user.
        course: Target course.
        progress: 0–100, written only by the progress aggregator.
        enrolled_date: Date the enrollment was created.
        history: Historical records (every progress change is kept).
    Constraints:
        uq_enrollment_student_course: one row per (student, course).
        ck_enrollment_progress_range: progress stays within 0..100 at the database level.
    """
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="enrollments")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    progress = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    enrolled_date = models.DateField(auto_now_add=True)
    history = HistoricalRecords()

    objects = EnrollmentQuerySet.as_manager()

    class Meta:
        db_table = "enrollments"
        constraints = [
            models.UniqueConstraint(fields=["student", "course"], name="uq_enrollment_student_course"),
            models.CheckConstraint(
                condition=models.Q(progress__gte=0, progress__lte=100), name="ck_enrollment_progress_range"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.student} -> {self.course} ({self.progress}%)"
