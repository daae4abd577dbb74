"""Custom querysets encapsulating role-based filtering for courses, enrollments and graded work."""

from typing import Self

from django.db.models import Avg, Count, QuerySet


class CourseQuerySet(QuerySet):
    """QuerySet with helpers for course approval and ownership."""

    def approved(self) -> Self:
        """Courses open for enrollment."""
        return self.filter(approved=True)

    def taught_by(self, user) -> Self:
        """Courses whose instructor is the given user."""
        return self.filter(instructor=user)

    def where_enrolled(self, user) -> Self:
        """Courses the user is enrolled in."""
        return self.filter(enrollments__student=user).distinct()

    def with_report_figures(self) -> Self:
        """Annotate enrollment count and average progress (used by reports)."""
        return self.annotate(
            enrollment_count=Count("enrollments", distinct=True),
            average_progress=Avg("enrollments__progress"),
        )


class EnrollmentQuerySet(QuerySet):
    """QuerySet helpers for enrollments."""

    def for_student(self, user) -> Self:
        return self.filter(student=user)

    def for_course(self, course) -> Self:
        return self.filter(course=course)

    def student_ids(self, course) -> list[int]:
        """Snapshot of the ids of students enrolled in ``course`` right now."""
        return list(self.filter(course=course).values_list("student_id", flat=True))


class StudentAssignmentQuerySet(QuerySet):
    """QuerySet helpers for per-student assignment rows."""

    def for_student(self, user) -> Self:
        return self.filter(student=user)

    def in_course(self, course) -> Self:
        """Rows of any assignment belonging to ``course``."""
        return self.filter(assignment__course=course)

    def submitted(self) -> Self:
        """Rows carrying submission text (the grading queue)."""
        return self.filter(submission__isnull=False)

    def graded(self) -> Self:
        return self.filter(grade__isnull=False)

    def for_instructor(self, user) -> Self:
        """Rows in courses taught by ``user``."""
        return self.filter(assignment__course__instructor=user)


class QuizSubmissionQuerySet(QuerySet):
    """QuerySet helpers for quiz answers."""

    def for_student(self, user) -> Self:
        return self.filter(student=user)

    def in_course(self, course) -> Self:
        return self.filter(quiz__course=course)

    def for_instructor(self, user) -> Self:
        return self.filter(quiz__course__instructor=user)
