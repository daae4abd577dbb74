from unittest.mock import patch

import pytest
from django.db import DatabaseError
from model_bakery import baker
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.exceptions import StoreError, ValidationError
from LearningManagementApp.domain.services import grading_service, learning_service, progress_service
from LearningManagementApp.learning.models import QuizSubmission, StudentAssignment
from LearningManagementApp.messaging.models import ActivityLog, Notification

pytestmark = pytest.mark.django_db


@pytest.fixture
def assignment(instructor, course, enrollment):
    return learning_service.create_assignment(instructor, course, "HW1", None)


@pytest.fixture
def row(assignment, student):
    return StudentAssignment.objects.get(assignment=assignment, student=student)


@pytest.fixture
def quiz(instructor, course):
    return learning_service.create_quiz(
        instructor, course, "Q1", "2 + 2?", ["3", "4", "5", "22"], correct_option=2, total_points=100
    )


@pytest.mark.parametrize("grade", [0, 1, 50, 99, 100])
def test_grade_stored_as_given(instructor, row, grade):
    grading_service.grade_assignment(instructor, row, grade, "fine")
    row.refresh_from_db()
    assert row.grade == grade
    assert row.feedback == "fine"


@pytest.mark.parametrize("grade", [-1, 101, 250])
def test_out_of_range_grade_leaves_row_untouched(instructor, row, grade):
    with pytest.raises(ValidationError):
        grading_service.grade_assignment(instructor, row, grade, "nope")
    row.refresh_from_db()
    assert row.grade is None
    assert row.feedback == ""
    assert not Notification.objects.filter(type=NotificationType.GRADE).exists()


def test_regrade_overwrites(instructor, row):
    grading_service.grade_assignment(instructor, row, 60)
    grading_service.grade_assignment(instructor, row, 90, "better")
    row.refresh_from_db()
    assert (row.grade, row.feedback) == (90, "better")


def test_grading_notifies_student_and_logs(instructor, student, row):
    grading_service.grade_assignment(instructor, row, 80, "ok")
    note = Notification.objects.get(user=student, type=NotificationType.GRADE)
    assert note.content == "Your assignment 'HW1' was graded: 80"
    assert not note.is_read
    assert ActivityLog.objects.filter(
        user=instructor, activity=f"Graded assignment: HW1 for student: {student.username}"
    ).exists()


def test_only_course_instructor_or_admin_grades(admin, row, student):
    stranger = baker.make("users.User", role="Instructor")
    with pytest.raises(PermissionDenied):
        grading_service.grade_assignment(stranger, row, 70)
    with pytest.raises(PermissionDenied):
        grading_service.grade_assignment(student, row, 100)
    grading_service.grade_assignment(admin, row, 70)
    row.refresh_from_db()
    assert row.grade == 70


def test_grading_without_submission_text_is_allowed(instructor, row):
    assert row.submission is None
    grading_service.grade_assignment(instructor, row, 55)
    row.refresh_from_db()
    assert row.grade == 55


def test_correct_quiz_answer_scores_total_points(student, quiz, enrollment):
    sub = grading_service.submit_quiz_answer(student, quiz, 2)
    assert sub.score == 100
    assert sub.selected_option == 2


def test_wrong_quiz_answer_scores_zero(student, quiz, enrollment):
    sub = grading_service.submit_quiz_answer(student, quiz, 3)
    assert sub.score == 0


def test_quiz_resubmission_replaces_answer(student, quiz, enrollment):
    first = grading_service.submit_quiz_answer(student, quiz, 1)
    second = grading_service.submit_quiz_answer(student, quiz, 2)
    assert first.pk == second.pk
    assert QuizSubmission.objects.filter(quiz=quiz, student=student).count() == 1
    second.refresh_from_db()
    assert second.score == 100


def test_quiz_answer_requires_enrollment(other_student, quiz):
    with pytest.raises(PermissionDenied):
        grading_service.submit_quiz_answer(other_student, quiz, 2)
    assert not QuizSubmission.objects.exists()


def test_invalid_option_writes_nothing(student, quiz, enrollment):
    with pytest.raises(ValidationError):
        grading_service.submit_quiz_answer(student, quiz, 7)
    assert not QuizSubmission.objects.exists()


def test_quiz_answer_logs_and_notifies(student, quiz, enrollment):
    grading_service.submit_quiz_answer(student, quiz, 4)
    assert ActivityLog.objects.filter(user=student, activity="Submitted quiz answer for: Q1").exists()
    assert Notification.objects.filter(
        user=student, type=NotificationType.SUBMISSION, content="Quiz answer submitted: Q1"
    ).exists()


def test_grading_queue_lists_submitted_rows_only(instructor, student, other_student, course, enrollment):
    from LearningManagementApp.domain.services import course_service
    course_service.enroll_student(other_student, course)
    assignment = learning_service.create_assignment(instructor, course, "Essay", None)
    learning_service.submit_assignment(student, assignment, "my essay")
    queue = list(grading_service.list_assignment_submissions(instructor, course))
    assert [r.student_id for r in queue] == [student.pk]


def test_visible_rows_per_role(admin, instructor, student, other_student, row):
    assert list(grading_service.visible_student_assignments(student)) == [row]
    assert list(grading_service.visible_student_assignments(instructor)) == [row]
    assert list(grading_service.visible_student_assignments(admin)) == [row]
    assert list(grading_service.visible_student_assignments(other_student)) == []


def test_store_failure_while_grading_applies_nothing(instructor, row, enrollment):
    with patch.object(progress_service, "recompute_progress_for", side_effect=DatabaseError("boom")):
        with pytest.raises(StoreError):
            grading_service.grade_assignment(instructor, row, 90, "great")
    row.refresh_from_db()
    assert (row.grade, row.feedback) == (None, "")
    assert not Notification.objects.filter(type=NotificationType.GRADE).exists()
    assert not ActivityLog.objects.filter(activity__startswith="Graded assignment").exists()


def test_store_failure_while_answering_quiz_applies_nothing(student, quiz, enrollment):
    with patch.object(progress_service, "recompute_progress_for", side_effect=DatabaseError("boom")):
        with pytest.raises(StoreError) as excinfo:
            grading_service.submit_quiz_answer(student, quiz, 2)
    assert excinfo.value.status_code == 503
    assert not QuizSubmission.objects.exists()
    assert not Notification.objects.filter(type=NotificationType.SUBMISSION).exists()
    enrollment.refresh_from_db()
    assert enrollment.progress == 0
