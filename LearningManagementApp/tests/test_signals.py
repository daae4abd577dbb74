import pytest
from model_bakery import baker
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.domain.services import grading_service, learning_service
from LearningManagementApp.learning.models import Assignment, StudentAssignment
from LearningManagementApp.messaging.models import ActivityLog

pytestmark = pytest.mark.django_db


def test_deleting_graded_assignment_recomputes_progress(
    django_capture_on_commit_callbacks, instructor, course, student, enrollment
):
    kept = learning_service.create_assignment(instructor, course, "HW1", None)
    dropped = learning_service.create_assignment(instructor, course, "HW2", None)
    grading_service.grade_assignment(instructor, StudentAssignment.objects.get(assignment=kept, student=student), 80)
    grading_service.grade_assignment(instructor, StudentAssignment.objects.get(assignment=dropped, student=student), 20)
    enrollment.refresh_from_db()
    assert enrollment.progress == 25

    dropped_id = dropped.pk
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        learning_service.delete_assignment(instructor, dropped)

    assert len(callbacks) == 1
    enrollment.refresh_from_db()
    assert enrollment.progress == 40
    assert not StudentAssignment.objects.filter(assignment_id=dropped_id).exists()
    assert ActivityLog.objects.filter(activity="Deleted assignment: HW2 from course: Algebra").exists()


def test_deleting_quiz_recomputes_progress(django_capture_on_commit_callbacks, instructor, course, student, enrollment):
    quiz = learning_service.create_quiz(instructor, course, "Q1", "2+2?", ["3", "4", "5", "6"], 2)
    grading_service.submit_quiz_answer(student, quiz, 2)
    enrollment.refresh_from_db()
    assert enrollment.progress == 50

    with django_capture_on_commit_callbacks(execute=True):
        learning_service.delete_quiz(instructor, quiz)

    enrollment.refresh_from_db()
    assert enrollment.progress == 0


def test_ungraded_assignment_delete_schedules_nothing(django_capture_on_commit_callbacks, instructor, course, enrollment):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    with django_capture_on_commit_callbacks() as callbacks:
        learning_service.delete_assignment(instructor, assignment)
    assert callbacks == []


def test_only_course_managers_delete_content(admin, instructor, course, student, enrollment):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    stranger = baker.make("users.User", role="Instructor")
    for user in (student, stranger):
        with pytest.raises(PermissionDenied):
            learning_service.delete_assignment(user, assignment)
    assignment_id = assignment.pk
    assert Assignment.objects.filter(pk=assignment_id).exists()
    learning_service.delete_assignment(admin, assignment)
    assert not Assignment.objects.filter(pk=assignment_id).exists()
