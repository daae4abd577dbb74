import datetime

import pytest
from model_bakery import baker
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.choices import NotificationType
from LearningManagementApp.core.exceptions import NotFoundError, ValidationError
from LearningManagementApp.domain.services import course_service, learning_service
from LearningManagementApp.learning.models import Assignment, Material, Quiz, StudentAssignment
from LearningManagementApp.messaging.models import ActivityLog, Notification

pytestmark = pytest.mark.django_db


def test_assignment_fans_out_to_enrolled_students(instructor, course, student, other_student, enrollment):
    course_service.enroll_student(other_student, course)
    assignment = learning_service.create_assignment(
        instructor, course, "HW1", datetime.date(2030, 1, 1), description="Chapter 1"
    )
    rows = StudentAssignment.objects.filter(assignment=assignment)
    assert sorted(rows.values_list("student_id", flat=True)) == sorted([student.pk, other_student.pk])
    assert all(r.grade is None and r.submission is None for r in rows)
    assert assignment.deadline == datetime.date(2030, 1, 1)


def test_late_enrollee_gets_no_row_and_cannot_submit(instructor, course, enrollment, other_student):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    course_service.enroll_student(other_student, course)
    assert not StudentAssignment.objects.filter(assignment=assignment, student=other_student).exists()
    with pytest.raises(NotFoundError):
        learning_service.submit_assignment(other_student, assignment, "hello")


def test_assignment_in_empty_course_creates_no_rows(instructor, course):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    assert not StudentAssignment.objects.filter(assignment=assignment).exists()


def test_only_course_instructor_or_admin_creates_assignments(admin, course, student, enrollment):
    other_instructor = baker.make("users.User", role="Instructor")
    with pytest.raises(PermissionDenied):
        learning_service.create_assignment(other_instructor, course, "X", None)
    with pytest.raises(PermissionDenied):
        learning_service.create_assignment(student, course, "X", None)
    assert learning_service.create_assignment(admin, course, "By admin", None).pk


def test_new_assignment_notifies_enrolled_students(instructor, course, student, enrollment):
    learning_service.create_assignment(instructor, course, "HW1", None)
    assert Notification.objects.filter(
        user=student, type=NotificationType.COURSE_UPDATE, content="New assignment added: HW1"
    ).exists()


def test_submit_overwrites_text_and_sets_date(instructor, course, student, enrollment):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    learning_service.submit_assignment(student, assignment, "first")
    row = learning_service.submit_assignment(student, assignment, "second")
    row.refresh_from_db()
    assert row.submission == "second"
    assert row.submitted_date is not None
    assert Notification.objects.filter(
        user=student, type=NotificationType.SUBMISSION, content="Assignment submitted: HW1"
    ).exists()


def test_empty_submission_rejected(instructor, course, student, enrollment):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    with pytest.raises(ValidationError):
        learning_service.submit_assignment(student, assignment, "   ")
    row = StudentAssignment.objects.get(assignment=assignment, student=student)
    assert row.submission is None


def test_create_quiz_and_notify(instructor, course, student, enrollment):
    quiz = learning_service.create_quiz(instructor, course, "Q1", "Capital?", ["A", "B", "C", "D"], 3, 50)
    assert (quiz.options, quiz.correct_option, quiz.total_points) == (["A", "B", "C", "D"], 3, 50)
    assert Notification.objects.filter(user=student, content="New quiz added to course: Algebra").exists()


def test_bad_quiz_definition_writes_nothing(instructor, course):
    with pytest.raises(ValidationError):
        learning_service.create_quiz(instructor, course, "Q1", "?", ["A", "B"], 1)
    assert not Quiz.objects.exists()


def test_listing_requires_course_visibility(instructor, course, student, other_student, enrollment):
    learning_service.create_assignment(instructor, course, "HW1", None)
    assert [a.title for a in learning_service.list_assignments(student, course)] == ["HW1"]
    assert learning_service.list_assignments(instructor, course).count() == 1
    with pytest.raises(NotFoundError):
        learning_service.list_assignments(other_student, course)
    with pytest.raises(NotFoundError):
        learning_service.list_quizzes(other_student, course)


def test_student_assignment_list_is_per_student(instructor, course, student, enrollment):
    learning_service.create_assignment(instructor, course, "HW1", None)
    learning_service.create_assignment(instructor, course, "HW2", None)
    rows = learning_service.list_student_assignments(student, course)
    assert {r.assignment.title for r in rows} == {"HW1", "HW2"}
    assert Assignment.objects.count() == 2


def test_material_published_to_enrolled_students(instructor, course, student, other_student, enrollment):
    material = learning_service.add_material(instructor, course, "Week 1 notes", "Limits and continuity")
    assert material.upload_date is not None
    assert Notification.objects.filter(
        user=student, type=NotificationType.COURSE_UPDATE, content="New material added: Week 1 notes"
    ).exists()
    assert not Notification.objects.filter(user=other_student).exists()
    assert ActivityLog.objects.filter(user=instructor, activity="Added material to course: Algebra").exists()


def test_material_requires_course_manager_and_title(instructor, course, student, enrollment):
    with pytest.raises(PermissionDenied):
        learning_service.add_material(student, course, "Notes")
    with pytest.raises(ValidationError):
        learning_service.add_material(instructor, course, "  ")
    assert not Material.objects.exists()


def test_materials_visible_to_managers_and_enrolled_only(admin, instructor, course, student, other_student, enrollment):
    learning_service.add_material(instructor, course, "Syllabus")
    assert [m.title for m in learning_service.list_materials(student, course)] == ["Syllabus"]
    assert learning_service.list_materials(admin, course).count() == 1
    with pytest.raises(NotFoundError):
        learning_service.list_materials(other_student, course)
