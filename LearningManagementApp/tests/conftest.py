import pytest
from model_bakery import baker

from LearningManagementApp.core.choices import UserRole
from LearningManagementApp.domain.services import course_service

PASSWORD = "pass1234"


def make_user(role, **kwargs):
    u = baker.make("users.User", role=role, **kwargs)
    u.set_password(PASSWORD)
    u.save()
    return u


@pytest.fixture
def admin():
    return make_user(UserRole.ADMIN, username="admin", email="admin@example.com")


@pytest.fixture
def instructor():
    return make_user(UserRole.INSTRUCTOR, username="teach", email="teach@example.com")


@pytest.fixture
def student():
    return make_user(UserRole.STUDENT, username="stud", email="stud@example.com")


@pytest.fixture
def other_student():
    return make_user(UserRole.STUDENT, username="late", email="late@example.com")


@pytest.fixture
def course(instructor):
    return baker.make("courses.Course", title="Algebra", instructor=instructor, approved=True)


@pytest.fixture
def enrollment(student, course):
    return course_service.enroll_student(student, course)
