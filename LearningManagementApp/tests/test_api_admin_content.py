import pytest
from rest_framework.test import APIClient

from LearningManagementApp.domain.services import learning_service, messaging_service
from LearningManagementApp.learning.models import Assignment, Material
from LearningManagementApp.users.models import User

pytestmark = pytest.mark.django_db

API = "/api/v1"


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def test_admin_lists_users_by_role(admin, instructor, student, other_student):
    client = client_for(admin)
    resp = client.get(f"{API}/users/", {"role": "Student"})
    assert resp.status_code == 200
    assert [u["username"] for u in resp.data["results"]] == ["late", "stud"]
    assert client.get(f"{API}/users/", {"role": "Janitor"}).status_code == 400

    counts = client.get(f"{API}/users/by-role/").data
    assert {row["role"]: row["count"] for row in counts} == {"Admin": 1, "Instructor": 1, "Student": 2}


def test_user_management_requires_admin(instructor, student):
    assert client_for(instructor).get(f"{API}/users/").status_code == 403
    assert client_for(student).delete(f"{API}/users/{instructor.pk}/").status_code == 403
    assert User.objects.filter(pk=instructor.pk).exists()


def test_admin_edits_resets_and_deletes_user(admin, student):
    client = client_for(admin)
    resp = client.patch(f"{API}/users/{student.pk}/", {"role": "Instructor", "first_name": "Ada"}, format="json")
    assert resp.status_code == 200
    assert (resp.data["role"], resp.data["first_name"]) == ("Instructor", "Ada")

    resp = client.post(f"{API}/users/{student.pk}/reset-password/", {"new_password": "fresh-secret"}, format="json")
    assert resp.status_code == 204
    student.refresh_from_db()
    assert student.check_password("fresh-secret")

    resp = client.post(f"{API}/users/{student.pk}/reset-password/", {"new_password": "abc"}, format="json")
    assert resp.status_code == 400

    assert client.delete(f"{API}/users/{student.pk}/").status_code == 204
    assert not User.objects.filter(pk=student.pk).exists()
    assert client.delete(f"{API}/users/{admin.pk}/").status_code == 400


def test_materials_route(instructor, student, other_student, course, enrollment):
    url = f"{API}/courses/{course.pk}/materials/"
    resp = client_for(instructor).post(url, {"title": "Syllabus", "content": "Week 1: limits"}, format="json")
    assert resp.status_code == 201
    assert Material.objects.filter(course=course, title="Syllabus").exists()

    listed = client_for(student).get(url)
    assert listed.status_code == 200
    assert [m["title"] for m in listed.data["results"]] == ["Syllabus"]

    assert client_for(student).post(url, {"title": "Mine"}, format="json").status_code == 403
    assert client_for(other_student).get(url).status_code == 404


def test_sent_box_lists_outgoing_messages(instructor, student, course, enrollment):
    messaging_service.send_message(instructor, student, course, "Office hours moved")
    client = client_for(instructor)
    assert client.get(f"{API}/messages/").data["results"] == []
    sent = client.get(f"{API}/messages/", {"box": "sent"}).data["results"]
    assert [m["content"] for m in sent] == ["Office hours moved"]
    assert len(client_for(student).get(f"{API}/messages/").data["results"]) == 1


def test_course_manager_deletes_assignment(instructor, student, course, enrollment):
    assignment = learning_service.create_assignment(instructor, course, "HW1", None)
    url = f"{API}/courses/{course.pk}/assignments/{assignment.pk}/"
    assert client_for(student).delete(url).status_code == 403
    assert client_for(instructor).delete(url).status_code == 204
    assert not Assignment.objects.filter(pk=assignment.pk).exists()
