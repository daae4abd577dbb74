import pytest
from rest_framework.test import APIClient

PASSWORD = "pass1234"

pytestmark = pytest.mark.django_db

API = "/api/v1"


def login(user) -> APIClient:
    client = APIClient()
    resp = client.post(f"{API}/auth/token/", {"username": user.username, "password": PASSWORD}, format="json")
    assert resp.status_code == 200, resp.content
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.data['access']}")
    return client


def test_login_rejects_bad_password(student):
    resp = APIClient().post(f"{API}/auth/token/", {"username": "stud", "password": "nope"}, format="json")
    assert resp.status_code == 400


def test_anonymous_requests_are_rejected():
    assert APIClient().get(f"{API}/courses/").status_code == 401


def test_register_then_login():
    client = APIClient()
    resp = client.post(
        f"{API}/auth/register/",
        {"username": "fresh", "password": "secret123", "email": "fresh@example.com"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["role"] == "Student"
    token = client.post(f"{API}/auth/token/", {"username": "fresh", "password": "secret123"}, format="json")
    assert token.status_code == 200


def test_submit_and_grade_flow(instructor, student, course):
    student_client = login(student)
    instructor_client = login(instructor)

    resp = student_client.post(f"{API}/courses/{course.pk}/enroll/")
    assert resp.status_code == 201
    assert resp.data["progress"] == 0

    resp = instructor_client.post(
        f"{API}/courses/{course.pk}/assignments/", {"title": "HW1", "description": "Read ch. 1"}, format="json"
    )
    assert resp.status_code == 201

    rows = student_client.get(f"{API}/student-assignments/").data["results"]
    assert len(rows) == 1
    row_id = rows[0]["id"]

    resp = student_client.post(f"{API}/student-assignments/{row_id}/submit/", {"text": "hello"}, format="json")
    assert resp.status_code == 200
    assert resp.data["submission"] == "hello"

    resp = student_client.post(f"{API}/student-assignments/{row_id}/grade/", {"grade": 100}, format="json")
    assert resp.status_code == 403

    resp = instructor_client.post(f"{API}/student-assignments/{row_id}/grade/", {"grade": 150}, format="json")
    assert resp.status_code == 400

    resp = instructor_client.post(
        f"{API}/student-assignments/{row_id}/grade/", {"grade": 80, "feedback": "ok"}, format="json"
    )
    assert resp.status_code == 200
    assert (resp.data["grade"], resp.data["feedback"]) == (80, "ok")

    enrollments = student_client.get(f"{API}/enrollments/").data["results"]
    assert enrollments[0]["progress"] == 40
    assert enrollments[0]["standing"] == "Needs Improvement"

    report = instructor_client.get(f"{API}/courses/{course.pk}/report/")
    assert report.status_code == 200
    assert report.data[0]["progress"] == 40


def test_quiz_answer_flow(instructor, student, course, enrollment):
    instructor_client = login(instructor)
    student_client = login(student)

    resp = instructor_client.post(
        f"{API}/courses/{course.pk}/quizzes/",
        {"title": "Q1", "question": "2+2?", "options": ["3", "4", "5", "6"], "correct_option": 2},
        format="json",
    )
    assert resp.status_code == 201
    quiz_id = resp.data["id"]

    listed = student_client.get(f"{API}/courses/{course.pk}/quizzes/").data["results"]
    assert "correct_option" not in listed[0]

    resp = student_client.post(
        f"{API}/courses/{course.pk}/quizzes/{quiz_id}/answer/", {"selected_option": 2}, format="json"
    )
    assert resp.status_code == 201
    assert resp.data["score"] == 100

    enrollments = student_client.get(f"{API}/enrollments/").data["results"]
    assert enrollments[0]["progress"] == 50


def test_outsider_cannot_see_course_assignments(instructor, other_student, course, enrollment):
    resp = login(other_student).get(f"{API}/courses/{course.pk}/assignments/")
    assert resp.status_code == 404


def test_admin_reports_and_settings(admin, student, course, enrollment):
    client = login(admin)
    resp = client.get(f"{API}/courses/progress-report/")
    assert resp.status_code == 200
    assert resp.data[0]["course_id"] == course.pk

    resp = client.patch(f"{API}/settings/", {"pass_threshold": 40}, format="json")
    assert resp.status_code == 200
    assert resp.data["pass_threshold"] == 40.0

    assert login(student).patch(f"{API}/settings/", {"pass_threshold": 10}, format="json").status_code == 403


def test_dashboard_for_student(student, course, enrollment):
    resp = login(student).get(f"{API}/me/dashboard/")
    assert resp.status_code == 200
    assert resp.data["role"] == "Student"
    assert resp.data["courses"][0]["progress"] == 0
