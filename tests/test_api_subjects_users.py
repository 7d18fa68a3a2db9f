from __future__ import annotations

from assignment_tracker.core.models import DEFAULT_SUBJECTS
from assignment_tracker.features.subjects import service as subject_service

SUBJECTS_URL = "/api/components/subjects/"
USERS_URL = "/api/components/users/"


def test_default_subjects_are_seeded(client) -> None:
    subjects = client.get(SUBJECTS_URL).json()
    assert sorted(s["name"] for s in subjects) == sorted(s["name"] for s in DEFAULT_SUBJECTS)
    math = next(s for s in subjects if s["name"] == "Mathematics")
    assert math["color"] == "#2196F3"
    assert math["teacher"] == "Mr. Johnson"


def test_create_subject(client) -> None:
    response = client.post(SUBJECTS_URL, json={"name": " Art ", "teacher": "Ms. Lee"})
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Art"
    assert body["color"] in subject_service.SUBJECT_PALETTE

    assert client.post(SUBJECTS_URL, json={"name": "Art"}).status_code == 409
    assert client.post(SUBJECTS_URL, json={"name": "Music", "color": "red"}).status_code == 422


def test_update_and_delete_subject(client) -> None:
    created = client.post(SUBJECTS_URL, json={"name": "Art", "color": "#123456"}).json()
    updated = client.put(f"{SUBJECTS_URL}{created['id']}", json={"color": "#ABCDEF"}).json()
    assert updated["color"] == "#ABCDEF"
    assert updated["name"] == "Art"

    assert client.put(f"{SUBJECTS_URL}{created['id']}", json={"name": "English"}).status_code == 409
    assert client.put(f"{SUBJECTS_URL}999", json={"color": "#000000"}).status_code == 404

    assert client.delete(f"{SUBJECTS_URL}{created['id']}").status_code == 204
    assert client.delete(f"{SUBJECTS_URL}{created['id']}").status_code == 404


def test_ensure_subject_is_idempotent(tracker_app) -> None:
    first = subject_service.ensure_subject("Drama", teacher="Mr. Park")
    second = subject_service.ensure_subject("Drama")
    assert first.id == second.id
    assert second.teacher == "Mr. Park"
    assert subject_service.ensure_subject("English").color == "#4CAF50"


def test_current_user_defaults_to_configured_user(client) -> None:
    current = client.get(f"{USERS_URL}current").json()
    assert current["name"] == "Student"


def test_create_and_select_user(client) -> None:
    response = client.post(USERS_URL, json={"name": "Sam", "email": "sam@example.com"})
    assert response.status_code == 201
    sam = response.json()

    current = client.get(f"{USERS_URL}current", headers={"X-User-Id": str(sam["id"])}).json()
    assert current["name"] == "Sam"
    assert current["email"] == "sam@example.com"

    assert client.post(USERS_URL, json={"name": "Sam"}).status_code == 409
    assert {u["name"] for u in client.get(USERS_URL).json()} == {"Student", "Sam"}


def test_unknown_user_header(client) -> None:
    assert client.get(f"{USERS_URL}current", headers={"X-User-Id": "404"}).status_code == 404
