from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from edusocial.config import Settings
from edusocial.infrastructure.storage import StorageError
from edusocial.main import create_app

PASSWORD = "secret123"


class FakeStorage:
    """In-memory stand-in for the object store."""

    bucket = "test-bucket"

    def __init__(self):
        self.objects = {}
        self.fail = False

    def upload_bytes(self, key, data, content_type):
        if self.fail:
            raise StorageError("bucket unreachable")
        self.objects[key] = (data, content_type)
        return f"https://cdn.example.test/{key}"


@pytest.fixture
def test_settings():
    return Settings(
        APP_ENV="test",
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        PASSWORD_HASH_ROUNDS=4,
        LOG_LEVEL="WARNING",
        RATE_LIMIT_ENABLED=False,
        STORAGE_BUCKET=None,
        STORAGE_ACCESS_KEY_ID=None,
        STORAGE_SECRET_ACCESS_KEY=None,
    )


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def app(test_settings, storage):
    application = create_app(test_settings)
    application.state.storage = storage
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def iso(dt):
    return dt.isoformat()


def due_in(**delta):
    return iso(datetime.now(timezone.utc) + timedelta(**delta))


def register(client, name, email, password=PASSWORD):
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    body = r.json()
    return {"id": body["user"]["id"], "token": body["token"], "user": body["user"], "headers": auth(body["token"])}


def login(client, email, password=PASSWORD):
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    body = r.json()
    return {"id": body["user"]["id"], "token": body["token"], "user": body["user"], "headers": auth(body["token"])}


def promote(client, admin, user_id, role):
    r = client.patch(f"/users/{user_id}/role", json={"role": role}, headers=admin["headers"])
    assert r.status_code == 200, r.text
    return r.json()["user"]


@pytest.fixture
def admin(client):
    return register(client, "Ada Admin", "ada@example.com")


@pytest.fixture
def professor(client, admin):
    account = register(client, "Paul Professor", "paul@example.com")
    promote(client, admin, account["id"], "professor")
    # role is carried in the token, so log in again after promotion
    return login(client, "paul@example.com")


@pytest.fixture
def other_professor(client, admin):
    account = register(client, "Olga Professor", "olga@example.com")
    promote(client, admin, account["id"], "professor")
    return login(client, "olga@example.com")


@pytest.fixture
def student(client, admin):
    return register(client, "Sam Student", "sam@example.com")


@pytest.fixture
def other_student(client, admin):
    return register(client, "Sue Student", "sue@example.com")


def create_assignment(client, owner, title="Essay on recursion", description="Explain recursion with examples.", **due):
    due = due or {"days": 7}
    r = client.post(
        "/assignments",
        json={"title": title, "description": description, "dueDate": due_in(**due)},
        headers=owner["headers"],
    )
    assert r.status_code == 201, r.text
    return r.json()["assignment"]
