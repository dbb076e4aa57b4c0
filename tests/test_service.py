from fastapi.testclient import TestClient

from edusocial.config import Settings
from edusocial.infrastructure.db import Database
from edusocial.infrastructure.storage import S3StorageClient, build_storage
from edusocial.main import create_app


def test_db_status_connected(client):
    r = client.get("/db-status")
    assert r.status_code == 200
    body = r.json()
    assert body["isConnected"] is True
    assert body["label"] == "connected"
    assert body["state"] == 1


def test_database_connect_is_idempotent():
    db = Database("sqlite://")
    engine = db.connect()
    assert db.connect() is engine
    assert db.status()["isConnected"] is True
    db.dispose()
    assert db.status()["isConnected"] is False


def test_metrics_exposed(client):
    client.get("/health")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "http_requests_total" in r.text


def test_unknown_route_uses_error_body(client):
    r = client.get("/nowhere")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_api_prefix(test_settings):
    test_settings.API_PREFIX = "/api"
    with TestClient(create_app(test_settings)) as c:
        r = c.post("/api/auth/register", json={"name": "Prefixed", "email": "p@example.com", "password": "secret123"})
        assert r.status_code == 201
        assert c.get("/health").status_code == 200


def test_rate_limit_on_login_uses_app_config(test_settings):
    test_settings.RATE_LIMIT_ENABLED = True
    test_settings.LOGIN_RATE_LIMIT = "3/minute"
    app = create_app(test_settings)
    try:
        with TestClient(app) as c:
            payload = {"email": "nobody@example.com", "password": "whatever"}
            codes = [c.post("/auth/login", json=payload).status_code for _ in range(4)]
            assert codes == [401, 401, 401, 429]
            assert "error" in c.post("/auth/login", json=payload).json()
    finally:
        app.state.limiter.reset()
        app.state.limiter.enabled = False


def test_storage_built_only_when_configured():
    assert build_storage(Settings(STORAGE_BUCKET=None)) is None
    client = build_storage(
        Settings(
            STORAGE_BUCKET="bucket",
            STORAGE_ACCESS_KEY_ID="key",
            STORAGE_SECRET_ACCESS_KEY="secret",
            STORAGE_ENDPOINT="https://storage.example.com",
            STORAGE_REGION="auto",
        )
    )
    assert isinstance(client, S3StorageClient)
    assert client.public_url("a/b.pdf") == "https://storage.example.com/bucket/a/b.pdf"
