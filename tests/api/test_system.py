"""Tests for system endpoints (health, auth, tasks, errors)."""

from fastapi.testclient import TestClient

from api import dependencies as deps
from api.app import create_app
from api.auth import get_api_key_path, get_or_create_api_key


class TestHealth:
    """Tests for GET /health."""

    def test_health_no_auth(self, client):
        """Health endpoint should work without auth."""
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestApiKey:
    """Tests for API key authentication."""

    def _real_auth_client(self, app, test_config):
        real_app = create_app()
        real_app.dependency_overrides[deps.get_config] = lambda: test_config
        real_app.dependency_overrides[deps.get_settings_store] = app.dependency_overrides[
            deps.get_settings_store
        ]
        return TestClient(real_app)

    def test_missing_key_returns_401(self, app, test_config):
        resp = self._real_auth_client(app, test_config).get("/api/v1/settings")
        assert resp.status_code == 401

    def test_wrong_key_returns_403(self, app, test_config):
        resp = self._real_auth_client(app, test_config).get(
            "/api/v1/settings", headers={"X-API-Key": "nope"}
        )
        assert resp.status_code == 403

    def test_generated_key_accepted(self, app, test_config):
        key = get_or_create_api_key(get_api_key_path(test_config))

        resp = self._real_auth_client(app, test_config).get(
            "/api/v1/settings", headers={"X-API-Key": key}
        )

        assert resp.status_code == 200

    def test_key_is_stable(self, test_config):
        path = get_api_key_path(test_config)
        assert get_or_create_api_key(path) == get_or_create_api_key(path)
        assert path.name == ".api-key"


class TestTasks:
    """Tests for GET /api/v1/tasks."""

    def test_list_tasks_empty(self, client, auth_headers):
        resp = client.get("/api/v1/tasks", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == []

    def test_get_nonexistent_task(self, client, auth_headers):
        resp = client.get("/api/v1/tasks/nonexistent", headers=auth_headers)
        assert resp.status_code == 404


class TestErrors:
    """Service errors are mapped to status codes and recorded."""

    def test_error_body(self, client, auth_headers):
        resp = client.post("/api/v1/generate", headers=auth_headers)

        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["user_message"] == "Please check your input and try again."
        assert body["retryable"] is False

    def test_error_stats_and_clear(self, client, auth_headers):
        client.post("/api/v1/generate", headers=auth_headers)

        stats = client.get("/api/v1/errors", headers=auth_headers).json()
        assert stats["total"] == 1
        assert stats["by_code"] == {"VALIDATION_ERROR": 1}

        assert client.delete("/api/v1/errors", headers=auth_headers).status_code == 204
        assert client.get("/api/v1/errors", headers=auth_headers).json()["total"] == 0
