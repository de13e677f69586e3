"""Integration tests for API endpoints using Starlette TestClient."""

import pytest
from unittest.mock import MagicMock, patch
from starlette.testclient import TestClient

from nutrilens.main import create_app
from nutrilens.shell import mcp_server
from nutrilens.shell.auth import generate_api_key


@pytest.fixture
def mock_firestore(monkeypatch):
    """Mock Firestore client for testing."""
    monkeypatch.setattr(mcp_server, "_firestore_client", None)
    monkeypatch.setattr(mcp_server, "_auth_client", None)
    with patch("nutrilens.shell.firestore_client.firestore") as mock_fs:
        mock_client = MagicMock()
        mock_fs.Client.return_value = mock_client
        yield mock_client


@pytest.fixture
def client(mock_firestore, monkeypatch):
    """Create test client with mocked Firestore."""
    monkeypatch.setenv("CORS_ORIGINS", "https://nutrilens.example,http://localhost:5173")
    return TestClient(create_app())


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_json(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "nutrilens-mcp"}


class TestRegisterEndpoint:
    """Tests for /auth/register endpoint."""

    def test_register_success(self, client, mock_firestore):
        """Successful registration returns API key and seeds a profile."""
        response = client.post(
            "/auth/register",
            json={"email": "sam@example.com", "name": "Sam"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["api_key"].startswith("nlk_")
        assert data["mcp_url"].endswith("/mcp")

        profile_ref = (
            mock_firestore.collection.return_value.document.return_value
            .collection.return_value.document.return_value
        )
        saved_profile = profile_ref.set.call_args[0][0]
        assert saved_profile["name"] == "Sam"
        assert saved_profile["daily_calorie_goal"] == 2200

    def test_register_duplicate_email(self, client, mock_firestore):
        users = mock_firestore.collection.return_value
        users.where.return_value.limit.return_value.stream.return_value = [MagicMock()]

        response = client.post(
            "/auth/register",
            json={"email": "sam@example.com", "name": "Sam"},
        )

        assert response.status_code == 409
        assert "already exists" in response.json()["error"]

    def test_register_missing_email(self, client):
        response = client.post("/auth/register", json={"name": "Sam"})
        assert response.status_code == 400

    def test_register_invalid_email(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "not-an-email", "name": "Sam"},
        )
        assert response.status_code == 400

    def test_register_missing_name(self, client):
        response = client.post("/auth/register", json={"email": "sam@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "Name is required"

    @pytest.mark.parametrize("body", [["sam@example.com"], "sam@example.com", 42])
    def test_register_json_not_an_object(self, client, body):
        """JSON that is not an object is a client error, not a crash."""
        response = client.post("/auth/register", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Request body must be JSON"}

    def test_register_non_string_fields(self, client):
        response = client.post("/auth/register", json={"email": 123, "name": ["Sam"]})
        assert response.status_code == 400

    def test_register_non_json_body(self, client):
        response = client.post(
            "/auth/register",
            content=b"email=sam",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert response.status_code == 400

    def test_register_storage_failure(self, client, mock_firestore):
        mock_firestore.collection.return_value.document.return_value.set.side_effect = RuntimeError("down")

        response = client.post(
            "/auth/register",
            json={"email": "sam@example.com", "name": "Sam"},
        )

        assert response.status_code == 500


class TestValidateEndpoint:
    """Tests for /auth/validate endpoint."""

    def test_validate_missing_key(self, client):
        response = client.post("/auth/validate", json={})
        assert response.json()["valid"] is False

    def test_validate_invalid_format(self, client):
        response = client.post("/auth/validate", json={"api_key": "invalid_key"})
        assert response.json()["valid"] is False

    def test_validate_nonexistent_key(self, client, mock_firestore):
        mock_firestore.collection.return_value.document.return_value.get.return_value.exists = False

        response = client.post("/auth/validate", json={"api_key": generate_api_key()})
        assert response.json()["valid"] is False

    def test_validate_existing_key(self, client, mock_firestore):
        mock_firestore.collection.return_value.document.return_value.get.return_value.exists = True

        response = client.post("/auth/validate", json={"api_key": generate_api_key()})
        assert response.json()["valid"] is True


class TestCORS:
    """Tests for CORS configuration."""

    def test_cors_preflight_allowed_origin(self, client):
        response = client.options(
            "/auth/register",
            headers={
                "Origin": "https://nutrilens.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers.get("access-control-allow-origin") == "https://nutrilens.example"

    def test_cors_preflight_unknown_origin(self, client):
        response = client.options(
            "/auth/register",
            headers={
                "Origin": "https://elsewhere.example",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 400
        assert "access-control-allow-origin" not in response.headers
