"""Tests for login, registration and the current-user endpoint."""

from fastapi.testclient import TestClient

from helpers import auth_headers, register


def test_register_returns_token_and_public_user(client: TestClient) -> None:
    """Test registration creates the user and logs it in."""
    response = client.post(
        "/api/auth/register",
        json={"email": "a@x.com", "password": "pw", "name": "A"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Registration successful"
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["email"] == "a@x.com"
    assert user["name"] == "A"
    assert "createdAt" in user
    assert "password" not in user
    assert "passwordHash" not in user


def test_register_then_login_yields_verifiable_token(client: TestClient) -> None:
    """Test the login token verifies to the registered user's id."""
    registered = register(client, "a@x.com", password="pw", name="A")

    response = client.post("/api/auth/login", json={"email": "a@x.com", "password": "pw"})

    assert response.status_code == 200
    data = response.json()["data"]
    identity = client.app.state.token_service.verify(data["token"])
    assert identity.id == registered["user"]["id"]
    assert identity.email == "a@x.com"


def test_register_duplicate_email(client: TestClient) -> None:
    """Test a second registration with the same email is a conflict."""
    register(client, "a@x.com")

    response = client.post(
        "/api/auth/register",
        json={"email": "a@x.com", "password": "pw2", "name": "A2"},
    )

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": {"code": "DUPLICATE_EMAIL", "message": "User already exists with this email"},
    }


def test_register_missing_field(client: TestClient) -> None:
    """Test registration without a name reports the missing field."""
    response = client.post("/api/auth/register", json={"email": "a@x.com", "password": "pw"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELD"


def test_register_blank_field(client: TestClient) -> None:
    """Test whitespace-only values count as missing."""
    response = client.post("/api/auth/register", json={"email": "a@x.com", "password": "pw", "name": "  "})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELD"


def test_login_wrong_password(client: TestClient) -> None:
    """Test a bad password is rejected as invalid credentials."""
    register(client, "a@x.com", password="pw")

    response = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["error"] == {"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"}


def test_login_unknown_email_looks_like_wrong_password(client: TestClient) -> None:
    """Test an unknown email fails exactly like a wrong password."""
    response = client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "pw"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_login_missing_password(client: TestClient) -> None:
    """Test login without a password is a validation error."""
    response = client.post("/api/auth/login", json={"email": "a@x.com"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Please provide email and password"


def test_me_returns_caller(client: TestClient) -> None:
    """Test /me returns the public profile of the token's user."""
    registered = register(client, "a@x.com", name="A")

    response = client.get("/api/auth/me", headers=auth_headers(registered["token"]))

    assert response.status_code == 200
    assert response.json()["data"] == registered["user"]


def test_me_for_unknown_user(client: TestClient) -> None:
    """Test a valid token for a user that does not exist yields 404."""
    token = client.app.state.token_service.issue(999, "ghost@x.com")

    response = client.get("/api/auth/me", headers=auth_headers(token))

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "User not found"


def test_me_requires_token(client: TestClient) -> None:
    """Test /me is behind the authorization gate."""
    response = client.get("/api/auth/me")

    assert response.status_code == 401
