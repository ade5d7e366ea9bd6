"""HTTP tests for registration, login and the current-user endpoint."""

from datetime import timedelta

from conftest import bearer, register

from worktime.core.security import decode_token, issue_token


def test_register_returns_user_and_token(client):
    body = register(client, email="  New@Example.COM ", name="Grace")

    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["name"] == "Grace"
    assert "createdAt" in body["user"]
    assert "passwordHash" not in body["user"] and "password_hash" not in body["user"]
    payload = decode_token(body["token"])
    assert payload.userId == body["user"]["id"]
    assert payload.email == "new@example.com"


def test_register_duplicate_email_is_rejected(client):
    register(client)
    response = client.post("/api/auth/register", json={"email": "a@b.com", "password": "secret1", "name": "Ada"})

    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}


def test_register_validation_errors(client):
    response = client.post("/api/auth/register", json={"email": "nope", "password": "123", "name": " "})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    fields = {item["field"] for item in body["errors"]}
    assert fields == {"email", "password", "name"}


def test_login_then_me_returns_same_user(client):
    registered = register(client)

    response = client.post("/api/auth/login", json={"email": "a@b.com", "password": "secret1"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "a@b.com"
    assert body["user"]["id"] == registered["user"]["id"]

    me = client.get("/api/auth/me", headers=bearer(body["token"]))
    assert me.status_code == 200
    user = me.json()["user"]
    assert user["id"] == registered["user"]["id"]
    assert user["lastLogin"] is not None


def test_login_with_wrong_password(client):
    register(client)
    response = client.post("/api/auth/login", json={"email": "a@b.com", "password": "wrong-one"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password"


def test_login_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "ghost@b.com", "password": "secret1"})
    assert response.status_code == 401


def test_me_requires_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "No token provided"}
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_me_rejects_expired_and_forged_tokens(client):
    user = register(client)["user"]
    expired = issue_token(user["id"], user["email"], expires_delta=timedelta(seconds=-5))

    assert client.get("/api/auth/me", headers=bearer(expired)).status_code == 401
    assert client.get("/api/auth/me", headers=bearer("not-a-jwt")).status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Basic abc"}).status_code == 401


def test_me_for_deleted_user_is_not_found(client):
    token = issue_token("00000000-0000-0000-0000-000000000000", "gone@b.com")
    response = client.get("/api/auth/me", headers=bearer(token))
    assert response.status_code == 404
