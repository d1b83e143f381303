from datetime import timedelta

from app.features.admin.utils.security import issue_access_token, issue_refresh_token
from conftest import bearer, login


def test_login_success(client, super_admin):
    """Valid credentials return the access token and set the refresh cookie."""
    response = login(client, super_admin["username"], super_admin["password"])

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["data"]["token_type"] == "bearer"
    assert data["data"]["access_token"]
    assert data["data"]["user"]["username"] == "owner"
    assert data["data"]["user"]["role"] == "super_admin"

    # The refresh token never travels in the body
    assert "refresh_token" not in data["data"]
    assert response.cookies.get("refreshToken")
    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie


def test_login_with_email(client, super_admin):
    response = login(client, super_admin["email"].upper(), super_admin["password"])
    assert response.status_code == 200


def test_login_invalid_password(client, super_admin):
    response = login(client, super_admin["username"], "Wrong!Pass1")

    assert response.status_code == 401
    data = response.json()
    assert data["status"] == "error"
    assert data["message"] == "Invalid credentials"
    assert data["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_user_looks_like_bad_password(client, super_admin):
    response = login(client, "nobody", "Str0ng!Pass")
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_login_missing_fields(client):
    response = client.post("/api/auth/login", json={"username": "owner"})
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert any(e["field"] == "password" for e in errors)


def test_account_locks_after_repeated_failures(client, super_admin):
    for _ in range(5):
        assert login(client, super_admin["username"], "Wrong!Pass1").status_code == 401

    # Correct password is refused while locked, with the same message
    response = login(client, super_admin["username"], super_admin["password"])
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Access token required"


def test_me_returns_profile(client, super_admin_headers):
    response = client.get("/api/auth/me", headers=super_admin_headers)
    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["username"] == "owner"
    assert profile["email"] == "owner@example.com"
    assert "password_hash" not in profile
    assert "refresh_token" not in profile


def test_expired_access_token_is_reported(client, super_admin_headers):
    me = client.get("/api/auth/me", headers=super_admin_headers).json()["data"]
    expired = issue_access_token(
        {"sub": me["id"], "username": me["username"], "role": me["role"]},
        expires_delta=timedelta(seconds=-5),
    )

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["code"] == "TOKEN_EXPIRED"


def test_garbage_access_token(client, super_admin):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_refresh_rotates_cookie(client, super_admin):
    original = login(client, super_admin["username"], super_admin["password"]).cookies[
        "refreshToken"
    ]

    response = client.post("/api/auth/refresh")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Access token refreshed"
    assert body["data"]["access_token"]
    rotated = response.cookies["refreshToken"]
    assert rotated != original

    # The new access token works
    me = client.get("/api/auth/me", headers=bearer(response))
    assert me.status_code == 200


def test_refresh_twice_with_same_token(client, super_admin):
    original = login(client, super_admin["username"], super_admin["password"]).cookies[
        "refreshToken"
    ]
    assert client.post("/api/auth/refresh").status_code == 200

    client.cookies.clear()
    client.cookies.set("refreshToken", original)
    response = client.post("/api/auth/refresh")

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_refresh_with_validly_signed_but_unknown_token(client, super_admin_headers):
    me = client.get("/api/auth/me", headers=super_admin_headers).json()["data"]
    forged = issue_refresh_token({"sub": me["id"], "username": me["username"], "role": me["role"]})

    client.cookies.clear()
    client.cookies.set("refreshToken", forged)
    response = client.post("/api/auth/refresh")

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid refresh token"


def test_refresh_without_cookie(client):
    client.cookies.clear()
    response = client.post("/api/auth/refresh")
    assert response.status_code == 401
