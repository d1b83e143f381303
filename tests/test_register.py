from conftest import ADMIN, SUPER_ADMIN, login


def test_first_registration_bootstraps_super_admin(client):
    response = client.post("/api/auth/register", json=SUPER_ADMIN)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["role"] == "super_admin"
    assert data["username"] == "owner"
    assert "password_hash" not in data


def test_registration_closed_without_token_once_bootstrapped(client, super_admin):
    response = client.post("/api/auth/register", json=ADMIN)
    assert response.status_code == 401


def test_super_admin_registers_admins(client, super_admin_headers):
    response = client.post("/api/auth/register", json=ADMIN, headers=super_admin_headers)

    assert response.status_code == 201
    assert response.json()["data"]["role"] == "admin"


def test_admin_cannot_register_admins(client, admin_headers):
    payload = {**ADMIN, "email": "third@example.com", "username": "third"}
    response = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert response.status_code == 403


def test_second_super_admin_is_refused(client, super_admin_headers):
    payload = {**ADMIN, "role": "super_admin"}
    response = client.post("/api/auth/register", json=payload, headers=super_admin_headers)

    assert response.status_code == 403
    assert "Only one super_admin is allowed" in response.json()["message"]


def test_duplicate_email_and_username(client, super_admin_headers):
    dup_email = {**ADMIN, "email": SUPER_ADMIN["email"]}
    response = client.post("/api/auth/register", json=dup_email, headers=super_admin_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Email already registered"

    dup_username = {**ADMIN, "username": "OWNER"}
    response = client.post("/api/auth/register", json=dup_username, headers=super_admin_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Username already taken"


def test_weak_password_is_rejected(client):
    response = client.post("/api/auth/register", json={**SUPER_ADMIN, "password": "weakpass"})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors[0]["field"] == "password"
    assert "uppercase" in errors[0]["message"]


def test_html_is_stripped_from_name(client):
    response = client.post(
        "/api/auth/register", json={**SUPER_ADMIN, "name": "<b>Site</b> Owner<script></script>"}
    )
    assert response.status_code == 201
    assert response.json()["data"]["name"] == "Site Owner"


def test_registered_admin_can_login(client, super_admin_headers):
    client.post("/api/auth/register", json=ADMIN, headers=super_admin_headers)
    response = login(client, ADMIN["username"], ADMIN["password"])
    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == "admin"
