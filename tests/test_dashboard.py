from conftest import ADMIN

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_admin_dashboard(client, admin_headers):
    response = client.get("/api/dashboard/admin", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_admins"] == 1
    assert data["content"] == {
        "total_services": 0,
        "published_services": 0,
        "homepage_services": 0,
        "total_banners": 0,
        "active_banners": 0,
    }


def test_super_admin_dashboard_lists_admins(client, super_admin_headers, admin_headers):
    response = client.get("/api/dashboard/super-admin", headers=super_admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 1
    assert data["total_admins"] == 1
    assert data["admins"][0]["username"] == ADMIN["username"]
    assert "password_hash" not in data["admins"][0]


def test_super_admin_dashboard_forbidden_for_admins(client, admin_headers):
    response = client.get("/api/dashboard/super-admin", headers=admin_headers)
    assert response.status_code == 403


def test_super_admin_may_use_admin_dashboard(client, super_admin_headers):
    assert client.get("/api/dashboard/admin", headers=super_admin_headers).status_code == 200


def test_dashboard_requires_auth(client):
    assert client.get("/api/dashboard/admin").status_code == 401


def test_registration_refreshes_admin_counts(client, super_admin_headers):
    before = client.get("/api/dashboard/super-admin", headers=super_admin_headers).json()["data"]
    assert before["count"] == 0

    client.post("/api/auth/register", json=ADMIN, headers=super_admin_headers)

    after = client.get("/api/dashboard/super-admin", headers=super_admin_headers).json()["data"]
    assert after["count"] == 1
    assert after["total_admins"] == 1


def test_content_stats_follow_writes(client, admin_headers):
    assert client.get("/api/dashboard/admin", headers=admin_headers).json()["data"]["content"][
        "total_banners"
    ] == 0

    client.post(
        "/api/banners",
        data={},
        files={"image": ("poster.png", PNG, "image/png")},
        headers=admin_headers,
    )

    content = client.get("/api/dashboard/admin", headers=admin_headers).json()["data"]["content"]
    assert content["total_banners"] == 1
    assert content["active_banners"] == 1
