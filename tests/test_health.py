def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200

    payload = response.json()
    assert payload["status_code"] == 200
    assert payload["status"] == "success"
    assert payload["message"] == "Service is healthy"
    assert payload["data"]["status"] == "OK"
    assert payload["data"]["environment"] == "test"
    assert payload["data"]["database"] == "up"
    assert payload["data"]["cache"] == "up"
    assert payload["data"]["timestamp"].endswith("Z")


def test_health_reports_cache_outage(client, fake_redis):
    fake_redis.fail = True
    response = client.get("/health")

    # The API keeps serving without Redis
    assert response.status_code == 200
    assert response.json()["data"]["cache"] == "down"


def test_health_is_not_under_api_prefix(client):
    assert client.get("/api/health").status_code == 404


def test_root_info(client):
    response = client.get("/")
    assert response.status_code == 200
    payload = response.json()
    assert payload["version"] == "1.0.0"
    assert payload["docs_url"] == "/docs"
    assert payload["api_base"] == "/api"


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_public_reads_survive_redis_outage(client, fake_redis):
    fake_redis.fail = True
    response = client.get("/api/services/active")
    assert response.status_code == 200
    assert response.json()["data"]["services"] == []
