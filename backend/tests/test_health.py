from __future__ import annotations


def test_health_endpoint(client):
    """GET /api/health should return 200 with status=healthy."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "sampatti-backend"
    assert data["version"] == "0.1.0"
    assert data["checks"]["database"] == "ok"


def test_readiness_endpoint(client):
    """GET /api/health/ready should return 200 with status=ready."""
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_health_needs_no_credential(client):
    """Health is public; no Authorization header is sent."""
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert "Authorization" not in client.headers
