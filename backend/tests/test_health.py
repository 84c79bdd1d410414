"""Tests for service health endpoints."""


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "tradehub-backend"


def test_health_connected(client, mock_db):
    response = client.get("/health")
    assert response.json() == {"status": "healthy", "database": "connected"}
    mock_db.table.assert_called_with("users")


def test_health_degraded(client, mock_db):
    mock_db.table.side_effect = RuntimeError("connection refused")
    data = client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["database"].startswith("error: connection refused")
