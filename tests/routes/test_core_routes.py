"""Tests for the health check route."""

from unittest.mock import patch


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"] == "ok"
        assert "timestamp" in data

    @patch("neosynth.is_db_available", return_value=False)
    def test_degraded(self, mock_db, client):
        data = client.get("/health").get_json()

        assert data["status"] == "degraded"
        assert data["checks"]["database"] == "unavailable"

    def test_no_cache_headers_added(self, client):
        resp = client.get("/health")

        assert "Cache-Control" not in resp.headers
        assert "Pragma" not in resp.headers
