"""
Tests de API - Health y disponibilidad
"""


class TestHealthAPI:
    """Tests de endpoints de health"""

    def test_health_ready_returns_200(self, client):
        """GET /health/ready debe retornar 200"""
        r = client.get("/health/ready")
        assert r.status_code == 200

    def test_health_ready_response_body(self, client):
        r = client.get("/health/ready")
        assert r.json() == {"status": "ok", "database": "ok"}

    def test_security_headers(self, client):
        r = client.get("/health/ready")
        assert r.headers.get("X-Content-Type-Options") == "nosniff"
