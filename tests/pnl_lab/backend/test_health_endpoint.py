from fastapi.testclient import TestClient

from pnl_lab.backend.app.main import app


def test_health_endpoint() -> None:
    client = TestClient(app)
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "pnl_lab_backend"}
    assert response.headers.get("X-Request-ID")
