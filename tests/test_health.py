# tests/test_health.py

from types import SimpleNamespace

from fastapi.testclient import TestClient

from core.config import settings
from main import create_app


def test_health_app(client: TestClient):
    response = client.get("/health/app")
    assert response.status_code == 200
    assert response.json() == {"service": settings.PROJECT_NAME, "status": "ok"}


def test_health_db(client: TestClient):
    response = client.get("/health/db")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_unknown_route_uses_error_shape(client: TestClient):
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_startup_tolerates_routes_without_path(engine):
    application = create_app()
    # Included routers and mounts need not expose a path
    application.router.routes.append(SimpleNamespace())

    with TestClient(application) as test_client:
        assert test_client.app is application
