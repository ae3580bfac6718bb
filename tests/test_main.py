from fastapi.testclient import TestClient

from ecofinds.database import get_storage
from ecofinds.main import app
from ecofinds.storage import JsonFileStorage


class BrokenStorage(JsonFileStorage):
    def get_all(self, name):
        raise RuntimeError("disk on fire")


def test_health(client):
    assert client.get("/health").json() == {"status": "OK", "message": "EcoFinds API is running"}


def test_unknown_route(client):
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert response.json() == {"error": "Route not found"}


def test_unexpected_failure_is_generic_500(tmp_path):
    app.dependency_overrides[get_storage] = lambda: BrokenStorage(tmp_path)
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/products")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
