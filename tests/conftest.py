import pytest
from fastapi.testclient import TestClient

from ecofinds.database import get_storage
from ecofinds.main import app
from ecofinds.storage import JsonFileStorage


@pytest.fixture
def storage(tmp_path):
    storage = JsonFileStorage(tmp_path / "data")
    storage.init_collections()
    return storage


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user and return ``(headers, user)``."""

    def _register(email, username=None, password="secret123"):
        response = client.post(
            "/auth/register",
            json={"email": email, "password": password, "username": username or email.split("@")[0]},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return auth_header(body["token"]), body["user"]

    return _register


@pytest.fixture
def seller(register):
    return register("seller@example.com", "seller")


@pytest.fixture
def buyer(register):
    return register("buyer@example.com", "buyer")


@pytest.fixture
def list_product(client):
    """Create a product as the given seller and return it."""

    def _list_product(headers, title="Desk lamp", price=10, category="Electronics", description=None):
        response = client.post(
            "/products",
            json={
                "title": title,
                "description": description or f"A second-hand {title.lower()}",
                "category": category,
                "price": price,
            },
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["product"]

    return _list_product


def add_to_cart(client, headers, product, quantity=1):
    response = client.post("/cart", json={"productId": product["id"], "quantity": quantity}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["cartItem"]
