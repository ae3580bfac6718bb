from ecofinds import config


def test_create_product_defaults(client, seller):
    headers, user = seller

    response = client.post(
        "/products",
        json={"title": "Bike", "description": "City bike", "category": "Sports", "price": "120.50"},
        headers=headers,
    )

    assert response.status_code == 201
    product = response.json()["product"]
    assert product["price"] == 120.5
    assert product["isAvailable"] is True
    assert product["sellerId"] == user["id"]
    assert product["sellerEmail"] == "seller@example.com"
    assert product["imageUrl"] == config.DEFAULT_IMAGE_URL


def test_create_product_requires_auth(client):
    response = client.post(
        "/products",
        json={"title": "Bike", "description": "City bike", "category": "Sports", "price": 10},
    )

    assert response.status_code == 401


def test_create_product_validates_fields(client, seller):
    headers, _ = seller

    missing = client.post("/products", json={"title": "Bike", "price": 10}, headers=headers)
    negative = client.post(
        "/products",
        json={"title": "Bike", "description": "x", "category": "Sports", "price": -1},
        headers=headers,
    )
    not_a_number = client.post(
        "/products",
        json={"title": "Bike", "description": "x", "category": "Sports", "price": "cheap"},
        headers=headers,
    )

    assert missing.status_code == 400
    assert negative.status_code == 400
    assert not_a_number.status_code == 400


def test_get_product_and_not_found(client, seller, list_product):
    product = list_product(seller[0])

    assert client.get(f"/products/{product['id']}").json()["title"] == "Desk lamp"

    response = client.get("/products/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


def test_list_filters(client, seller, list_product):
    headers, _ = seller
    list_product(headers, title="Red chair", price=30, category="Furniture")
    list_product(headers, title="Blue table", price=80, category="Furniture", description="Has a RED stain")
    list_product(headers, title="Novel", price=5, category="Books")

    def titles(**params):
        return [p["title"] for p in client.get("/products", params=params).json()]

    assert titles() == ["Red chair", "Blue table", "Novel"]
    assert titles(search="red") == ["Red chair", "Blue table"]
    assert titles(category="Books") == ["Novel"]
    assert titles(category="all") == ["Red chair", "Blue table", "Novel"]
    assert titles(minPrice=10, maxPrice=80) == ["Red chair", "Blue table"]
    assert titles(category="Furniture", maxPrice=50, search="chair") == ["Red chair"]


def test_update_product_by_owner_merges_fields(client, seller, list_product):
    headers, _ = seller
    product = list_product(headers, price=10)

    response = client.put(
        f"/products/{product['id']}",
        json={"price": 12, "title": "", "isAvailable": False},
        headers=headers,
    )

    assert response.status_code == 200
    updated = response.json()["product"]
    assert updated["price"] == 12
    assert updated["title"] == product["title"]
    assert updated["description"] == product["description"]
    assert updated["isAvailable"] is True


def test_update_and_delete_forbidden_for_non_owner(client, seller, buyer, list_product):
    product = list_product(seller[0])
    other_headers, _ = buyer

    update = client.put(f"/products/{product['id']}", json={"price": 1}, headers=other_headers)
    delete = client.delete(f"/products/{product['id']}", headers=other_headers)

    assert update.status_code == 403
    assert update.json() == {"error": "You can only update your own products"}
    assert delete.status_code == 403
    assert client.get(f"/products/{product['id']}").status_code == 200


def test_delete_product(client, seller, list_product):
    headers, _ = seller
    product = list_product(headers)

    response = client.delete(f"/products/{product['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["product"]["id"] == product["id"]
    assert client.get(f"/products/{product['id']}").status_code == 404
    assert client.delete(f"/products/{product['id']}", headers=headers).status_code == 404


def test_user_products_and_categories(client, seller, buyer, list_product):
    list_product(seller[0], title="Lamp", category="Electronics")
    list_product(seller[0], title="Sofa", category="Furniture")
    list_product(buyer[0], title="Radio", category="Electronics")

    mine = client.get(f"/products/user/{seller[1]['id']}", headers=seller[0])

    assert [p["title"] for p in mine.json()] == ["Lamp", "Sofa"]
    assert client.get("/products/categories/list").json() == ["Electronics", "Furniture"]


def test_listing_after_email_change_uses_current_email(client, register):
    headers, _ = register("old@example.com", "mover")
    client.put("/auth/profile", json={"email": "new@example.com"}, headers=headers)

    # the token still carries old@example.com
    response = client.post(
        "/products",
        json={"title": "Bike", "description": "City bike", "category": "Sports", "price": 10},
        headers=headers,
    )

    assert response.json()["product"]["sellerEmail"] == "new@example.com"
    reuse = client.post(
        "/auth/register",
        json={"email": "old@example.com", "password": "secret123", "username": "someone"},
    )
    assert reuse.status_code == 201


def test_update_keeps_unknown_stored_fields(client, seller, list_product, storage):
    product = list_product(seller[0])
    records = storage.get_all("products")
    records[0]["condition"] = "like new"
    storage.put_all("products", records)

    response = client.put(f"/products/{product['id']}", json={"price": 12}, headers=seller[0])

    assert response.status_code == 200
    [stored] = storage.get_all("products")
    assert stored["condition"] == "like new"
    assert stored["price"] == 12
