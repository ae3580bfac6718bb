from .conftest import add_to_cart as add


def buy(client, headers, *products):
    for product in products:
        add(client, headers, product)
    response = client.post("/purchases/checkout", headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["purchases"]


def test_history_newest_first_with_product(client, seller, buyer, list_product, storage):
    first = list_product(seller[0], title="First")
    second = list_product(seller[0], title="Second")
    buy(client, buyer[0], first)
    buy(client, buyer[0], second)
    # make the ordering independent of clock resolution
    purchases = storage.get_all("purchases")
    purchases[0]["purchasedAt"] = "2024-01-01T10:00:00Z"
    purchases[1]["purchasedAt"] = "2024-01-02T10:00:00Z"
    storage.put_all("purchases", purchases)

    history = client.get("/purchases", headers=buyer[0]).json()

    assert [p["productTitle"] for p in history] == ["Second", "First"]
    assert history[0]["product"]["isAvailable"] is False
    assert client.get("/purchases", headers=seller[0]).json() == []


def test_history_keeps_purchases_of_deleted_products(client, seller, buyer, list_product):
    product = list_product(seller[0])
    buy(client, buyer[0], product)
    client.delete(f"/products/{product['id']}", headers=seller[0])

    [purchase] = client.get("/purchases", headers=buyer[0]).json()

    assert purchase["product"] is None
    assert purchase["productTitle"] == product["title"]


def test_get_purchase_access(client, register, seller, buyer, list_product):
    [purchase] = buy(client, buyer[0], list_product(seller[0]))
    other_headers, _ = register("other@example.com")

    assert client.get(f"/purchases/{purchase['id']}", headers=buyer[0]).status_code == 200
    denied = client.get(f"/purchases/{purchase['id']}", headers=other_headers)
    assert denied.status_code == 403
    assert denied.json() == {"error": "Access denied"}
    assert client.get("/purchases/missing", headers=buyer[0]).status_code == 404


def test_sales_history(client, seller, buyer, list_product):
    buy(client, buyer[0], list_product(seller[0], title="Lamp"))

    sales = client.get("/purchases/sales/history", headers=seller[0]).json()

    assert [s["productTitle"] for s in sales] == ["Lamp"]
    assert client.get("/purchases/sales/history", headers=buyer[0]).json() == []


def test_stats_summary(client, seller, buyer, list_product):
    a = list_product(seller[0], title="A", price=10)
    b = list_product(seller[0], title="B", price="2.50")
    add(client, buyer[0], a, quantity=2)
    buy(client, buyer[0], b)

    buyer_stats = client.get("/purchases/stats/summary", headers=buyer[0]).json()
    seller_stats = client.get("/purchases/stats/summary", headers=seller[0]).json()

    assert buyer_stats == {
        "purchases": {"count": 2, "totalSpent": 22.5, "totalItemsPurchased": 3},
        "sales": {"count": 0, "totalEarned": 0, "totalItemsSold": 0},
    }
    assert seller_stats["sales"] == {"count": 2, "totalEarned": 22.5, "totalItemsSold": 3}
    assert seller_stats["purchases"]["count"] == 0
