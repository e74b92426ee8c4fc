import pytest
from errors import StorageFault
from services.ledger import DiscountLedger
from helpers import get_products, get_product, post_product, put_discount

# --- GET /products ---

def test_list_products_by_country(client):
    post_product(client, product_id="b-se")
    post_product(client, product_id="a-se")
    post_product(client, product_id="a-de", country="Germany")

    r = get_products(client, "sweden")
    assert r.status_code == 200
    data = r.get_json()
    assert [p["id"] for p in data] == ["a-se", "b-se"]
    assert data[0] == {
        "id": "a-se",
        "name": "Laptop",
        "basePrice": 100.0,
        "country": "Sweden",
        "discounts": [],
        "finalPrice": 125.0,
    }

def test_list_products_missing_country(client):
    r = client.get("/api/v1/products")
    assert r.status_code == 400
    assert "country" in r.get_json()["error"]

@pytest.mark.parametrize("country", ["Atlantis", "ATLANTIS", "atlantis"])
def test_list_products_unsupported_country(client, country):
    r = get_products(client, country)
    assert r.status_code == 400
    data = r.get_json()
    assert data["country"] == country
    assert "Unsupported country" in data["error"]

# --- GET /products/<id> ---

def test_get_product(client):
    post_product(client, product_id="monitor-de", base_price=150, country="Germany")
    r = get_product(client, "monitor-de")
    assert r.status_code == 200
    assert r.get_json()["finalPrice"] == 178.5

def test_get_missing_product(client):
    r = get_product(client, "ghost")
    assert r.status_code == 404
    assert r.get_json()["productId"] == "ghost"

# --- POST /products ---

def test_create_product(client):
    r = post_product(client, product_id="cam-fr", base_price=200, country="France",
                     discounts=[{"discountId": "A", "percent": 10}, {"discountId": "B", "percent": 5}])
    assert r.status_code == 201
    data = r.get_json()
    assert data["finalPrice"] == 205.2
    assert [d["discountId"] for d in data["discounts"]] == ["A", "B"]

def test_create_duplicate_product(client):
    post_product(client)
    r = post_product(client)
    assert r.status_code == 409
    assert r.get_json()["productId"] == "laptop-se"

def test_create_product_invalid_body(client):
    assert client.post("/api/v1/products", json={}).status_code == 400
    assert post_product(client, base_price=-3).status_code == 400
    assert post_product(client, country="Atlantis").status_code == 400
    assert post_product(client, discounts="SUMMER").status_code == 400

# --- PUT /products/<id>/discount ---

def test_apply_discount_then_repeat(client):
    post_product(client)

    r1 = put_discount(client, discount_id="SUMMER10", percent=10)
    assert r1.status_code == 200
    body = r1.get_json()
    assert body["message"] == "Discount applied successfully"
    assert body["outcome"] == "applied"
    assert body["product"]["finalPrice"] == 112.5

    r2 = put_discount(client, discount_id="SUMMER10", percent=10)
    assert r2.status_code == 200
    body = r2.get_json()
    assert body["message"] == "Discount already applied"
    assert body["outcome"] == "already_applied"
    assert body["product"]["discounts"] == [{"discountId": "SUMMER10", "percent": 10.0}]

    listed = get_products(client, "Sweden").get_json()
    assert len(listed[0]["discounts"]) == 1

def test_compound_discounts_over_http(client):
    post_product(client, product_id="laptop-fr", base_price=200, country="France")
    put_discount(client, product_id="laptop-fr", discount_id="A", percent=10)
    r = put_discount(client, product_id="laptop-fr", discount_id="B", percent=5)
    assert r.get_json()["product"]["finalPrice"] == 205.2

def test_apply_discount_missing_product(client):
    r = put_discount(client, product_id="ghost")
    assert r.status_code == 404
    assert r.get_json()["productId"] == "ghost"

@pytest.mark.parametrize("discount_id, percent", [
    ("D1", 0),
    ("D1", 101),
    ("", 10),
    ("D1", "ten"),
    (None, 10),
])
def test_apply_invalid_discount(client, discount_id, percent):
    post_product(client)
    r = put_discount(client, discount_id=discount_id, percent=percent)
    assert r.status_code == 400
    assert r.get_json()["error"].startswith("Invalid discount")

def test_apply_discount_without_body(client):
    post_product(client)
    r = client.put("/api/v1/products/laptop-se/discount", data="not json", content_type="text/plain")
    assert r.status_code == 400

def test_storage_fault_is_a_generic_500(client, monkeypatch):
    post_product(client)

    def broken(*args, **kwargs):
        raise StorageFault("applying discount") from RuntimeError("connection reset by peer")

    monkeypatch.setattr(DiscountLedger, "apply_discount", broken)
    r = put_discount(client)
    assert r.status_code == 500
    assert r.get_json() == {"error": "Database error while applying discount"}

# --- misc ---

def test_countries(client):
    r = client.get("/api/v1/countries")
    assert r.status_code == 200
    assert r.get_json()["countries"] == [
        {"name": "Sweden", "vatRate": 0.25},
        {"name": "Germany", "vatRate": 0.19},
        {"name": "France", "vatRate": 0.2},
    ]

def test_health(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok", "database": {"connected": True, "type": "SQLite (In-Memory)"}}
