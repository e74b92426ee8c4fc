from sqlalchemy import func, select
import schema

def seed_product(ledger, product_id="laptop-se", name="Laptop", base_price=100.0, country="Sweden", discounts=()):
    return ledger.create_product(product_id, name, base_price, country, discounts=discounts)

def count_discounts(db, product_id, discount_id=None):
    query = select(func.count()).select_from(schema.ProductDiscount).where(
        schema.ProductDiscount.product_id == product_id
    )
    if discount_id is not None:
        query = query.where(schema.ProductDiscount.discount_id == discount_id)
    return db.execute(query).scalar_one()

def get_products(client, country="Sweden"):
    return client.get("/api/v1/products", query_string={"country": country})

def get_product(client, product_id):
    return client.get(f"/api/v1/products/{product_id}")

def post_product(client, product_id="laptop-se", name="Laptop", base_price=100, country="Sweden", discounts=None):
    body = {"id": product_id, "name": name, "basePrice": base_price, "country": country}
    if discounts is not None:
        body["discounts"] = discounts
    return client.post("/api/v1/products", json=body)

def put_discount(client, product_id="laptop-se", discount_id="SUMMER10", percent=10):
    return client.put(
        f"/api/v1/products/{product_id}/discount",
        json={"discountId": discount_id, "percent": percent},
    )
