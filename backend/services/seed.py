import logging
from errors import ProductAlreadyExists

logger = logging.getLogger(__name__)

# Demo catalog, (id, name, base price, country)
SEED_PRODUCTS = [
    ("headphones-se", "Wireless Headphones", 150.00, "Sweden"),
    ("laptop-se", "Laptop Pro 14", 1000.00, "Sweden"),
    ("phone-se", "Smartphone X", 600.00, "Sweden"),
    ("laptop-de", "Laptop Pro 14", 950.00, "Germany"),
    ("monitor-de", "27\" Monitor", 150.00, "Germany"),
    ("tablet-de", "Tablet Air", 400.00, "Germany"),
    ("camera-fr", "Mirrorless Camera", 200.00, "France"),
    ("keyboard-fr", "Mechanical Keyboard", 100.00, "France"),
    ("laptop-fr", "Laptop Pro 14", 980.00, "France"),
]


def seed_products(ledger, products=None) -> int:
    """
    Populates an empty catalog with the demo products.

    Existing catalogs are left untouched, and a product created concurrently
    by another instance is skipped.

    Args:
        ledger: DiscountLedger bound to the target database.
        products: Optional override of the (id, name, base price, country) rows.

    Returns:
        The number of products created.
    """
    if ledger.list_products():
        logger.info("Catalog already populated; skipping seed data")
        return 0

    created = 0
    for product_id, name, base_price, country in (products or SEED_PRODUCTS):
        try:
            ledger.create_product(product_id, name, base_price, country)
            created += 1
        except ProductAlreadyExists:
            logger.info(f"Seed product {product_id} already exists")
    logger.info(f"Seeded {created} products")
    return created
