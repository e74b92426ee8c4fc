from flask import Blueprint, current_app, jsonify, request
from services.vat import VAT_RATES
from utils import get_json_body

products_bp = Blueprint("products", __name__)


def get_ledger():
    """
    Returns the DiscountLedger the application was constructed with.
    """
    return current_app.extensions["discount_ledger"]


@products_bp.route("/countries", methods=["GET"])
def list_countries():
    """
    Lists the countries with a VAT rate.
    ---
    Output (200):
        - countries (list): {name, vatRate} objects.
    """
    countries = [{"name": entry["name"], "vatRate": entry["rate"]} for entry in VAT_RATES.values()]
    return jsonify({"countries": countries}), 200


@products_bp.route("/products", methods=["GET"])
def list_products():
    """
    Returns every product sold in a country, priced and ordered by id.
    ---
    Input (Query Params):
        - country (str): Country name, case-insensitive.
    Output (200):
        - list of product objects with basePrice, discounts and finalPrice.
    Errors:
        - 400: country missing or unsupported
    """
    country = request.args.get("country", "")
    if not country.strip():
        return jsonify({"error": "country query parameter is required"}), 400

    products = get_ledger().list_products_by_country(country)
    return jsonify([p.to_dict() for p in products]), 200


@products_bp.route("/products/<product_id>", methods=["GET"])
def get_product(product_id):
    """
    Returns a single priced product.
    ---
    Errors:
        - 404: Product not found
    """
    product = get_ledger().find_product(product_id)
    if product is None:
        return jsonify({"error": f"Product with ID '{product_id}' not found", "productId": product_id}), 404
    return jsonify(product.to_dict()), 200


@products_bp.route("/products", methods=["POST"])
def create_product():
    """
    Adds a product to the catalog.
    ---
    Input (JSON):
        - id (str), name (str), basePrice (number), country (str)
        - discounts (list, optional): {discountId, percent} objects.
    Output (201):
        - the created product.
    Errors:
        - 400: invalid fields or unsupported country
        - 409: id already taken
    """
    data = get_json_body()
    discounts = data.get("discounts") or []
    if not isinstance(discounts, list) or not all(isinstance(d, dict) for d in discounts):
        return jsonify({"error": "discounts must be a list of objects"}), 400

    product = get_ledger().create_product(
        data.get("id"),
        data.get("name"),
        data.get("basePrice"),
        data.get("country"),
        discounts=[(d.get("discountId"), d.get("percent")) for d in discounts],
    )
    return jsonify(product.to_dict()), 201


@products_bp.route("/products/<product_id>/discount", methods=["PUT"])
def apply_discount(product_id):
    """
    Applies a discount to a product exactly once.

    Repeating a request with the same discountId is safe: it returns 200 with
    the current product and an 'already applied' message.
    ---
    Input (JSON):
        - discountId (str): Idempotency key, unique per product.
        - percent (number): 0 < percent <= 100.
    Output (200):
        - message (str), outcome ('applied' | 'already_applied'), product (obj)
    Errors:
        - 400: invalid discount
        - 404: Product not found
        - 500: storage failure
    """
    data = get_json_body()
    outcome, product = get_ledger().apply_discount(
        product_id,
        data.get("discountId"),
        data.get("percent"),
    )
    return jsonify({
        "message": outcome.message,
        "outcome": outcome.value,
        "product": product.to_dict(),
    }), 200
