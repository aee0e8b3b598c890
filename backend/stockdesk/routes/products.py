# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockdesk/routes/products.py
"""
Product management routes.

Products are addressed by SKU. The SKU is set on create and never changes.
"""
from flask import Blueprint, request, current_app
from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
    NotFoundError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "sku",
        "name",
        "cost_price_cents",
        "price_cents",
        "quantity",
        "low_stock_threshold",
        "expiry_date",
        "units_per_item",
        "loose_price_per_unit_cents",
    },
    required_on_create={"sku", "name", "price_cents", "quantity"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products ordered by name.

    Query params:
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default PRODUCTS_PER_PAGE)
    """
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return products_service.list_products(page=page, per_page=per_page)


@products_bp.get("/metrics")
def product_metrics():
    """Total products, low-stock count and near-expiry count."""
    return products_service.get_inventory_metrics()


@products_bp.get("/<string:sku>")
def get_product_route(sku: str):
    try:
        return products_service.get_product(sku).to_dict()
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.post("")
def create_product_route():
    """Create a new product. Duplicate SKU -> 409."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    sku = patch.pop("sku")

    try:
        created = products_service.create_product(sku=sku, patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409

    return created.to_dict(), 201


@products_bp.patch("/<string:sku>")
def update_product_route(sku: str):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400
    if "sku" in payload and payload["sku"] != sku:
        return {"error": "sku cannot be changed"}, 400
    payload.pop("sku", None)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = products_service.update_product(sku=sku, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return updated.to_dict()


@products_bp.delete("/<string:sku>")
def delete_product_route(sku: str):
    try:
        products_service.delete_product(sku=sku)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to delete product %s", sku)
        return {"error": "Internal server error"}, 500

    return {"deleted": True, "sku": sku}
