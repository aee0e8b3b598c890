# backend/stockdesk/services/products_service.py
"""
Products Service

Inventory management: paginated listing, create/update/delete by SKU and the
two dashboard aggregates (low stock, near expiry).
"""
from __future__ import annotations

from datetime import date, timedelta

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Product
from ..validation import ConflictError, NotFoundError
from stockdesk.time_utils import utc_today

PRODUCT_MUTABLE_FIELDS = {
    "name",
    "cost_price_cents",
    "price_cents",
    "quantity",
    "low_stock_threshold",
    "expiry_date",
    "units_per_item",
    "loose_price_per_unit_cents",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def get_product(sku: str) -> Product:
    product = db.session.query(Product).filter_by(sku=sku).first()
    if product is None:
        raise NotFoundError(f"Product {sku} not found")
    return product


def list_products(page: int | None = None, per_page: int | None = None) -> dict:
    """
    Product listing ordered by name, with optional pagination.

    Args:
        page: Page number (1-indexed). If None, returns all items.
        per_page: Items per page (default PRODUCTS_PER_PAGE, max 200)

    Returns:
        Dict with 'items', 'count', 'total' and pagination metadata if paginated.
    """
    base_query = db.session.query(Product).order_by(Product.name.asc(), Product.id.asc())
    total = base_query.count()

    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
            "total": total,
        }

    per_page = min(per_page or current_app.config["PRODUCTS_PER_PAGE"], 200)
    page = max(page, 1)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "total": total,
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def create_product(*, sku: str, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    Raises:
        ConflictError: If the SKU already exists
    """
    existing = db.session.query(Product).filter_by(sku=sku).first()
    if existing:
        raise ConflictError("A product with this SKU already exists.")

    p = Product(sku=sku)
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    current_app.logger.info("Created product sku=%s name=%s", p.sku, p.name)
    return p


def update_product(*, sku: str, patch: dict) -> Product:
    """Update product fields. The SKU itself is immutable."""
    p = get_product(sku)
    apply_product_patch(p, patch)
    db.session.commit()
    return p


def delete_product(*, sku: str) -> None:
    """
    Delete a product.

    Transaction items reference products by SKU text only, so sales history
    is unaffected; analytics simply stop finding a cost price for the SKU.
    """
    p = get_product(sku)
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("Deleted product sku=%s", sku)


def low_stock_query():
    """Products at or below their own low-stock threshold."""
    return db.session.query(Product).filter(Product.quantity <= Product.low_stock_threshold)


def near_expiry_query(*, today: date | None = None, days: int | None = None):
    """Products expiring between today and today + days (both inclusive)."""
    today = today or utc_today()
    if days is None:
        days = current_app.config["NEAR_EXPIRY_DAYS"]
    return db.session.query(Product).filter(
        Product.expiry_date.isnot(None),
        Product.expiry_date >= today,
        Product.expiry_date <= today + timedelta(days=days),
    )


def get_low_stock_count() -> int:
    return low_stock_query().count()


def get_near_expiry_count(*, today: date | None = None, days: int | None = None) -> int:
    return near_expiry_query(today=today, days=days).count()


def get_product_cost_map() -> dict[str, int]:
    """sku -> cost price for ALL products, for COGS over the full history."""
    rows = db.session.query(Product.sku, Product.cost_price_cents).all()
    return {sku: int(cost or 0) for sku, cost in rows}


def get_inventory_metrics() -> dict:
    return {
        "total_products": db.session.query(func.count(Product.id)).scalar() or 0,
        "low_stock_count": get_low_stock_count(),
        "near_expiry_count": get_near_expiry_count(),
    }
