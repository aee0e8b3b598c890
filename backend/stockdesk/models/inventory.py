from __future__ import annotations

from ..extensions import db
from stockdesk.time_utils import to_iso_date, to_utc_z

DEFAULT_LOW_STOCK_THRESHOLD = 10


class Product(db.Model):
    """
    Product master data.

    SKU is the business key: cart lines, transaction items and stock
    decrements all refer to products by SKU, never by the surrogate id.
    Transaction items keep a copy of name and price, so deleting a product
    leaves sales history intact.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    # Money in paise (Rs x 100)
    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)
    price_cents = db.Column(db.Integer, nullable=False, default=0)

    # On-hand stock
    quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD)

    expiry_date = db.Column(db.Date, nullable=True, index=True)

    # Packing: e.g. a strip of 10 tablets sold whole or loose
    units_per_item = db.Column(db.Integer, nullable=False, default=1)
    loose_price_per_unit_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "cost_price_cents": self.cost_price_cents,
            "price_cents": self.price_cents,
            "quantity": self.quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "is_low_stock": self.is_low_stock,
            "expiry_date": to_iso_date(self.expiry_date),
            "units_per_item": self.units_per_item,
            "loose_price_per_unit_cents": self.loose_price_per_unit_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
