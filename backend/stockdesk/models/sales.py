from __future__ import annotations

from ..extensions import db
from stockdesk.time_utils import to_utc_z, utcnow


class Transaction(db.Model):
    """
    A completed sale (bill).

    Written once by checkout and never edited; the only later mutation is
    deletion, which removes the items first.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_timestamp", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    # All amounts in paise
    subtotal_cents = db.Column(db.Integer, nullable=False)
    discount_percent = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)

    # Set for Khata (credit) sales
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=True, index=True)

    contact = db.relationship("Contact", backref=db.backref("transactions", lazy=True))
    items = db.relationship(
        "TransactionItem",
        back_populates="transaction",
        lazy="selectin",
        order_by="TransactionItem.id",
    )

    @property
    def is_khata(self) -> bool:
        return self.contact_id is not None

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "timestamp": to_utc_z(self.timestamp),
            "subtotal_cents": self.subtotal_cents,
            "discount_percent": float(self.discount_percent or 0),
            "discount_cents": self.discount_cents,
            "total_cents": self.total_cents,
            "contact_id": self.contact_id,
            "is_khata": self.is_khata,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class TransactionItem(db.Model):
    """Line item of a transaction; name and price are copied at sale time."""
    __tablename__ = "transaction_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)

    product_sku = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    quantity_sold = db.Column(db.Integer, nullable=False)
    price_per_item_cents = db.Column(db.Integer, nullable=False)

    transaction = db.relationship("Transaction", back_populates="items")

    @property
    def line_total_cents(self) -> int:
        return self.quantity_sold * self.price_per_item_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "product_sku": self.product_sku,
            "name": self.name,
            "quantity_sold": self.quantity_sold,
            "price_per_item_cents": self.price_per_item_cents,
            "line_total_cents": self.line_total_cents,
        }
