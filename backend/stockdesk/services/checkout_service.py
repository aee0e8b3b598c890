"""
Checkout Service - turns a cart into a transaction, items, Khata entry and stock decrements

Billing is the only write path that touches four tables at once. The
header is the commit point; everything after it is best-effort and reported
back as typed warnings instead of being silently lost.

Write order (each step commits on its own):
    1. transaction header      -> failure raises CheckoutError, nothing else runs
    2. Khata entry (if contact) -> failure is a warning, fix the Khata manually
    3. transaction items        -> failure is a warning, header exists without items
    4. stock decrement per SKU  -> failure is a per-item warning, other lines continue

There is no compensation for steps 2-4. A returned CheckoutResult means
"header committed, details best-effort"; check result.warnings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Contact, Product, Transaction, TransactionItem
from ..models.khata import ENTRY_CREDIT_GIVEN
from ..validation import MAX_AMOUNT_CENTS, ValidationError, coerce_int
from .khata_service import add_ledger_entry

STEP_LEDGER = "ledger"
STEP_ITEMS = "items"
STEP_STOCK = "stock"


class CheckoutError(Exception):
    """Raised when checkout is aborted before or at the header write."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientStockError(CheckoutError):
    """A cart line asks for more than is on hand (or the product is gone)."""


class CheckoutWriteError(CheckoutError):
    """The transaction header could not be saved; nothing was written."""


class StockUpdateError(CheckoutError):
    """A single stock decrement did not apply."""


@dataclass(frozen=True)
class CartItem:
    sku: str
    price_cents: int
    quantity: int
    name: str | None = None


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal_cents: int
    discount_percent: Decimal
    discount_cents: int
    total_cents: int


@dataclass(frozen=True)
class CheckoutWarning:
    step: str
    message: str
    sku: str | None = None

    def to_dict(self) -> dict:
        return {"step": self.step, "message": self.message, "sku": self.sku}


@dataclass
class CheckoutResult:
    transaction: Transaction
    totals: CheckoutTotals
    warnings: list[CheckoutWarning] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.warnings

    def to_dict(self) -> dict:
        return {
            "transaction": self.transaction.to_dict(),
            "complete": self.is_complete,
            "warnings": [w.to_dict() for w in self.warnings],
        }


def parse_cart(raw: Any) -> list[CartItem]:
    """Validate a JSON cart: a non-empty list of {sku, name?, price_cents, quantity}."""
    if not isinstance(raw, list) or not raw:
        raise ValidationError("cart must be a non-empty list")

    items: list[CartItem] = []
    for i, line in enumerate(raw):
        if not isinstance(line, dict):
            raise ValidationError(f"cart[{i}] must be an object")

        sku = str(line.get("sku") or "").strip()
        if not sku:
            raise ValidationError(f"cart[{i}].sku is required")

        if "price_cents" not in line or "quantity" not in line:
            raise ValidationError(f"cart[{i}] requires price_cents and quantity")
        price = coerce_int(f"cart[{i}].price_cents", line["price_cents"])
        qty = coerce_int(f"cart[{i}].quantity", line["quantity"])
        if price < 0 or price > MAX_AMOUNT_CENTS:
            raise ValidationError(f"cart[{i}].price_cents out of range")
        if qty <= 0:
            raise ValidationError(f"cart[{i}].quantity must be > 0")

        name = line.get("name")
        items.append(CartItem(sku=sku, price_cents=price, quantity=qty, name=str(name).strip() if name else None))
    return items


def compute_totals(cart: Iterable[CartItem], discount_percent=0, discount_cents: int = 0) -> CheckoutTotals:
    """
    subtotal = sum(price x qty)
    total = max(0, subtotal x (1 - pct/100) - flat)

    The percent step is rounded half-up to whole paise before the flat discount
    is taken off. The zero floor always applies, whatever the inputs.
    """
    subtotal = sum(item.price_cents * item.quantity for item in cart)
    pct = Decimal(str(discount_percent or 0))
    flat = int(discount_cents or 0)

    after_percent = (Decimal(subtotal) * (Decimal(100) - pct) / Decimal(100)).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    total = max(0, int(after_percent) - flat)

    return CheckoutTotals(
        subtotal_cents=subtotal,
        discount_percent=pct,
        discount_cents=flat,
        total_cents=total,
    )


def _check_stock(cart: list[CartItem]) -> dict[str, str]:
    """Returns sku -> product name for every SKU in the cart."""
    requested: dict[str, int] = {}
    names: dict[str, str | None] = {}
    for item in cart:
        requested[item.sku] = requested.get(item.sku, 0) + item.quantity
        names.setdefault(item.sku, item.name)

    products = {
        p.sku: p
        for p in db.session.query(Product).filter(Product.sku.in_(list(requested))).all()
    }

    insufficient = []
    for sku, qty in requested.items():
        product = products.get(sku)
        on_hand = product.quantity if product else None
        if product is None or product.quantity < qty:
            insufficient.append({
                "sku": sku,
                "name": names[sku] or (product.name if product else sku),
                "requested_quantity": qty,
                "on_hand": on_hand,
            })

    if insufficient:
        label = ", ".join(row["name"] for row in insufficient)
        raise InsufficientStockError(f"Not enough stock for {label}.", details={"items": insufficient})

    return {sku: p.name for sku, p in products.items()}


def _insert_header(totals: CheckoutTotals, contact_id: int | None) -> Transaction:
    txn = Transaction(
        subtotal_cents=totals.subtotal_cents,
        discount_percent=totals.discount_percent,
        discount_cents=totals.discount_cents,
        total_cents=totals.total_cents,
        contact_id=contact_id,
    )
    db.session.add(txn)
    db.session.commit()
    return txn


def _post_ledger_entry(txn_id: int, contact_id: int, total_cents: int, line_count: int) -> None:
    add_ledger_entry(
        contact_id=contact_id,
        amount_cents=total_cents,
        entry_type=ENTRY_CREDIT_GIVEN,
        description=f"Sale of {line_count} item(s)",
        transaction_id=txn_id,
    )


def _insert_items(txn_id: int, cart: list[CartItem], product_names: dict[str, str]) -> None:
    db.session.add_all([
        TransactionItem(
            transaction_id=txn_id,
            product_sku=item.sku,
            name=item.name or product_names[item.sku],
            quantity_sold=item.quantity,
            price_per_item_cents=item.price_cents,
        )
        for item in cart
    ])
    db.session.commit()


def _decrement_stock(sku: str, quantity: int) -> None:
    # Relative update; the quantity >= 0 CHECK rejects a concurrent oversell.
    updated = (
        db.session.query(Product)
        .filter(Product.sku == sku)
        .update({Product.quantity: Product.quantity - quantity}, synchronize_session=False)
    )
    if updated != 1:
        raise StockUpdateError(f"Product {sku} no longer exists")
    db.session.commit()


def checkout(
    cart: list[CartItem],
    *,
    discount_percent=0,
    discount_cents: int = 0,
    contact_id: int | None = None,
) -> CheckoutResult:
    """
    Process a sale. Raises before any write on precondition failure
    (InsufficientStockError, unknown contact, empty cart) and on header failure.
    """
    if not cart:
        raise CheckoutError("Cart is empty")

    if contact_id is not None and db.session.get(Contact, contact_id) is None:
        raise CheckoutError("Contact not found", details={"contact_id": contact_id})

    product_names = _check_stock(cart)
    totals = compute_totals(cart, discount_percent, discount_cents)

    try:
        txn = _insert_header(totals, contact_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create transaction header")
        raise CheckoutWriteError(f"Failed to process transaction: {exc}") from exc

    txn_id = txn.id
    warnings: list[CheckoutWarning] = []

    # Every credit sale is recorded on the Khata, including a fully discounted one.
    if contact_id is not None:
        try:
            _post_ledger_entry(txn_id, contact_id, totals.total_cents, len(cart))
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning("Transaction %s: Khata entry failed: %s", txn_id, exc)
            warnings.append(CheckoutWarning(
                step=STEP_LEDGER,
                message="Transaction completed but failed to add to Khata. Please add manually.",
            ))

    try:
        _insert_items(txn_id, cart, product_names)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("Transaction %s: item insert failed: %s", txn_id, exc)
        warnings.append(CheckoutWarning(
            step=STEP_ITEMS,
            message=f"Transaction was created, but failed to add items: {exc}",
        ))

    for item in cart:
        try:
            _decrement_stock(item.sku, item.quantity)
        except (SQLAlchemyError, StockUpdateError) as exc:
            db.session.rollback()
            current_app.logger.warning("Transaction %s: stock update failed for %s: %s", txn_id, item.sku, exc)
            label = item.name or product_names[item.sku]
            warnings.append(CheckoutWarning(
                step=STEP_STOCK,
                sku=item.sku,
                message=f"Transaction complete, but failed to update stock for {label}. Please manually adjust it.",
            ))

    txn = db.session.get(Transaction, txn_id)
    current_app.logger.info(
        "Checkout transaction=%s total_cents=%s contact=%s warnings=%d",
        txn_id, totals.total_cents, contact_id, len(warnings),
    )
    return CheckoutResult(transaction=txn, totals=totals, warnings=warnings)
