from __future__ import annotations

from ..extensions import db
from stockdesk.time_utils import to_utc_z, utcnow

CONTACT_CUSTOMER = "customer"
CONTACT_SUPPLIER = "supplier"
CONTACT_TYPES = (CONTACT_CUSTOMER, CONTACT_SUPPLIER)

# Udhaar: credit extended to the contact (they owe more)
ENTRY_CREDIT_GIVEN = "credit_given"
# Jama: payment received from the contact (they owe less)
ENTRY_PAYMENT_RECEIVED = "payment_received"
ENTRY_TYPES = (ENTRY_CREDIT_GIVEN, ENTRY_PAYMENT_RECEIVED)


def balance_status(balance_cents: int) -> str:
    """Due: the contact owes the business. Advance: the business owes the contact."""
    if balance_cents > 0:
        return "Due"
    if balance_cents < 0:
        return "Advance"
    return "Settled"


class Contact(db.Model):
    """
    A customer or supplier with a Khata (running credit ledger).

    There is no balance column: the balance is always derived from
    ledger_entries, see khata_service.contact_balance_cents.
    """
    __tablename__ = "contacts"
    __table_args__ = (
        db.Index("ix_contacts_name", "name"),
        db.Index("ix_contacts_type", "contact_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(32), nullable=True)
    contact_type = db.Column(db.String(16), nullable=False, default=CONTACT_CUSTOMER)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    entries = db.relationship("LedgerEntry", back_populates="contact", lazy="dynamic")

    def to_dict(self, balance_cents: int | None = None) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "phone_number": self.phone_number,
            "contact_type": self.contact_type,
            "created_at": to_utc_z(self.created_at),
        }
        if balance_cents is not None:
            data["current_balance_cents"] = balance_cents
            data["balance_status"] = balance_status(balance_cents)
        return data


class LedgerEntry(db.Model):
    """
    One Khata line: Udhaar (credit_given) or Jama (payment_received).

    Manual entries are always positive. Checkout may post a 0 amount for a
    fully discounted credit sale so the sale still shows in the history.
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        db.CheckConstraint("amount_cents >= 0", name="ck_ledger_entries_amount_non_negative"),
        db.Index("ix_ledger_entries_contact_date", "contact_id", "transaction_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=False)

    amount_cents = db.Column(db.Integer, nullable=False)
    entry_type = db.Column(db.String(32), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    transaction_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    # Set when the entry was posted by checkout for a credit sale
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=True, index=True)

    contact = db.relationship("Contact", back_populates="entries")

    @property
    def signed_amount_cents(self) -> int:
        if self.entry_type == ENTRY_PAYMENT_RECEIVED:
            return -self.amount_cents
        return self.amount_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "contact_id": self.contact_id,
            "amount_cents": self.amount_cents,
            "entry_type": self.entry_type,
            "description": self.description,
            "transaction_date": to_utc_z(self.transaction_date),
            "transaction_id": self.transaction_id,
        }
