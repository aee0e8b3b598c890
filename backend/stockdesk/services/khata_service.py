# Overview: Service-layer operations for the Khata (contact credit ledgers).

from __future__ import annotations

from sqlalchemy import case, func, or_

from ..extensions import db
from ..models import Contact, LedgerEntry
from ..models.khata import ENTRY_CREDIT_GIVEN, ENTRY_PAYMENT_RECEIVED, balance_status
from ..validation import NotFoundError
"""
Khata invariants

- A contact's balance is never stored. It is always
  sum(credit_given) - sum(payment_received) over its ledger entries,
  recomputed on every read.
- Positive balance: the contact owes the business (Due).
  Negative balance: the business owes the contact (Advance).
- Ledger entries are only ever appended by this service or by checkout.
"""

__all__ = [
    "balance_status",
    "contact_balance_cents",
    "balances_by_contact",
    "get_contact",
    "create_contact",
    "list_contacts",
    "add_ledger_entry",
    "list_ledger_entries",
]


def _signed_amount():
    return case(
        (LedgerEntry.entry_type == ENTRY_CREDIT_GIVEN, LedgerEntry.amount_cents),
        (LedgerEntry.entry_type == ENTRY_PAYMENT_RECEIVED, -LedgerEntry.amount_cents),
        else_=0,
    )


def contact_balance_cents(contact_id: int) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(_signed_amount()), 0))
        .filter(LedgerEntry.contact_id == contact_id)
        .scalar()
    )
    return int(total or 0)


def balances_by_contact(contact_ids: list[int] | None = None) -> dict[int, int]:
    """One grouped query for a whole contact list; contacts with no entries are absent."""
    q = db.session.query(LedgerEntry.contact_id, func.sum(_signed_amount()))
    if contact_ids is not None:
        if not contact_ids:
            return {}
        q = q.filter(LedgerEntry.contact_id.in_(contact_ids))
    rows = q.group_by(LedgerEntry.contact_id).all()
    return {contact_id: int(total or 0) for contact_id, total in rows}


def get_contact(contact_id: int) -> Contact:
    contact = db.session.get(Contact, contact_id)
    if contact is None:
        raise NotFoundError(f"Contact {contact_id} not found")
    return contact


def create_contact(*, patch: dict) -> Contact:
    contact = Contact(**patch)
    db.session.add(contact)
    db.session.commit()
    return contact


def list_contacts(*, contact_type: str | None = None, search: str | None = None) -> list[dict]:
    """
    Contacts ordered by name, each with its derived balance.

    search matches name or phone number, case-insensitively.
    """
    q = db.session.query(Contact)
    if contact_type:
        q = q.filter(Contact.contact_type == contact_type)
    if search:
        term = f"%{search.strip().lower()}%"
        q = q.filter(
            or_(
                func.lower(Contact.name).like(term),
                func.lower(func.coalesce(Contact.phone_number, "")).like(term),
            )
        )
    contacts = q.order_by(Contact.name.asc(), Contact.id.asc()).all()

    balances = balances_by_contact([c.id for c in contacts])
    return [c.to_dict(balance_cents=balances.get(c.id, 0)) for c in contacts]


def add_ledger_entry(
    *,
    contact_id: int,
    amount_cents: int,
    entry_type: str,
    description: str | None = None,
    transaction_id: int | None = None,
    commit: bool = True,
) -> LedgerEntry:
    get_contact(contact_id)

    entry = LedgerEntry(
        contact_id=contact_id,
        amount_cents=amount_cents,
        entry_type=entry_type,
        description=description or None,
        transaction_id=transaction_id,
    )
    db.session.add(entry)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return entry


def list_ledger_entries(contact_id: int) -> list[LedgerEntry]:
    get_contact(contact_id)
    return (
        db.session.query(LedgerEntry)
        .filter(LedgerEntry.contact_id == contact_id)
        .order_by(LedgerEntry.transaction_date.desc(), LedgerEntry.id.desc())
        .all()
    )
