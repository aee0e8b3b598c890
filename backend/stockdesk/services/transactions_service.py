# Overview: Service-layer operations for transaction history; listing, lookup and deletion.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Contact, LedgerEntry, Transaction, TransactionItem
from ..validation import NotFoundError, ValidationError

FILTER_ALL = "all"
FILTER_KHATA = "khata"
FILTER_DIRECT = "direct"
FILTER_TYPES = (FILTER_ALL, FILTER_KHATA, FILTER_DIRECT)


class TransactionDeleteError(Exception):
    """Raised when a transaction could not be deleted; nothing was removed."""


def get_transaction(transaction_id: int) -> Transaction:
    txn = db.session.get(Transaction, transaction_id)
    if txn is None:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    return txn


def load_all_transactions() -> list[Transaction]:
    """Full snapshot, newest first, items eagerly loaded."""
    return (
        db.session.query(Transaction)
        .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
        .all()
    )


def _matches(txn: Transaction, term: str, contact_names: dict[int, str]) -> bool:
    if term in str(txn.id):
        return True
    if txn.timestamp and term in txn.timestamp.date().isoformat():
        return True
    name = contact_names.get(txn.contact_id, "") if txn.contact_id else ""
    return term in name.lower()


def list_transactions(
    *,
    filter_type: str = FILTER_ALL,
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Transaction history, newest first.

    filter_type: all | khata (sold on credit to a contact) | direct
    search: substring of the id, the YYYY-MM-DD date or the contact name
    """
    if filter_type not in FILTER_TYPES:
        raise ValidationError(f"filter must be one of: {', '.join(FILTER_TYPES)}")

    q = db.session.query(Transaction)
    if filter_type == FILTER_KHATA:
        q = q.filter(Transaction.contact_id.isnot(None))
    elif filter_type == FILTER_DIRECT:
        q = q.filter(Transaction.contact_id.is_(None))
    rows = q.order_by(Transaction.timestamp.desc(), Transaction.id.desc()).all()

    contact_names = {cid: name for cid, name in db.session.query(Contact.id, Contact.name).all()}

    if search and search.strip():
        term = search.strip().lower()
        rows = [t for t in rows if _matches(t, term, contact_names)]

    total = len(rows)
    per_page = min(per_page or current_app.config["TRANSACTIONS_PER_PAGE"], 100)
    page = max(page or 1, 1)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    start = (page - 1) * per_page
    window = rows[start:start + per_page]

    items = []
    for t in window:
        data = t.to_dict()
        data["contact_name"] = contact_names.get(t.contact_id) if t.contact_id else None
        items.append(data)

    return {
        "items": items,
        "count": len(items),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def _delete_items(transaction_id: int) -> None:
    db.session.query(TransactionItem).filter(
        TransactionItem.transaction_id == transaction_id
    ).delete(synchronize_session=False)


def _delete_header(transaction_id: int) -> None:
    # Khata entries posted by this sale stay on the ledger; only the link goes.
    db.session.query(LedgerEntry).filter(
        LedgerEntry.transaction_id == transaction_id
    ).update({LedgerEntry.transaction_id: None}, synchronize_session=False)
    db.session.query(Transaction).filter(Transaction.id == transaction_id).delete()


def delete_transaction(transaction_id: int) -> None:
    """
    Delete a transaction: items first, then the header, in one unit of work.

    If removing the items fails the header is left in place. Stock is not
    restored and the Khata balance is not adjusted.
    """
    get_transaction(transaction_id)

    try:
        _delete_items(transaction_id)
        _delete_header(transaction_id)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete transaction %s", transaction_id)
        raise TransactionDeleteError("Failed to delete transaction") from exc

    current_app.logger.info("Deleted transaction %s", transaction_id)
