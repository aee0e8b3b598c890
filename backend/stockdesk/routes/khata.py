# Overview: Flask API routes for Khata contacts and ledger entries; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Contact, LedgerEntry, CONTACT_TYPES
from ..services import khata_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_contact,
    enforce_rules_ledger_entry,
    ValidationError,
    NotFoundError,
)

"""
Balance semantics:
- current_balance_cents > 0: the contact owes the business (Due)
- current_balance_cents < 0: the business owes the contact (Advance)
"""

CONTACT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone_number", "contact_type"},
    required_on_create={"name"},
)

LEDGER_ENTRY_POLICY = ModelValidationPolicy(
    writable_fields={"amount_cents", "entry_type", "description"},
    required_on_create={"amount_cents", "entry_type"},
)

khata_bp = Blueprint("khata", __name__, url_prefix="/api/contacts")


@khata_bp.get("")
def list_contacts_route():
    contact_type = request.args.get("type")
    if contact_type in (None, "", "all"):
        contact_type = None
    elif contact_type not in CONTACT_TYPES:
        return jsonify({"error": f"type must be all or one of: {', '.join(CONTACT_TYPES)}"}), 400

    items = khata_service.list_contacts(contact_type=contact_type, search=request.args.get("q"))
    return jsonify({"items": items, "count": len(items)}), 200


@khata_bp.post("")
def create_contact_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Contact, payload=payload, policy=CONTACT_POLICY, partial=False)
        enforce_rules_contact(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    contact = khata_service.create_contact(patch=patch)
    return jsonify({"contact": contact.to_dict(balance_cents=0)}), 201


@khata_bp.get("/<int:contact_id>")
def get_contact_route(contact_id: int):
    try:
        contact = khata_service.get_contact(contact_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    balance = khata_service.contact_balance_cents(contact_id)
    return jsonify({"contact": contact.to_dict(balance_cents=balance)}), 200


@khata_bp.get("/<int:contact_id>/ledger")
def list_ledger_route(contact_id: int):
    try:
        entries = khata_service.list_ledger_entries(contact_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({
        "items": [e.to_dict() for e in entries],
        "balance_cents": khata_service.contact_balance_cents(contact_id),
    }), 200


@khata_bp.post("/<int:contact_id>/ledger")
def add_ledger_entry_route(contact_id: int):
    """
    Manual Khata entry.

    Body: {"amount_cents": 5000, "entry_type": "payment_received"|"credit_given", "description": "..."}
    """
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=LedgerEntry, payload=payload, policy=LEDGER_ENTRY_POLICY, partial=False)
        enforce_rules_ledger_entry(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        entry = khata_service.add_ledger_entry(contact_id=contact_id, **patch)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "Invalid ledger entry"}), 400

    return jsonify({
        "entry": entry.to_dict(),
        "balance_cents": khata_service.contact_balance_cents(contact_id),
    }), 201
