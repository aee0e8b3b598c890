# Overview: Flask API routes for checkout (billing); parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import checkout_service
from ..services.checkout_service import CheckoutError, CheckoutWriteError, InsufficientStockError
from ..validation import ValidationError, coerce_int, validate_discounts


checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")


@checkout_bp.post("")
def checkout_route():
    """
    Bill a cart.

    Body:
    {
        "cart": [{"sku": "A", "name": "Paracetamol", "price_cents": 1000, "quantity": 2}],
        "discount_percent": 10,
        "discount_cents": 500,
        "contact_id": 3            # optional: Khata (credit) sale
    }

    201 with {"transaction", "complete", "warnings"} once the transaction
    header is saved; warnings list follow-up steps that did not apply.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        cart = checkout_service.parse_cart(data.get("cart"))
        discount_percent, discount_cents = validate_discounts(
            data.get("discount_percent"), data.get("discount_cents")
        )
        contact_id = data.get("contact_id")
        if contact_id is not None:
            contact_id = coerce_int("contact_id", contact_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        result = checkout_service.checkout(
            cart,
            discount_percent=discount_percent,
            discount_cents=discount_cents,
            contact_id=contact_id,
        )
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except CheckoutWriteError as e:
        return jsonify({"error": str(e)}), 500
    except CheckoutError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Checkout failed")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result.to_dict()), 201


@checkout_bp.post("/quote")
def quote_route():
    """Totals for a cart without touching stock or writing anything."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        cart = checkout_service.parse_cart(data.get("cart"))
        discount_percent, discount_cents = validate_discounts(
            data.get("discount_percent"), data.get("discount_cents")
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    totals = checkout_service.compute_totals(cart, discount_percent, discount_cents)
    return jsonify({
        "subtotal_cents": totals.subtotal_cents,
        "discount_percent": float(totals.discount_percent),
        "discount_cents": totals.discount_cents,
        "total_cents": totals.total_cents,
    }), 200
