# Overview: Flask API routes for transaction history; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import transactions_service
from ..services.transactions_service import TransactionDeleteError
from ..validation import NotFoundError, ValidationError


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
def list_transactions_route():
    """
    Transaction history, newest first.

    Query params:
    - filter: all | khata | direct (default all)
    - q: search term (id, YYYY-MM-DD date, contact name)
    - page, per_page
    """
    try:
        result = transactions_service.list_transactions(
            filter_type=request.args.get("filter", "all"),
            search=request.args.get("q"),
            page=request.args.get("page", type=int),
            per_page=request.args.get("per_page", type=int),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(result), 200


@transactions_bp.get("/<int:transaction_id>")
def get_transaction_route(transaction_id: int):
    try:
        txn = transactions_service.get_transaction(transaction_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"transaction": txn.to_dict()}), 200


@transactions_bp.delete("/<int:transaction_id>")
def delete_transaction_route(transaction_id: int):
    """Delete a transaction and its items. Stock is not restored."""
    try:
        transactions_service.delete_transaction(transaction_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except TransactionDeleteError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"deleted": True, "id": transaction_id}), 200
