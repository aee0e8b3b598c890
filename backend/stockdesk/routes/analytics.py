# Overview: Flask API routes for dashboard and analytics; parses input and returns JSON responses.

"""
Analytics Routes

Dashboard headline figures (revenue, profit, stock alerts, recent sales) and
the analytics view (top sellers, trailing 7-day sales). Everything is
recomputed from the full snapshot on each request.
"""

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Product
from ..services import analytics_service, products_service, transactions_service
from stockdesk.time_utils import parse_iso_date


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("/dashboard")
def dashboard_route():
    transactions = transactions_service.load_all_transactions()
    result = analytics_service.dashboard_summary(
        transactions,
        cost_map=products_service.get_product_cost_map(),
        inventory=products_service.get_inventory_metrics(),
    )
    return jsonify(result)


@analytics_bp.get("/summary")
def summary_route():
    """
    Query params:
    - limit: top-N size (default 5, max 50)
    - today: YYYY-MM-DD reference day for the weekly view (default: UTC today)
    """
    limit = request.args.get("limit", default=analytics_service.DEFAULT_TOP_N, type=int)
    limit = max(1, min(limit, 50))
    try:
        today = parse_iso_date(request.args.get("today"))
    except ValueError:
        return jsonify({"error": "today must be YYYY-MM-DD"}), 400

    products = db.session.query(Product).all()
    transactions = transactions_service.load_all_transactions()
    result = analytics_service.analytics_summary(
        transactions,
        products,
        today=today,
        limit=limit,
    )
    result["profit"] = analytics_service.profit_summary(
        transactions,
        analytics_service.cost_map_from_products(products),
    )
    return jsonify(result)
