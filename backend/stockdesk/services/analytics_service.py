# Overview: Dashboard and analytics aggregation over an in-memory snapshot.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from stockdesk.time_utils import to_utc_z, utc_today

"""
All functions here are pure: they take the full transaction / product lists
and recompute from scratch in a single pass. Nothing is cached between calls.

Revenue has two meanings:
- per product: quantity_sold x price_per_item (gross, before bill discounts)
- dashboard total: sum of transaction totals (net of discounts)
"""

DEFAULT_TOP_N = 5
WEEK_DAYS = 7


@dataclass
class ProductSales:
    sku: str
    name: str
    quantity: int = 0
    revenue_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "name": self.name,
            "quantity": self.quantity,
            "revenue_cents": self.revenue_cents,
        }


def cost_map_from_products(products: Iterable) -> dict[str, int]:
    return {p.sku: int(p.cost_price_cents or 0) for p in products}


def sales_by_product(transactions: Iterable, products: Iterable = ()) -> list[ProductSales]:
    """
    Group all items by SKU. Result order is first-encountered order, which is
    what breaks ties in the top-N rankings.
    """
    names = {p.sku: p.name for p in products}
    grouped: dict[str, ProductSales] = {}
    for t in transactions:
        for item in t.items:
            row = grouped.get(item.product_sku)
            if row is None:
                row = ProductSales(sku=item.product_sku, name=names.get(item.product_sku, item.product_sku))
                grouped[item.product_sku] = row
            row.quantity += item.quantity_sold
            row.revenue_cents += item.quantity_sold * item.price_per_item_cents
    return list(grouped.values())


def top_products(sales: list[ProductSales], *, by: str = "quantity", limit: int = DEFAULT_TOP_N) -> list[ProductSales]:
    if by == "quantity":
        key = lambda s: s.quantity  # noqa: E731
    elif by == "revenue":
        key = lambda s: s.revenue_cents  # noqa: E731
    else:
        raise ValueError("by must be quantity or revenue")
    # sorted() is stable: equal keys keep first-encountered order
    return sorted(sales, key=key, reverse=True)[:limit]


def cogs_cents(transactions: Iterable, cost_map: dict[str, int]) -> int:
    """sum(quantity_sold x cost price); SKUs without a known cost count as 0."""
    return sum(
        item.quantity_sold * cost_map.get(item.product_sku, 0)
        for t in transactions
        for item in t.items
    )


def profit_summary(transactions: list, cost_map: dict[str, int]) -> dict:
    revenue = sum(t.total_cents for t in transactions)
    cogs = cogs_cents(transactions, cost_map)
    return {
        "revenue_cents": revenue,
        "cogs_cents": cogs,
        "profit_cents": revenue - cogs,
    }


def weekly_sales(transactions: Iterable, *, today: date | None = None) -> list[dict]:
    """
    Trailing 7 calendar days, oldest first, today last. Each bucket sums the
    totals of transactions whose (UTC) date falls on that day.
    """
    today = today or utc_today()
    days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS - 1, -1, -1)]
    buckets = {d: 0 for d in days}

    for t in transactions:
        d = t.timestamp.date()
        if d in buckets:
            buckets[d] += t.total_cents

    return [
        {"date": d.isoformat(), "label": d.strftime("%a"), "value_cents": buckets[d]}
        for d in days
    ]


def dashboard_summary(
    transactions: list,
    *,
    cost_map: dict[str, int],
    inventory: dict,
    recent: int = 5,
) -> dict:
    """
    Headline figures. transactions must be newest first; inventory is
    products_service.get_inventory_metrics().
    """
    summary = profit_summary(transactions, cost_map)
    return {
        "total_revenue_cents": summary["revenue_cents"],
        "total_cogs_cents": summary["cogs_cents"],
        "total_profit_cents": summary["profit_cents"],
        "total_sales": len(transactions),
        "total_products": inventory["total_products"],
        "low_stock_count": inventory["low_stock_count"],
        "near_expiry_count": inventory["near_expiry_count"],
        "recent_transactions": [
            {
                "id": t.id,
                "timestamp": to_utc_z(t.timestamp),
                "items_count": sum(item.quantity_sold for item in t.items),
                "total_cents": t.total_cents,
            }
            for t in transactions[:recent]
        ],
    }


def analytics_summary(
    transactions: list,
    products: list,
    *,
    today: date | None = None,
    limit: int = DEFAULT_TOP_N,
) -> dict:
    sales = sales_by_product(transactions, products)
    return {
        "top_by_quantity": [s.to_dict() for s in top_products(sales, by="quantity", limit=limit)],
        "top_by_revenue": [s.to_dict() for s in top_products(sales, by="revenue", limit=limit)],
        "weekly_sales": weekly_sales(transactions, today=today),
    }
