# Overview: Pytest coverage for product inventory management and stock alerts.

from datetime import date, timedelta

import pytest

from stockdesk.services import products_service
from stockdesk.validation import ConflictError, NotFoundError


class TestProductCrud:
    def test_create_and_get(self, db_session):
        products_service.create_product(sku="PCM-500", patch={"name": "Paracetamol", "price_cents": 2500, "quantity": 40})

        product = products_service.get_product("PCM-500")

        assert product.name == "Paracetamol"
        assert product.quantity == 40
        assert product.low_stock_threshold == 10
        assert product.units_per_item == 1

    def test_duplicate_sku_conflicts(self, db_session, make_product):
        make_product("A")
        with pytest.raises(ConflictError):
            products_service.create_product(sku="A", patch={"name": "Again", "price_cents": 1, "quantity": 1})

    def test_update_ignores_sku_and_unknown_fields(self, db_session, make_product):
        make_product("A", quantity=5)

        updated = products_service.update_product(sku="A", patch={"quantity": 9, "sku": "B", "id": 77})

        assert updated.sku == "A"
        assert updated.quantity == 9

    def test_delete(self, db_session, make_product):
        make_product("A")
        products_service.delete_product(sku="A")
        with pytest.raises(NotFoundError):
            products_service.get_product("A")

    def test_list_paginated_by_name(self, db_session, make_product):
        make_product("C", name="Cetirizine")
        make_product("A", name="Amoxicillin")
        make_product("B", name="Bandage")

        page = products_service.list_products(page=2, per_page=2)

        assert [p["sku"] for p in page["items"]] == ["C"]
        assert page["total"] == 3
        assert page["pagination"]["total_pages"] == 2
        assert page["pagination"]["has_prev"] is True
        assert page["pagination"]["has_next"] is False

        everything = products_service.list_products()
        assert [p["sku"] for p in everything["items"]] == ["A", "B", "C"]
        assert "pagination" not in everything


class TestStockAlerts:
    def test_low_stock_is_at_or_below_threshold(self, db_session, make_product):
        make_product("AT", quantity=10, low_stock_threshold=10)
        make_product("BELOW", quantity=0, low_stock_threshold=5)
        make_product("ABOVE", quantity=11, low_stock_threshold=10)

        assert products_service.get_low_stock_count() == 2
        assert {p.sku for p in products_service.low_stock_query()} == {"AT", "BELOW"}

    def test_near_expiry_window_is_inclusive(self, db_session, make_product):
        today = date(2026, 5, 1)
        make_product("TODAY", expiry_date=today)
        make_product("EDGE", expiry_date=today + timedelta(days=7))
        make_product("LATER", expiry_date=today + timedelta(days=8))
        make_product("EXPIRED", expiry_date=today - timedelta(days=1))
        make_product("NONE")

        assert products_service.get_near_expiry_count(today=today, days=7) == 2
        assert products_service.get_near_expiry_count(today=today, days=8) == 3

    def test_near_expiry_uses_configured_window(self, app, db_session, make_product):
        today = date(2026, 5, 1)
        make_product("SOON", expiry_date=today + timedelta(days=3))

        assert products_service.get_near_expiry_count(today=today) == 1
        app.config["NEAR_EXPIRY_DAYS"] = 2
        try:
            assert products_service.get_near_expiry_count(today=today) == 0
        finally:
            app.config["NEAR_EXPIRY_DAYS"] = 7

    def test_inventory_metrics(self, db_session, make_product):
        make_product("A", quantity=1)
        make_product("B", quantity=50)

        metrics = products_service.get_inventory_metrics()

        assert metrics["total_products"] == 2
        assert metrics["low_stock_count"] == 1

    def test_cost_map(self, db_session, make_product):
        make_product("A", cost_price_cents=400)
        make_product("B")
        assert products_service.get_product_cost_map() == {"A": 400, "B": 0}
