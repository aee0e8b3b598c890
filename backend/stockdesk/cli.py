# Overview: Flask CLI command groups for bootstrap and inventory inspection.

# backend/stockdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo
#   Insert demo products and contacts, and bill a few sample carts.
#
# Inventory inspection:
# - python -m flask products low-stock
#   List products at or below their low-stock threshold.
# - python -m flask products near-expiry [--days N]
#   List products expiring within the window (default NEAR_EXPIRY_DAYS).

from datetime import timedelta

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Contact, Product
from .services import checkout_service, khata_service, products_service
from .services.checkout_service import CartItem, CheckoutError
from .time_utils import utc_today


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-demo' for sample data.")


DEMO_PRODUCTS = [
    # sku, name, cost, price, qty, threshold, expires_in_days, units_per_item
    ("PCM-500", "Paracetamol 500mg (strip)", 1800, 2500, 120, 20, 180, 10),
    ("ORS-01", "ORS Sachet", 1200, 1500, 60, 15, 5, 1),
    ("VIT-C", "Vitamin C Chewable", 4500, 6000, 8, 10, 90, 1),
    ("BND-10", "Bandage Roll 10cm", 2000, 3500, 40, 10, None, 1),
    ("SAN-250", "Hand Sanitizer 250ml", 7000, 9900, 25, 5, 365, 1),
]


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Products and contacts are created once; every run bills two sample carts."""
    today = utc_today()

    for sku, name, cost, price, qty, threshold, expires_in, units in DEMO_PRODUCTS:
        if db.session.query(Product).filter_by(sku=sku).first():
            continue
        db.session.add(Product(
            sku=sku,
            name=name,
            cost_price_cents=cost,
            price_cents=price,
            quantity=qty,
            low_stock_threshold=threshold,
            expiry_date=today + timedelta(days=expires_in) if expires_in is not None else None,
            units_per_item=units,
        ))
    db.session.commit()
    click.echo(f"PASS Products: {db.session.query(Product).count()}")

    customer = db.session.query(Contact).filter_by(name="Ramesh Kumar").first()
    if customer is None:
        customer = khata_service.create_contact(
            patch={"name": "Ramesh Kumar", "phone_number": "9800000001", "contact_type": "customer"}
        )
    if db.session.query(Contact).filter_by(name="City Pharma Distributors").first() is None:
        khata_service.create_contact(
            patch={"name": "City Pharma Distributors", "phone_number": "9800000002", "contact_type": "supplier"}
        )

    sample_sales = [
        dict(
            cart=[CartItem(sku="PCM-500", price_cents=2500, quantity=2), CartItem(sku="ORS-01", price_cents=1500, quantity=3)],
            discount_percent=10,
        ),
        dict(
            cart=[CartItem(sku="SAN-250", price_cents=9900, quantity=1)],
            discount_cents=400,
            contact_id=customer.id,
        ),
    ]
    for sale in sample_sales:
        cart = sale.pop("cart")
        try:
            result = checkout_service.checkout(cart, **sale)
        except CheckoutError as e:
            click.echo(f"WARN Sample sale skipped: {e}")
            continue
        click.echo(
            f"PASS Transaction #{result.transaction.id} total_cents={result.transaction.total_cents}"
            f" warnings={len(result.warnings)}"
        )


@click.group('products')
def products_group():
    """Inventory inspection commands."""


def _echo_products(rows):
    if not rows:
        click.echo("(none)")
        return
    click.echo(f"{'SKU':<12} {'Name':<32} {'Qty':>6} {'Min':>6} {'Expiry':<10}")
    for p in rows:
        expiry = p.expiry_date.isoformat() if p.expiry_date else "-"
        click.echo(f"{p.sku:<12} {p.name[:32]:<32} {p.quantity:>6} {p.low_stock_threshold:>6} {expiry:<10}")


@products_group.command('low-stock')
@with_appcontext
def low_stock():
    """List products at or below their low-stock threshold."""
    rows = (
        products_service.low_stock_query()
        .order_by(Product.quantity.asc(), Product.name.asc())
        .all()
    )
    _echo_products(rows)


@products_group.command('near-expiry')
@click.option('--days', type=int, default=None, help='Window in days from today (default: NEAR_EXPIRY_DAYS)')
@with_appcontext
def near_expiry(days):
    """List products expiring within the window."""
    rows = (
        products_service.near_expiry_query(days=days)
        .order_by(Product.expiry_date.asc())
        .all()
    )
    _echo_products(rows)


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(products_group)
