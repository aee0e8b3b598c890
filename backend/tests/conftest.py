"""
Pytest fixtures for stockdesk backend tests.

Provides test database setup, product/contact factories, and test client.
"""

import pytest

from stockdesk import create_app
from stockdesk.extensions import db
from stockdesk.models import Contact, Product


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'ASSISTANT_RELAY_URL': '',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product("A", quantity=5, price_cents=1000, cost_price_cents=400)."""
    def _make(sku, *, name=None, quantity=10, price_cents=1000, cost_price_cents=0, **extra):
        product = Product(
            sku=sku,
            name=name or f"Product {sku}",
            quantity=quantity,
            price_cents=price_cents,
            cost_price_cents=cost_price_cents,
            **extra,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def make_contact(db_session):
    """Factory: make_contact("Ramesh", contact_type="customer")."""
    def _make(name="Ramesh Kumar", *, phone_number=None, contact_type="customer"):
        contact = Contact(name=name, phone_number=phone_number, contact_type=contact_type)
        db_session.add(contact)
        db_session.commit()
        return contact
    return _make


def stock_of(sku: str) -> int:
    """On-hand quantity read straight from the database."""
    db.session.expire_all()
    return db.session.query(Product.quantity).filter_by(sku=sku).scalar()
