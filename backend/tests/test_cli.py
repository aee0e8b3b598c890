# Overview: Pytest coverage for the Flask CLI command groups.

from datetime import timedelta

from stockdesk.models import Contact, Product, Transaction
from stockdesk.time_utils import utc_today


def test_seed_demo_then_low_stock(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['system', 'seed-demo'])

    assert result.exit_code == 0, result.output
    assert db_session.query(Product).count() == 5
    assert db_session.query(Contact).count() == 2
    assert db_session.query(Transaction).count() == 2

    low = runner.invoke(args=['products', 'low-stock'])
    assert low.exit_code == 0
    assert 'VIT-C' in low.output


def test_near_expiry(app, db_session, make_product):
    runner = app.test_cli_runner()

    empty = runner.invoke(args=['products', 'near-expiry'])
    assert '(none)' in empty.output

    make_product('ORS-01', expiry_date=utc_today() + timedelta(days=3))
    make_product('SAN-250', expiry_date=utc_today() + timedelta(days=30))

    listed = runner.invoke(args=['products', 'near-expiry', '--days', '7'])
    assert 'ORS-01' in listed.output
    assert 'SAN-250' not in listed.output


def test_seed_demo_is_repeatable(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=['system', 'seed-demo'])
    runner.invoke(args=['system', 'seed-demo'])

    assert db_session.query(Product).count() == 5
    assert db_session.query(Contact).count() == 2
    assert db_session.query(Transaction).count() == 4


def test_near_expiry_defaults_to_configured_window(app, db_session, make_product):
    runner = app.test_cli_runner()
    make_product('ORS-01', expiry_date=utc_today() + timedelta(days=3))

    app.config['NEAR_EXPIRY_DAYS'] = 2
    try:
        narrow = runner.invoke(args=['products', 'near-expiry'])
    finally:
        app.config['NEAR_EXPIRY_DAYS'] = 7
    assert narrow.exit_code == 0
    assert 'ORS-01' not in narrow.output

    wide = runner.invoke(args=['products', 'near-expiry'])
    assert 'ORS-01' in wide.output


def test_seed_demo_reports_sold_out_sample(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=['system', 'seed-demo'])
    db_session.query(Product).filter_by(sku='SAN-250').update({Product.quantity: 0})
    db_session.commit()

    result = runner.invoke(args=['system', 'seed-demo'])

    assert result.exit_code == 0, result.output
    assert 'WARN Sample sale skipped' in result.output
    assert db_session.query(Transaction).count() == 3
