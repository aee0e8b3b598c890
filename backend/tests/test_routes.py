# Overview: Pytest coverage for the HTTP API (status codes and response shapes).

"""
API Route Tests

Exercises each blueprint through the Flask test client:
- products CRUD and validation errors
- checkout (201 with warnings, 409 on short stock, 400 on bad input)
- transaction history and deletion
- Khata contacts and ledger
- dashboard / analytics
- health and assistant configuration errors
"""

from conftest import stock_of


class TestSystemRoutes:
    def test_health_degraded_without_assistant(self, client, db_session):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json['status'] == 'degraded'
        assert response.json['checks']['database']['status'] == 'healthy'

    def test_version(self, client):
        response = client.get('/version')
        assert response.status_code == 200
        assert response.json['api_version'] == '1.0.0'


class TestProductRoutes:
    def test_create_list_get(self, client, db_session):
        response = client.post('/api/products', json={
            'sku': 'PCM-500',
            'name': 'Paracetamol 500mg',
            'price_cents': 2500,
            'cost_price_cents': 1800,
            'quantity': 40,
            'expiry_date': '2026-12-31',
        })
        assert response.status_code == 201
        assert response.json['expiry_date'] == '2026-12-31'

        listing = client.get('/api/products')
        assert listing.status_code == 200
        assert [p['sku'] for p in listing.json['items']] == ['PCM-500']

        single = client.get('/api/products/PCM-500')
        assert single.json['name'] == 'Paracetamol 500mg'

    def test_create_validation(self, client, db_session):
        missing = client.post('/api/products', json={'sku': 'X', 'name': 'X'})
        assert missing.status_code == 400

        negative = client.post('/api/products', json={'sku': 'X', 'name': 'X', 'price_cents': 100, 'quantity': -1})
        assert negative.status_code == 400

        decimal_price = client.post('/api/products', json={'sku': 'X', 'name': 'X', 'price_cents': 10.5, 'quantity': 1})
        assert decimal_price.status_code == 400

        unknown = client.post('/api/products', json={'sku': 'X', 'name': 'X', 'price_cents': 1, 'quantity': 1, 'id': 5})
        assert unknown.status_code == 400

    def test_duplicate_sku(self, client, make_product):
        make_product('A')
        response = client.post('/api/products', json={'sku': 'A', 'name': 'Again', 'price_cents': 1, 'quantity': 1})
        assert response.status_code == 409

    def test_patch_and_delete(self, client, make_product):
        make_product('A', quantity=5)

        renamed = client.patch('/api/products/A', json={'sku': 'B'})
        assert renamed.status_code == 400

        patched = client.patch('/api/products/A', json={'quantity': 12, 'low_stock_threshold': 3})
        assert patched.status_code == 200
        assert patched.json['quantity'] == 12
        assert patched.json['is_low_stock'] is False

        deleted = client.delete('/api/products/A')
        assert deleted.json == {'deleted': True, 'sku': 'A'}
        assert client.get('/api/products/A').status_code == 404

    def test_metrics(self, client, make_product):
        make_product('A', quantity=1)
        response = client.get('/api/products/metrics')
        assert response.json['total_products'] == 1
        assert response.json['low_stock_count'] == 1


class TestCheckoutRoutes:
    def test_checkout(self, client, make_product):
        make_product('A', quantity=10, price_cents=100)

        response = client.post('/api/checkout', json={
            'cart': [{'sku': 'A', 'price_cents': 100, 'quantity': 2}],
            'discount_percent': 10,
            'discount_cents': 5,
        })

        assert response.status_code == 201
        assert response.json['complete'] is True
        assert response.json['warnings'] == []
        assert response.json['transaction']['total_cents'] == 175
        assert response.json['transaction']['discount_percent'] == 10.0
        assert stock_of('A') == 8

    def test_insufficient_stock(self, client, make_product):
        make_product('A', quantity=1)

        response = client.post('/api/checkout', json={'cart': [{'sku': 'A', 'price_cents': 100, 'quantity': 3}]})

        assert response.status_code == 409
        assert response.json['details']['items'][0]['on_hand'] == 1

    def test_bad_input(self, client, db_session):
        assert client.post('/api/checkout', json={'cart': []}).status_code == 400
        assert client.post('/api/checkout', json={
            'cart': [{'sku': 'A', 'price_cents': 100, 'quantity': 1}],
            'discount_percent': 120,
        }).status_code == 400
        assert client.post('/api/checkout', json={
            'cart': [{'sku': 'A', 'price_cents': 100, 'quantity': 1}],
            'discount_percent': '12.345',
        }).status_code == 400

    def test_unknown_contact(self, client, make_product):
        make_product('A', quantity=5)
        response = client.post('/api/checkout', json={
            'cart': [{'sku': 'A', 'price_cents': 100, 'quantity': 1}],
            'contact_id': 999,
        })
        assert response.status_code == 400

    def test_quote(self, client, db_session):
        response = client.post('/api/checkout/quote', json={
            'cart': [{'sku': 'A', 'price_cents': 50, 'quantity': 1}],
            'discount_percent': 100,
        })
        assert response.status_code == 200
        assert response.json['total_cents'] == 0
        assert response.json['subtotal_cents'] == 50


class TestTransactionRoutes:
    def test_list_get_delete(self, client, make_product):
        make_product('A', quantity=10)
        created = client.post('/api/checkout', json={'cart': [{'sku': 'A', 'price_cents': 100, 'quantity': 1}]})
        txn_id = created.json['transaction']['id']

        listing = client.get('/api/transactions?filter=direct')
        assert [t['id'] for t in listing.json['items']] == [txn_id]

        assert client.get('/api/transactions?filter=bogus').status_code == 400

        single = client.get(f'/api/transactions/{txn_id}')
        assert single.json['transaction']['items'][0]['product_sku'] == 'A'

        deleted = client.delete(f'/api/transactions/{txn_id}')
        assert deleted.json == {'deleted': True, 'id': txn_id}
        assert client.get(f'/api/transactions/{txn_id}').status_code == 404
        assert client.delete(f'/api/transactions/{txn_id}').status_code == 404


class TestKhataRoutes:
    def test_contact_ledger_flow(self, client, db_session):
        created = client.post('/api/contacts', json={'name': 'Ramesh Kumar', 'phone_number': '9800000001'})
        assert created.status_code == 201
        contact_id = created.json['contact']['id']
        assert created.json['contact']['balance_status'] == 'Settled'

        credit = client.post(f'/api/contacts/{contact_id}/ledger', json={
            'amount_cents': 100, 'entry_type': 'credit_given', 'description': 'Opening balance',
        })
        assert credit.status_code == 201
        payment = client.post(f'/api/contacts/{contact_id}/ledger', json={
            'amount_cents': 40, 'entry_type': 'payment_received',
        })
        assert payment.json['balance_cents'] == 60

        contact = client.get(f'/api/contacts/{contact_id}')
        assert contact.json['contact']['current_balance_cents'] == 60
        assert contact.json['contact']['balance_status'] == 'Due'

        ledger = client.get(f'/api/contacts/{contact_id}/ledger')
        assert len(ledger.json['items']) == 2
        assert ledger.json['balance_cents'] == 60

    def test_ledger_validation(self, client, make_contact):
        contact = make_contact()
        zero = client.post(f'/api/contacts/{contact.id}/ledger', json={'amount_cents': 0, 'entry_type': 'credit_given'})
        assert zero.status_code == 400
        bad_type = client.post(f'/api/contacts/{contact.id}/ledger', json={'amount_cents': 5, 'entry_type': 'gift'})
        assert bad_type.status_code == 400
        missing = client.post('/api/contacts/999/ledger', json={'amount_cents': 5, 'entry_type': 'credit_given'})
        assert missing.status_code == 404

    def test_contact_validation_and_listing(self, client, make_contact):
        assert client.post('/api/contacts', json={'name': 'X', 'contact_type': 'vendor'}).status_code == 400
        make_contact('Suresh Traders', contact_type='supplier')
        make_contact('Anita Sharma')

        suppliers = client.get('/api/contacts?type=supplier')
        assert [c['name'] for c in suppliers.json['items']] == ['Suresh Traders']
        assert client.get('/api/contacts?type=vendor').status_code == 400
        assert client.get('/api/contacts/999').status_code == 404


class TestAnalyticsRoutes:
    def test_dashboard_and_summary(self, client, make_product):
        make_product('A', quantity=10, cost_price_cents=4)
        client.post('/api/checkout', json={'cart': [{'sku': 'A', 'price_cents': 10, 'quantity': 3}]})

        dashboard = client.get('/api/analytics/dashboard')
        assert dashboard.status_code == 200
        assert dashboard.json['total_revenue_cents'] == 30
        assert dashboard.json['total_cogs_cents'] == 12
        assert dashboard.json['total_profit_cents'] == 18
        assert dashboard.json['total_sales'] == 1

        summary = client.get('/api/analytics/summary')
        assert summary.status_code == 200
        assert summary.json['top_by_quantity'][0] == {
            'sku': 'A', 'name': 'Product A', 'quantity': 3, 'revenue_cents': 30,
        }
        assert len(summary.json['weekly_sales']) == 7
        assert summary.json['weekly_sales'][-1]['value_cents'] == 30
        assert summary.json['profit']['profit_cents'] == 18

        assert client.get('/api/analytics/summary?today=not-a-date').status_code == 400


class TestAssistantRoute:
    def test_not_configured(self, client, db_session):
        response = client.post('/api/assistant', json={'userInput': 'hello'})
        assert response.status_code == 503
        assert 'error' in response.json

    def test_blank_question(self, client, db_session):
        response = client.post('/api/assistant', json={'userInput': ''})
        assert response.status_code == 400


class TestNonObjectBodies:
    def test_json_array_bodies_are_rejected(self, client, make_product, make_contact):
        make_product('A', quantity=5)
        contact = make_contact()
        body = [{'sku': 'A', 'price_cents': 100, 'quantity': 1}]

        for method, url in [
            (client.post, '/api/checkout'),
            (client.post, '/api/checkout/quote'),
            (client.post, '/api/products'),
            (client.patch, '/api/products/A'),
            (client.post, '/api/contacts'),
            (client.post, f'/api/contacts/{contact.id}/ledger'),
            (client.post, '/api/assistant'),
        ]:
            response = method(url, json=body)
            assert response.status_code == 400, url
            assert response.json['error'] == 'Invalid JSON payload'
