"""
JSON API tests
"""
import pytest

from storefront.buisness.core.errors import ConflictError
from storefront.buisness.inventory.stock_ledger import StockLedger


def _create(client, catalog, lines, **extra):
    payload = {'customer_id': catalog.customer_id, 'lines': lines}
    payload.update(extra)
    return client.post('/api/orders', json=payload)


def test_create_and_read_order(client, catalog):
    response = _create(client, catalog, [
        {'product_id': catalog.phone_id, 'quantity': 1},
        {'product_id': catalog.widget_id, 'quantity': 2, 'discount': '1.50'},
    ], notes='Leave at the door')

    assert response.status_code == 201
    body = response.get_json()
    assert body['status'] == 'Pending'
    assert body['total_amount'] == '918.49'
    assert len(body['lines']) == 2

    response = client.get(f"/api/orders/{body['order_id']}")
    assert response.status_code == 200
    order = response.get_json()
    assert order['order_number'] == body['order_number']
    assert order['notes'] == 'Leave at the door'

    response = client.get(f"/api/orders/by-number/{body['order_number']}")
    assert response.get_json()['id'] == body['order_id']


def test_security_headers(client, catalog):
    response = client.get('/api/orders/9999')
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['X-Frame-Options'] == 'DENY'


def test_insufficient_stock_is_409(client, catalog, stock_of):
    response = _create(client, catalog, [{'product_id': catalog.widget_id, 'quantity': 6}])

    assert response.status_code == 409
    error = response.get_json()['error']
    assert error['code'] == 'insufficient_stock'
    assert error['details']['available'] == 5
    assert error['retryable'] is False
    assert stock_of(catalog.widget_id) == 5


def test_unknown_customer_is_404(client, catalog):
    response = client.post('/api/orders', json={'customer_id': 9999, 'lines': []})

    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'customer_not_found'


def test_malformed_body_is_422(client, catalog):
    response = client.post('/api/orders', data='not json', content_type='application/json')
    assert response.status_code == 422

    response = _create(client, catalog, [{'product_id': catalog.phone_id, 'quantity': 0}])
    assert response.status_code == 422
    assert response.get_json()['error']['code'] == 'validation_error'


def test_duplicate_order_number_is_409(client, catalog):
    lines = [{'product_id': catalog.phone_id, 'quantity': 1}]
    assert _create(client, catalog, lines, order_number='PED-API').status_code == 201

    response = _create(client, catalog, lines, order_number='PED-API')

    assert response.status_code == 409
    assert response.get_json()['error']['code'] == 'duplicate_order_number'


def test_conflict_is_503_with_retry_after(client, catalog, monkeypatch):
    def locked(self, product_id, quantity, **kwargs):
        raise ConflictError("The record is locked by a concurrent operation; retry shortly")

    monkeypatch.setattr(StockLedger, 'reserve', locked)

    response = _create(client, catalog, [{'product_id': catalog.phone_id, 'quantity': 1}])

    assert response.status_code == 503
    assert response.headers['Retry-After'] == '1'
    assert response.get_json()['error']['retryable'] is True


def test_status_lifecycle(client, catalog, stock_of):
    order_id = _create(client, catalog, [{'product_id': catalog.widget_id, 'quantity': 2}]).get_json()['order_id']

    response = client.post(f'/api/orders/{order_id}/status', json={'status': 'Delivered'})
    assert response.status_code == 409
    assert response.get_json()['error']['code'] == 'illegal_transition'

    response = client.post(f'/api/orders/{order_id}/status', json={'status': 'Shipped'})
    assert response.status_code == 422

    response = client.post(f'/api/orders/{order_id}/status', json={'status': 'Confirmed'})
    assert response.status_code == 200
    assert response.get_json()['to_status'] == 'Confirmed'

    response = client.post(f'/api/orders/{order_id}/cancel')
    assert response.status_code == 200
    assert response.get_json()['restocked'] == {str(catalog.widget_id): 2}
    assert stock_of(catalog.widget_id) == 5

    response = client.post(f'/api/orders/{order_id}/cancel')
    assert response.status_code == 409
    assert response.get_json()['error']['code'] == 'already_cancelled'


def test_return_by_number(client, catalog, stock_of):
    body = _create(client, catalog, [{'product_id': catalog.widget_id, 'quantity': 1}]).get_json()
    client.post(f"/api/orders/{body['order_id']}/status", json={'status': 'Confirmed'})

    response = client.post(f"/api/orders/by-number/{body['order_number']}/return")

    assert response.status_code == 200
    assert response.get_json()['to_status'] == 'Cancelled'
    assert stock_of(catalog.widget_id) == 5

    assert client.post('/api/orders/by-number/NOPE/return').status_code == 404


def test_category_stock_adjustment(client, catalog, stock_of):
    quantities = {str(book_id): 7 for book_id in catalog.book_ids}

    response = client.put(f'/api/categories/{catalog.books_id}/stock', json={'quantities': quantities})

    assert response.status_code == 200
    assert response.get_json() == quantities
    assert stock_of(catalog.book_ids[0]) == 7


def test_category_stock_adjustment_is_all_or_nothing(client, catalog, stock_of):
    quantities = {str(book_id): 7 for book_id in catalog.book_ids}
    quantities[str(catalog.book_ids[4])] = -3

    response = client.put(f'/api/categories/{catalog.books_id}/stock', json={'quantities': quantities})

    assert response.status_code == 422
    assert response.get_json()['error']['code'] == 'invalid_quantity'
    assert all(stock_of(book_id) == 10 for book_id in catalog.book_ids)


def test_unknown_category_is_404(client, catalog):
    response = client.put('/api/categories/9999/stock', json={'quantities': {'1': 1}})
    assert response.status_code == 404


def test_product_stock_and_movements(client, catalog):
    _create(client, catalog, [{'product_id': catalog.phone_id, 'quantity': 3}])

    stock = client.get(f'/api/products/{catalog.phone_id}/stock').get_json()
    assert stock['stock_quantity'] == 47
    assert stock['is_available'] is True

    movements = client.get(f'/api/products/{catalog.phone_id}/movements?limit=5').get_json()
    assert len(movements) == 1
    assert movements[0]['quantity_delta'] == -3
    assert movements[0]['stock_after'] == 47

    assert client.get('/api/products/9999/stock').status_code == 404


def test_unknown_route_is_json_404(client, catalog):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'not_found'


@pytest.mark.parametrize('extra', [
    {'lines': 5},
    {'notes': {'a': 1}},
    {'order_number': 'X' * 100},
    {'lines': [{'product_id': 1, 'quantity': 1, 'discount': '1e30'}]},
    {'lines': [{'product_id': 1, 'quantity': 10**20}]},
])
def test_out_of_range_order_fields_are_422(client, catalog, extra):
    payload = {'customer_id': catalog.customer_id, 'lines': [{'product_id': catalog.phone_id, 'quantity': 1}]}
    payload.update(extra)

    response = client.post('/api/orders', json=payload)

    assert response.status_code == 422
    assert response.get_json()['error']['code'] in ('validation_error', 'invalid_quantity')


def test_stock_level_beyond_column_range_is_422(client, catalog, stock_of):
    quantities = {str(catalog.book_ids[0]): 10**20}

    response = client.put(f'/api/categories/{catalog.books_id}/stock', json={'quantities': quantities})

    assert response.status_code == 422
    assert response.get_json()['error']['code'] == 'invalid_quantity'
    assert stock_of(catalog.book_ids[0]) == 10


def test_empty_batch_for_unknown_category_is_404(client, catalog):
    response = client.put('/api/categories/9999/stock', json={'quantities': {}})

    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'category_not_found'


def test_out_of_range_ids_in_url_are_422(client, catalog):
    assert client.get('/api/orders/100000000000000000000').status_code == 422
    assert client.post('/api/orders/100000000000000000000/cancel').status_code == 422
    assert client.get('/api/products/100000000000000000000/stock').status_code == 422
