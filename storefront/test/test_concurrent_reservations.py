"""
Concurrent order creation against a file-backed SQLite database

Each worker thread runs in its own application context, so it gets its own
session and connection. SQLite serializes the writers; lock waits that run
out surface as ConflictError and are retried by the caller.
"""
import threading
import time

import pytest
from sqlalchemy import func, select

from storefront import db
from storefront.buisness.core.errors import InsufficientStockError
from storefront.data.catalog.product import Product
from storefront.data.ordering.order import Order
from storefront.services.ordering.order_service import OrderService
from storefront.test.conftest import make_app, seed_catalog

WORKERS = 8
MAX_ATTEMPTS = 50


@pytest.fixture
def file_app(tmp_path):
    app = make_app(
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'concurrency.db'}",
        SQLALCHEMY_ENGINE_OPTIONS={'connect_args': {'check_same_thread': False}},
        STOCK_LOCK_TIMEOUT_SECONDS=1,
    )
    with app.app_context():
        db.create_all()
        ids = seed_catalog(db.session)
        db.session.remove()
    yield app, ids
    with app.app_context():
        db.engine.dispose()


def _place_order(app, customer_id, product_id, barrier, results):
    with app.app_context():
        barrier.wait()
        for attempt in range(MAX_ATTEMPTS):
            result = OrderService.create_order(customer_id=customer_id, lines=[(product_id, 1)])
            if result.ok or not result.error.retryable:
                break
            time.sleep(0.01 * (attempt + 1))
        results.append(result)


def test_stock_never_oversold(file_app):
    app, ids = file_app
    barrier = threading.Barrier(WORKERS)
    results = []
    threads = [
        threading.Thread(target=_place_order, args=(app, ids.customer_id, ids.widget_id, barrier, results))
        for _ in range(WORKERS)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert len(results) == WORKERS
    succeeded = [r for r in results if r.ok]
    failed = [r for r in results if not r.ok]

    # Widget starts with 5 in stock
    assert len(succeeded) == 5
    assert len(failed) == WORKERS - 5
    assert all(isinstance(r.error, InsufficientStockError) for r in failed)

    with app.app_context():
        stock = db.session.execute(
            select(Product.stock_quantity).where(Product.id == ids.widget_id)
        ).scalar_one()
        orders = db.session.execute(select(func.count()).select_from(Order)).scalar_one()

    assert stock == 0
    assert orders == 5
    assert len({r.value.order_number for r in succeeded}) == 5
