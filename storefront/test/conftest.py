"""
Pytest configuration and fixtures for the storefront tests
"""
import os

# Console-only, quiet logging for the test run; must be set before the
# storefront logger is first created
os.environ.setdefault('STOREFRONT_LOG_DIR', '')
os.environ.setdefault('STOREFRONT_LOG_LEVEL', 'WARNING')

from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import select

from storefront import create_app
from storefront import db as _db
from storefront.data.catalog.category import Category
from storefront.data.catalog.product import Product
from storefront.data.customers.customer import Customer

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'RATELIMIT_ENABLED': False,
}


def make_app(**overrides):
    """Create an application with the test configuration plus ``overrides``"""
    config = dict(TEST_CONFIG)
    config.update(overrides)
    return create_app(config)


@pytest.fixture(scope='session')
def app():
    """Create Flask application for testing, backed by in-memory SQLite"""
    app = make_app()

    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh schema for every test"""
    _db.create_all()
    yield _db.session
    _db.session.remove()
    _db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create Flask test client"""
    return app.test_client()


def seed_catalog(session):
    """
    Insert a small catalog and return the ids of what was created

    electronics: phone (899.99, 50), widget (10.00, 5), retired (inactive, 10)
    books: five books at 20.00 with 10 each
    empty: no products
    """
    electronics = Category(name='Electronics')
    books = Category(name='Books')
    empty = Category(name='Empty')
    session.add_all([electronics, books, empty])
    session.flush()

    phone = Product(name='Phone', price=Decimal('899.99'), stock_quantity=50, category_id=electronics.id)
    widget = Product(name='Widget', price=Decimal('10.00'), stock_quantity=5, category_id=electronics.id)
    retired = Product(name='Retired', price=Decimal('5.00'), stock_quantity=10,
                      is_active=False, category_id=electronics.id)
    book_list = [
        Product(name=f'Book {n}', price=Decimal('20.00'), stock_quantity=10, category_id=books.id)
        for n in range(1, 6)
    ]
    session.add_all([phone, widget, retired] + book_list)

    customer = Customer(name='Ana Lima', email='ana@example.com', cpf='11122233344')
    inactive_customer = Customer(name='Old Account', email='old@example.com', is_active=False)
    session.add_all([customer, inactive_customer])
    session.commit()

    return SimpleNamespace(
        customer_id=customer.id,
        inactive_customer_id=inactive_customer.id,
        electronics_id=electronics.id,
        phone_id=phone.id,
        widget_id=widget.id,
        retired_id=retired.id,
        books_id=books.id,
        book_ids=[book.id for book in book_list],
        empty_category_id=empty.id,
    )


@pytest.fixture(scope='function')
def catalog(db_session):
    """Seeded catalog ids"""
    return seed_catalog(db_session)


@pytest.fixture(scope='function')
def stock_of(db_session):
    """Committed stock level of a product, read straight from the table"""
    def _stock_of(product_id):
        stmt = select(Product.stock_quantity).where(Product.id == product_id)
        return db_session.execute(stmt).scalar_one()
    return _stock_of


@pytest.fixture(scope='function')
def make_order(catalog):
    """Create an order through the service and return its receipt"""
    from storefront.services.ordering.order_service import OrderService

    def _make_order(lines, customer_id=None, **kwargs):
        result = OrderService.create_order(
            customer_id=customer_id if customer_id is not None else catalog.customer_id,
            lines=lines,
            **kwargs,
        )
        return result.unwrap()
    return _make_order
