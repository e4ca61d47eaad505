"""
Build and debug data tests
"""
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storefront.build import build_database, build_models
from storefront.data.catalog.category import Category
from storefront.data.catalog.product import Product
from storefront.data.customers.customer import Customer
from storefront.data.ordering.order import Order


def _count(session, model):
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_build_database_inserts_debug_data(db_session):
    summary = build_database()

    assert summary == {
        'catalog': {'status': 'inserted'},
        'customers': {'status': 'inserted'},
        'ordering': {'status': 'inserted'},
    }
    assert _count(db_session, Category) == 3
    assert _count(db_session, Product) == 6
    assert _count(db_session, Customer) == 2
    assert _count(db_session, Order) == 2


def test_seeded_order_totals_match_lines(db_session):
    build_database()

    for order in db_session.execute(select(Order)).scalars():
        assert order.total_amount == order.lines_total

    order = db_session.execute(select(Order).where(Order.order_number == 'PED002')).scalar_one()
    assert order.status == 'Confirmed'
    assert order.total_amount == Decimal('169.98')


def test_second_build_skips_present_data(db_session):
    build_database()
    summary = build_database()

    assert all(entry == {'status': 'skipped', 'reason': 'data_present'} for entry in summary.values())
    assert _count(db_session, Product) == 6


def test_partial_data_phase(db_session):
    summary = build_database(data_phase='customers')

    assert set(summary) == {'catalog', 'customers'}
    assert _count(db_session, Order) == 0


def test_debug_data_can_be_disabled(db_session):
    assert build_database(enable_debug_data=False) == {}
    assert _count(db_session, Category) == 0


def test_unknown_build_phase(db_session):
    with pytest.raises(ValueError):
        build_models('warehouse')
