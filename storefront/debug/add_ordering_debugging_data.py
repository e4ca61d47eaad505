#!/usr/bin/env python3
"""
Ordering Debug Data Insertion
Inserts historical orders with their lines

These orders describe sales that already happened, so they are written
directly with their recorded status and do not reserve stock.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from storefront import db
from storefront.utils.logger import get_logger

logger = get_logger("storefront.debug.ordering")


def insert_ordering_debug_data(debug_data):
    """
    Insert debug data for the ordering module

    Raises:
        Exception: If insertion fails (fail-fast)
    """
    if not debug_data:
        logger.info("No ordering debug data to insert")
        return

    logger.info("Inserting ordering debug data...")

    try:
        for order_data in debug_data.get('Ordering', {}).get('orders', []):
            _insert_order(order_data)

        db.session.commit()
        logger.info("Successfully inserted ordering debug data")

    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to insert ordering debug data: {e}")
        raise


def _insert_order(order_data):
    from storefront.buisness.ordering.state_machine import OrderStateMachine
    from storefront.data.catalog.product import Product
    from storefront.data.customers.customer import Customer
    from storefront.data.ordering.order import Order
    from storefront.data.ordering.order_line import OrderLine

    customer = Customer.query.filter_by(email=order_data['customer_email']).first()
    if not customer:
        raise ValueError(f"Customer for order {order_data['order_number']} not found")

    status = OrderStateMachine.parse_status(order_data['status'])
    order = Order(
        order_number=order_data['order_number'],
        order_date=datetime.utcnow() - timedelta(days=order_data.get('days_ago', 0)),
        status=status,
        customer_id=customer.id,
        notes=order_data.get('notes'),
    )

    for line_number, line_data in enumerate(order_data.get('lines', []), start=1):
        product = Product.query.filter_by(name=line_data['product']).first()
        if not product:
            raise ValueError(f"Product '{line_data['product']}' not found for order {order_data['order_number']}")
        order.order_lines.append(OrderLine(
            product_id=product.id,
            line_number=line_number,
            quantity=line_data['quantity'],
            unit_price=Decimal(line_data['unit_price']),
            discount=Decimal(line_data.get('discount', '0.00')),
        ))

    # Stored total always matches the lines
    order.total_amount = order.lines_total
    db.session.add(order)
    db.session.flush()
    logger.debug(f"Inserted order {order.order_number} ({order.status}), total {order.total_amount}")
