#!/usr/bin/env python3
"""
Customers Debug Data Insertion
"""

from storefront import db
from storefront.utils.logger import get_logger

logger = get_logger("storefront.debug.customers")


def insert_customers_debug_data(debug_data):
    """
    Insert debug data for the customers module

    Raises:
        Exception: If insertion fails (fail-fast)
    """
    if not debug_data:
        logger.info("No customer debug data to insert")
        return

    from storefront.data.customers.customer import Customer

    try:
        for customer_data in debug_data.get('Customers', {}).get('customers', []):
            customer, created = Customer.find_or_create_from_dict(
                customer_data,
                lookup_fields=['email'],
                commit=False
            )
            if created:
                logger.debug(f"Inserted customer {customer.id}")

        db.session.commit()
        logger.info("Successfully inserted customer debug data")

    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to insert customer debug data: {e}")
        raise
