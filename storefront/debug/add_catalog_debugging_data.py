#!/usr/bin/env python3
"""
Catalog Debug Data Insertion
Inserts categories and products
"""

from decimal import Decimal
from storefront import db
from storefront.utils.logger import get_logger

logger = get_logger("storefront.debug.catalog")


def insert_catalog_debug_data(debug_data):
    """
    Insert debug data for the catalog module

    Args:
        debug_data (dict): Debug data from JSON file

    Raises:
        Exception: If insertion fails (fail-fast)
    """
    if not debug_data:
        logger.info("No catalog debug data to insert")
        return

    logger.info("Inserting catalog debug data...")

    try:
        catalog_data = debug_data.get('Catalog', {})

        # 1. Insert categories
        if 'categories' in catalog_data:
            _insert_categories(catalog_data['categories'])

        # 2. Insert products (resolve category by name)
        if 'products' in catalog_data:
            _insert_products(catalog_data['products'])

        db.session.commit()
        logger.info("Successfully inserted catalog debug data")

    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to insert catalog debug data: {e}")
        raise


def _insert_categories(categories_data):
    """Insert categories using find_or_create_from_dict"""
    from storefront.data.catalog.category import Category

    for category_data in categories_data:
        Category.find_or_create_from_dict(
            category_data,
            lookup_fields=['name'],
            commit=False
        )
        logger.debug(f"Inserted category: {category_data.get('name')}")


def _insert_products(products_data):
    """Insert products; initial stock is part of the product record"""
    from storefront.data.catalog.category import Category
    from storefront.data.catalog.product import Product

    for product_data in products_data:
        category = Category.query.filter_by(name=product_data['category']).first()
        if not category:
            raise ValueError(f"Category '{product_data['category']}' not found for product '{product_data['name']}'")

        data = dict(product_data)
        data['category_id'] = category.id
        data['price'] = Decimal(data['price'])
        Product.find_or_create_from_dict(
            data,
            lookup_fields=['name'],
            commit=False
        )
        logger.debug(f"Inserted product: {product_data.get('name')}")
