#!/usr/bin/env python3
"""
Debug Data Manager
Central controller for debug data insertion

Handles:
- Loading debug data JSON files
- Checking if data is already present
- Orchestrating module-specific insertion functions
- Following build order: catalog → customers → ordering
- Fail-fast error handling
"""

from pathlib import Path
import json
from storefront import db
from storefront.utils.logger import get_logger

logger = get_logger("storefront.debug.debug_data_manager")

DATA_MODULES = ('catalog', 'customers', 'ordering')


def insert_debug_data(enabled=True, phase='all'):
    """
    Insert debug data for specified phase(s)

    Args:
        enabled (bool): Whether to insert debug data (default: True)
        phase (str): Last module to insert ('catalog', 'customers', 'ordering'), or 'all'

    Returns:
        dict: Summary of inserted data

    Raises:
        Exception: If any debug data insertion fails (fail-fast)
    """
    if not enabled:
        logger.info("Debug data insertion is disabled")
        return {}

    logger.info(f"Starting debug data insertion for phase: {phase}")

    summary = {}
    for module_name in _get_modules_for_phase(phase):
        try:
            debug_data = _load_debug_data_file(module_name)
            if not debug_data:
                logger.info(f"No debug data file found for {module_name}, skipping")
                summary[module_name] = {'status': 'skipped', 'reason': 'file_not_found'}
                continue

            if _check_debug_data_present(module_name, debug_data):
                logger.info(f"Debug data for {module_name} already present, skipping")
                summary[module_name] = {'status': 'skipped', 'reason': 'data_present'}
                continue

            logger.info(f"Inserting debug data for {module_name}...")
            _insert_module_debug_data(module_name, debug_data)
            summary[module_name] = {'status': 'inserted'}
            logger.info(f"Successfully inserted debug data for {module_name}")

        except Exception as e:
            logger.error(f"Failed to insert debug data for {module_name}: {e}")
            db.session.rollback()
            raise

    logger.info("Debug data insertion completed successfully")
    return summary


def _get_modules_for_phase(phase):
    """
    Get list of modules to insert based on phase, in build order

    Args:
        phase (str): Phase identifier

    Returns:
        list: List of module names
    """
    if phase == 'all':
        return list(DATA_MODULES)
    if phase in DATA_MODULES:
        return list(DATA_MODULES[:DATA_MODULES.index(phase) + 1])

    logger.warning(f"Unknown phase '{phase}', inserting all modules")
    return list(DATA_MODULES)


def _load_debug_data_file(module_name):
    """
    Load debug data JSON file for a module

    Returns:
        dict: Debug data or None if file doesn't exist
    """
    debug_file = Path(__file__).parent / 'data' / f'{module_name}.json'

    if not debug_file.exists():
        return None

    try:
        with open(debug_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.debug(f"Loaded debug data file: {debug_file}")
        return data
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {debug_file}: {e}")
        raise


def _check_debug_data_present(module_name, debug_data):
    """
    Check if debug data for a module is already present, by natural keys

    Returns:
        bool: True if data present, False otherwise
    """
    if module_name == 'catalog':
        from storefront.data.catalog.category import Category
        for category_data in debug_data.get('Catalog', {}).get('categories', []):
            if Category.query.filter_by(name=category_data['name']).first():
                return True

    elif module_name == 'customers':
        from storefront.data.customers.customer import Customer
        for customer_data in debug_data.get('Customers', {}).get('customers', []):
            if Customer.query.filter_by(email=customer_data['email']).first():
                return True

    elif module_name == 'ordering':
        from storefront.data.ordering.order import Order
        for order_data in debug_data.get('Ordering', {}).get('orders', []):
            if Order.query.filter_by(order_number=order_data['order_number']).first():
                return True

    return False


def _insert_module_debug_data(module_name, debug_data):
    """Dispatch to the module-specific insertion function"""
    if module_name == 'catalog':
        from storefront.debug.add_catalog_debugging_data import insert_catalog_debug_data
        insert_catalog_debug_data(debug_data)
    elif module_name == 'customers':
        from storefront.debug.add_customers_debugging_data import insert_customers_debug_data
        insert_customers_debug_data(debug_data)
    elif module_name == 'ordering':
        from storefront.debug.add_ordering_debugging_data import insert_ordering_debug_data
        insert_ordering_debug_data(debug_data)
    else:
        raise ValueError(f"Unknown debug data module '{module_name}'")
