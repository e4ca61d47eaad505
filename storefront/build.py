#!/usr/bin/env python3
"""
Main build orchestrator for the storefront
Handles phased building of models and debug data insertion
"""

from storefront import db
from storefront.utils.logger import get_logger

logger = get_logger("storefront.build")

BUILD_PHASES = ('catalog', 'customers', 'ordering', 'inventory')


def build_models(phase='all'):
    """
    Register models for the requested phase and create their tables

    Phases follow foreign key order: catalog → customers → ordering → inventory.
    Each phase includes the ones before it.

    Args:
        phase (str): One of BUILD_PHASES, 'all' or 'none'
    """
    if phase == 'none':
        logger.info("Model build skipped")
        return

    if phase != 'all' and phase not in BUILD_PHASES:
        raise ValueError(f"Unknown build phase '{phase}'")

    phases = BUILD_PHASES if phase == 'all' else BUILD_PHASES[:BUILD_PHASES.index(phase) + 1]

    if 'catalog' in phases:
        logger.info("Building catalog models")
        from storefront.data.catalog.build import build_models as build_catalog_models
        build_catalog_models()

    if 'customers' in phases:
        logger.info("Building customer models")
        from storefront.data.customers.build import build_models as build_customer_models
        build_customer_models()

    if 'ordering' in phases:
        logger.info("Building ordering models")
        from storefront.data.ordering.build import build_models as build_ordering_models
        build_ordering_models()

    if 'inventory' in phases:
        logger.info("Building inventory models")
        from storefront.data.inventory.build import build_models as build_inventory_models
        build_inventory_models()

    db.create_all()
    logger.info("All database tables created")


def build_database(build_phase='all', data_phase='all', enable_debug_data=True):
    """
    Build tables and optionally insert debug data

    Must run inside an application context.

    Args:
        build_phase (str): Phase passed to build_models()
        data_phase (str): Phase passed to the debug data manager, or 'none'
        enable_debug_data (bool): Whether to insert debug data at all

    Returns:
        dict: Debug data insertion summary
    """
    logger.info(f"Building database (models: {build_phase}, data: {data_phase})")
    build_models(build_phase)

    if data_phase == 'none':
        return {}

    from storefront.debug.debug_data_manager import insert_debug_data
    return insert_debug_data(enabled=enable_debug_data, phase=data_phase)
