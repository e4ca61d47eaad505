"""
Catalog build module

Registers category and product models with SQLAlchemy.
"""

from storefront.utils.logger import get_logger

logger = get_logger("storefront.data.catalog.build")


def build_models():
    """
    Register catalog models with SQLAlchemy

    Returns:
        list: Registered model classes
    """
    # Models are registered on import
    from storefront.data.catalog.category import Category
    from storefront.data.catalog.product import Product

    models = [Category, Product]
    logger.debug(f"Catalog: registered {len(models)} models")
    return models
