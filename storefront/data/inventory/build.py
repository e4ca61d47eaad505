"""
Inventory build module

Registers the stock movement audit model with SQLAlchemy.
"""

from storefront.utils.logger import get_logger

logger = get_logger("storefront.data.inventory.build")


def build_models():
    """
    Register inventory models with SQLAlchemy

    Returns:
        list: Registered model classes
    """
    from storefront.data.inventory.stock_movement import StockMovement

    models = [StockMovement]
    logger.debug(f"Inventory: registered {len(models)} models")
    return models
