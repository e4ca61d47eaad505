"""
Ordering build module

Registers order header and order line models with SQLAlchemy.
"""

from storefront.utils.logger import get_logger

logger = get_logger("storefront.data.ordering.build")


def build_models():
    """
    Register ordering models with SQLAlchemy

    Returns:
        list: Registered model classes
    """
    from storefront.data.ordering.order import Order
    from storefront.data.ordering.order_line import OrderLine

    models = [Order, OrderLine]
    logger.debug(f"Ordering: registered {len(models)} models")
    return models
