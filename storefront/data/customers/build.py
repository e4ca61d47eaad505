"""
Customers build module
"""

from storefront.utils.logger import get_logger

logger = get_logger("storefront.data.customers.build")


def build_models():
    """
    Register customer models with SQLAlchemy

    Returns:
        list: Registered model classes
    """
    from storefront.data.customers.customer import Customer

    models = [Customer]
    logger.debug(f"Customers: registered {len(models)} models")
    return models
