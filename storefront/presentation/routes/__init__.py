"""
Routes package for the storefront JSON API
Organized in a tiered structure mirroring the business layer
"""

from storefront.utils.logger import get_logger

logger = get_logger("storefront.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .ordering import ordering_bp
    from .inventory import inventory_bp
    from .responses import register_error_handlers

    app.register_blueprint(ordering_bp, url_prefix='/api')
    app.register_blueprint(inventory_bp, url_prefix='/api')
    register_error_handlers(app)

    logger.info("Registered ordering and inventory API blueprints")
