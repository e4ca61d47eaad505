from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from storefront.utils.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(test_config=None):
    """
    Build the Flask application.

    Configuration is read from the environment first, then overridden by
    ``test_config`` when given (used by the test suite).
    """
    from pathlib import Path

    app = Flask(__name__)

    logger = get_logger("storefront")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY in environment - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # Prefer an explicit DATABASE_URL env var; otherwise keep the SQLite
    # database inside the project's `instance/` directory.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        base_dir = Path(__file__).parent.parent
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'storefront.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Order and stock settings
    app.config['STOCK_LOCK_TIMEOUT_SECONDS'] = float(os.environ.get('STOCK_LOCK_TIMEOUT_SECONDS', '5'))
    app.config['ORDER_NUMBER_PREFIX'] = os.environ.get('ORDER_NUMBER_PREFIX', 'PED')

    # Rate limiting for the JSON API
    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')
    app.config['RATELIMIT_DEFAULT'] = os.environ.get('RATELIMIT_DEFAULT', '600 per minute')

    if test_config:
        app.config.update(test_config)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    # SQLite waits on a locked database for `timeout` seconds before raising
    # "database is locked", which the unit of work maps to ConflictError.
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
        engine_options = dict(app.config.get('SQLALCHEMY_ENGINE_OPTIONS', {}))
        connect_args = dict(engine_options.get('connect_args', {}))
        connect_args.setdefault('timeout', app.config['STOCK_LOCK_TIMEOUT_SECONDS'])
        engine_options['connect_args'] = connect_args
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options
        logger.debug("Database configured: SQLite")
    else:
        logger.debug("Database configured from DATABASE_URL")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from storefront.data.catalog.build import build_models as build_catalog_models
    from storefront.data.customers.build import build_models as build_customer_models
    from storefront.data.ordering.build import build_models as build_ordering_models
    from storefront.data.inventory.build import build_models as build_inventory_models
    build_catalog_models()
    build_customer_models()
    build_ordering_models()
    build_inventory_models()

    logger.debug("Models imported and registered")

    # Register blueprints
    from storefront.presentation.routes import init_app as init_routes
    init_routes(app)

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Cache-Control'] = 'no-store'
        return response

    logger.info("Flask application initialization complete")

    return app
