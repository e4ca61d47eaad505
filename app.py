#!/usr/bin/env python3
"""
Run script for the storefront order service
"""

from storefront import create_app
from storefront.build import build_database, BUILD_PHASES
from storefront.utils.logger import get_logger
import argparse
import sys
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Run 'python generate_env.py' to create a .env file with a secure SECRET_KEY.

app = create_app()
logger = get_logger("storefront.run")


def parse_arguments():
    """Parse command line arguments for build phases"""
    parser = argparse.ArgumentParser(description='Storefront order service')
    parser.add_argument('--phase', choices=BUILD_PHASES + ('all',), default='all',
                        help='Build models (and debug data) up to this phase: catalog → customers → ordering → inventory')
    parser.add_argument('--build-only', action='store_true',
                        help='Build database tables only, without debug data, and exit')
    parser.add_argument('--enable-debug-data', action='store_true', default=True,
                        help='Enable debug data insertion (default: enabled if flag not present)')
    parser.add_argument('--no-debug-data', action='store_false', dest='enable_debug_data',
                        help='Disable debug data insertion')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting storefront order service...")

    build_phase = args.phase
    # Debug data phases stop at ordering; inventory has no seed of its own
    data_phase = 'all' if build_phase in ('all', 'inventory') else build_phase
    if args.build_only:
        data_phase = 'none'
        logger.debug("--build-only mode: creating tables only")

    with app.app_context():
        build_database(
            build_phase=build_phase,
            data_phase=data_phase,
            enable_debug_data=args.enable_debug_data
        )

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader, threaded=True)
