"""
ClubBoard Flask Application.

Main entry point for the web application. Initializes:
- Flight cache (with an eager first refresh in the background)
- API routes
- Error handlers

Usage:
    python -m clubboard.app

Or with gunicorn:
    gunicorn 'clubboard.app:create_app()'
"""

import logging
import threading
from typing import Optional

from flask import Flask
from flask_cors import CORS

from clubboard.api import data_bp, metrics_bp
from clubboard.cache import FlightCache
from clubboard.config import config

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def start_initial_refresh(cache: FlightCache) -> threading.Thread:
    """Fill the cache in a background thread so the first request is fast."""
    thread = threading.Thread(
        target=cache.get_fresh,
        name='initial-refresh',
        daemon=True,
    )
    thread.start()
    logger.info('Initial cache refresh started')
    return thread


def create_app(
    cache: Optional[FlightCache] = None,
    start_refresh: bool = True,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        cache: Flight cache to serve from (the module singleton if None)
        start_refresh: Whether to fill the cache right away.
                       Set to False for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    if cache is None:
        from clubboard.cache import flight_cache
        cache = flight_cache
    app.config['FLIGHT_CACHE'] = cache

    # Register API blueprints
    app.register_blueprint(data_bp)
    app.register_blueprint(metrics_bp)

    if start_refresh:
        start_initial_refresh(cache)

    logger.info(
        f'Serving club {config.weglide.club_id} / airport {config.weglide.airport_id}'
    )

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    logger.info(f'Starting ClubBoard on http://localhost:{config.port}')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second initial refresh
    )


if __name__ == '__main__':
    run_development_server()
