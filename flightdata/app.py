"""
FlightData Flask Application.

Main entry point for the web application. Initializes:
- Telemetry store (engine, schema, indexes)
- Ingestion and query services, sharing the one store
- API routes
- Error handlers

Usage:
    python -m flightdata.app

Or with gunicorn:
    gunicorn 'flightdata.app:create_app()'
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from flightdata.api import create_flightdata_blueprint, create_status_blueprint
from flightdata.config import AppConfig, load_config
from flightdata.errors import FlightDataError
from flightdata.ingestion import IngestionService
from flightdata.query import QueryService
from flightdata.storage import TelemetryStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    app_config: Optional[AppConfig] = None,
    store: Optional[TelemetryStore] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        app_config: Configuration (loaded from the environment if None)
        store: Telemetry store (built from app_config.database if None).
               Tests pass a store bound to a temporary database.

    Returns:
        Configured Flask application instance.
    """
    app_config = app_config or load_config()

    if app_config.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = app_config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': list(app_config.cors_origins)}})

    # Initialize store
    if store is None:
        logger.info('Initializing database...')
        store = TelemetryStore.from_config(app_config.database)

    # One store, injected into both services
    ingestion = IngestionService(store, batch_max_size=app_config.ingest.batch_max_size)
    queries = QueryService(
        store,
        default_limit=app_config.query.default_limit,
        max_limit=app_config.query.max_limit,
    )

    # Register API blueprints
    app.register_blueprint(create_flightdata_blueprint(ingestion, queries, app_config.query))
    app.register_blueprint(create_status_blueprint(store, app_config))

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(FlightDataError)
    def flightdata_error(e: FlightDataError):
        return e.to_dict(), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'not_found', 'message': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {'error': 'method_not_allowed', 'message': str(e)}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {getattr(e, "original_exception", e)}')
        return {'error': 'internal_error', 'message': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app_config = load_config()
    app = create_app(app_config)

    logger.info(f'Starting FlightData on http://localhost:{app_config.port}')
    logger.info(f'Write/read endpoint: http://localhost:{app_config.port}/api/flightdata')

    app.run(
        host='0.0.0.0',
        port=app_config.port,
        debug=app_config.debug,
    )


if __name__ == '__main__':
    run_development_server()
