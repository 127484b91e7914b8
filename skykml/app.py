"""
SkyKML Flask Application.

Main entry point for the web application. Initializes:
- Configuration (environment / .env)
- One feed pipeline per provider
- API routes

Usage:
    python -m skykml.app

Or with gunicorn:
    gunicorn 'skykml.app:create_app()'
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from skykml.api import feeds_bp
from skykml.config import AppConfig, load_config
from skykml.pipeline import build_pipelines

logger = logging.getLogger(__name__)


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def create_app(config: Optional[AppConfig] = None, pipelines: Optional[dict] = None) -> Flask:
    """
    Application factory for Flask.

    Args:
        config: Application configuration (loaded from the environment if None)
        pipelines: Feed name -> FeedPipeline mapping (built from config if None).
                   Tests pass pipelines with fake fetchers.

    Returns:
        Configured Flask application instance.
    """
    config = config or load_config()
    configure_logging(config)

    app = Flask(__name__)
    app.config['SKYKML'] = config

    # Globe viewers running in the browser fetch the documents cross-origin
    CORS(app, resources={r'/.*\.km[lz]': {'origins': '*'}})

    if pipelines is None:
        pipelines = build_pipelines(config)
    app.config['FEED_PIPELINES'] = pipelines
    logger.info(f'Feeds enabled: {", ".join(sorted(pipelines)) or "none"}')

    app.register_blueprint(feeds_bp)

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

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
    config = load_config()
    app = create_app(config)

    base = f'http://localhost:{config.port}'
    logger.info(f'Starting SkyKML on {base}')
    logger.info(f'FlightRadar24 feed: {base}/flightradar.kml')
    logger.info(f'OpenSky feed: {base}/opensky.kml')

    app.run(
        host=config.host,
        port=config.port,
        debug=config.debug,
        use_reloader=False,
    )


if __name__ == '__main__':
    run_development_server()
