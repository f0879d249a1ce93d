# app.py
"""
Flask Application Factory for the Contact Form Backend

This application factory wires together:
- Environment-based configuration (.env aware)
- Console and rotating file logging
- Durable SQLAlchemy storage with an in-memory fallback
- Best-effort email notifications
- JSON error envelopes for every failure path
"""

import os
import logging
import logging.handlers
import atexit
from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from api import contact_bp, health_bp, submissions_bp
from api.responses import GENERIC_ERROR
from config.settings import CONFIGS, environment_overrides
from core.database_models import db
from core.storage import database_connected, init_storage
from middleware.security import init_request_middleware
from services.notifications import init_notifier

ENDPOINTS = (
    ('POST', '/api/contact', 'Submit contact form'),
    ('GET', '/api/health', 'Health check'),
    ('GET', '/api/submissions', 'Get all submissions'),
    ('GET', '/api/submissions/:id', 'Get specific submission'),
    ('PATCH', '/api/submissions/:id', 'Update submission status'),
    ('DELETE', '/api/submissions/:id', 'Delete submission'),
)


def setup_logging(app: Flask) -> None:
    """
    Configure logging for the application and its modules

    Handlers go on the root logger so module loggers and app.logger share
    the same output.
    """
    formatter = logging.Formatter(
        fmt='%(asctime)s %(name)-24s %(levelname)-8s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, '_contact_handler', False):
            root.removeHandler(handler)
    root.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler._contact_handler = True
    root.addHandler(console_handler)

    log_file = app.config.get('LOG_FILE')
    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        file_handler._contact_handler = True
        root.addHandler(file_handler)

    app.logger.setLevel(log_level)

    if not app.debug:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)


def configure_database(app: Flask) -> bool:
    """
    Bind SQLAlchemy when DATABASE_URL is set and create the submissions table

    Returns True when the database answered at startup. An unreachable
    database is not fatal: requests fall back to in-memory storage.
    """
    database_url = app.config.get('DATABASE_URL')
    if not database_url:
        app.logger.warning("DATABASE_URL not configured. Using in-memory storage.")
        return False

    engine_options = {
        'pool_pre_ping': True,  # Verify connections before use
        'pool_recycle': 3600,
    }
    if not database_url.startswith('sqlite'):
        engine_options.update({
            'pool_size': app.config.get('DB_POOL_SIZE', 5),
            'max_overflow': app.config.get('DB_MAX_OVERFLOW', 10),
        })

    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    db.init_app(app)

    display_url = database_url.split('@')[-1] if '@' in database_url else database_url
    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError as e:
            app.logger.error(f"Database connection error: {e}")
            app.logger.warning("Using in-memory storage for submissions")
            return False
        connected = database_connected(app)

    if connected:
        app.logger.info(f"Connected to database: {display_url}")
    return connected


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(health_bp, url_prefix='/api')
    app.register_blueprint(contact_bp, url_prefix='/api/contact')
    app.register_blueprint(submissions_bp, url_prefix='/api/submissions')


def configure_error_handlers(app: Flask) -> None:
    """
    Map every failure to the {'success': False, 'error': ...} envelope
    """
    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(error):
        # Unsupported methods on known paths count as unmatched routes
        return jsonify({'success': False, 'error': 'Endpoint not found'}), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'success': False, 'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle unexpected exceptions"""
        app.logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({'success': False, 'error': GENERIC_ERROR}), 500


def create_app(config_name: Optional[str] = None,
               overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Flask application factory

    Args:
        config_name: Configuration environment ('development', 'testing', 'production')
        overrides: Extra config values applied last

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    config_name = config_name or os.environ.get('FLASK_ENV', 'production')
    app.config.from_object(CONFIGS.get(config_name, CONFIGS['production']))

    # Tests are isolated from the caller's environment
    if config_name != 'testing':
        app.config.update(environment_overrides())
    if overrides:
        app.config.update(overrides)

    setup_logging(app)
    app.logger.info(f"Starting contact form backend in {config_name} mode")

    origins = app.config.get('CORS_ORIGINS', '*')
    if isinstance(origins, str) and ',' in origins:
        origins = [origin.strip() for origin in origins.split(',')]
    CORS(app, resources={r'/api/*': {'origins': origins}})

    init_storage(app)
    app.config['DATABASE_CONNECTED_AT_STARTUP'] = configure_database(app)

    notifier = init_notifier(app)
    atexit.register(notifier.shutdown)

    register_blueprints(app)
    configure_error_handlers(app)
    init_request_middleware(app)

    return app


def log_startup_banner(app: Flask) -> None:
    site_name = app.config.get('SITE_NAME')
    port = app.config.get('PORT', 3000)
    database = app.config.get('DATABASE_CONNECTED_AT_STARTUP')
    email = app.config.get('SEND_EMAIL_NOTIFICATIONS')

    lines = [
        '=' * 60,
        f"{site_name} Server Started",
        '=' * 60,
        f"Server running on http://localhost:{port}",
        'Features:',
        '  [x] Flask API Server',
        f"  [{'x' if database else ' '}] Database storage",
        f"  [{'x' if email else ' '}] Email Notifications",
        'API Endpoints:',
    ]
    lines.extend(f"  {method:<6} {path} - {description}" for method, path, description in ENDPOINTS)
    lines.append('=' * 60)

    for line in lines:
        app.logger.info(line)


if __name__ == '__main__':
    # Development server
    app = create_app(os.environ.get('FLASK_ENV', 'development'))
    log_startup_banner(app)
    app.run(host='0.0.0.0', port=app.config.get('PORT', 3000), debug=app.debug)
