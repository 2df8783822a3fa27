# __init__.py
"""
Application factory for the TrackAS attendance system.
This module creates and configures the Flask application using the application factory pattern.
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from trackas.config import config_by_name
from trackas.extensions import init_extensions, db


def setup_logging(app):
    """
    Configure structured logging for the application.

    Args:
        app: Flask application instance
    """
    log_format = logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s'
    )
    level = logging.DEBUG if app.debug else logging.INFO

    handlers = []

    if app.config.get('LOG_TO_FILE'):
        log_dir = app.config.get('LOG_DIR') or os.path.join(app.root_path, 'logs')
        os.makedirs(log_dir, exist_ok=True)

        # File handler with rotation
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=1024 * 1024 * 10,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(logging.INFO)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_format)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    app.logger.setLevel(level)
    for handler in handlers:
        app.logger.addHandler(handler)

    # Service loggers share the application handlers
    for name in ('attendance', 'attendance_store', 'geocoding_service', 'registration_service',
                 'class_schedule_service', 'qr_code_service', 'export_service', 'auth_service',
                 'attendance_poller'):
        service_logger = logging.getLogger(name)
        service_logger.setLevel(level)
        if not service_logger.handlers:
            for handler in handlers:
                service_logger.addHandler(handler)

    # Suppress excessive SQLAlchemy logging
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def register_blueprints(app):
    """
    Register all application blueprints.

    Args:
        app: Flask application instance
    """
    # Import blueprints here to avoid circular imports
    from .controllers.auth import auth_bp
    from .controllers.lecturer import lecturer_bp
    from .controllers.attendance import attendance_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(lecturer_bp, url_prefix='/lecturer')
    app.register_blueprint(attendance_bp, url_prefix='/attendance')

    app.logger.info("All blueprints registered successfully")


def register_error_handlers(app):
    """
    Register global error handlers.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({
            'success': False,
            'error': e.name,
            'message': e.description
        }), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        app.logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred',
            'message': str(e) if app.debug else 'Internal server error'
        }), 500


def register_shell_context(app):
    """
    Register shell context for flask shell command.

    Args:
        app: Flask application instance
    """

    @app.shell_context_processor
    def make_shell_context():
        from trackas.models import Lecturer, ClassSession, Attendance
        return {
            'db': db,
            'Lecturer': Lecturer,
            'ClassSession': ClassSession,
            'Attendance': Attendance
        }


def register_health_checks(app):
    """
    Register health check endpoints.

    Args:
        app: Flask application instance
    """

    @app.route('/health')
    def health_check():
        """Basic health check endpoint."""
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now().isoformat(),
            'version': app.config.get('VERSION', '1.0.0')
        })

    @app.route('/health/database')
    def database_health_check():
        """Database health check endpoint."""
        from trackas.extensions import check_database_health

        healthy, message = check_database_health()

        return jsonify({
            'status': 'healthy' if healthy else 'unhealthy',
            'message': message,
            'timestamp': datetime.now().isoformat()
        }), 200 if healthy else 503


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name (str): Configuration name ('development', 'production', 'testing')

    Returns:
        Flask: Configured Flask application instance
    """
    # Load environment variables
    load_dotenv()

    app = Flask(__name__)

    # Load configuration
    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    config_class = config_by_name[config_name]
    app.config.from_object(config_class)
    config_class.init_app(app)

    setup_logging(app)
    app.logger.info(f"Starting application with config: {config_name}")

    init_extensions(app)

    # Register components
    register_blueprints(app)
    register_error_handlers(app)
    register_shell_context(app)
    register_health_checks(app)

    # Register CLI commands
    from .cli import register_cli_commands
    register_cli_commands(app)

    app.logger.info("Application factory completed successfully")

    return app
