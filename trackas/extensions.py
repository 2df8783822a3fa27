# extensions.py
"""
Flask extensions initialization.
This file initializes all Flask extensions to avoid circular imports.
Extensions are initialized here and then bound to the app in the application factory.
The attendance store and geocoding service are built once per application here
and handed to services explicitly.
"""

import logging

from flask import current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect
from flask_login import LoginManager
from sqlalchemy import text

# Initialize extensions without app binding
db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()
login_manager = LoginManager()

logger = logging.getLogger(__name__)

STORE_KEY = 'attendance_store'
GEOCODER_KEY = 'geocoding_service'


def check_database_health():
    """
    Check if the database connection is healthy.
    This function requires an active Flask application context.

    Returns:
        tuple: (bool, str) indicating health status and message
    """
    try:
        connection = db.engine.connect()
        try:
            with connection.begin():
                connection.execute(text("SELECT 1")).fetchone()
            return True, "Database connection is healthy"
        finally:
            connection.close()

    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False, f"Database connection failed: {str(e)}"


def get_attendance_store():
    """Return the data-store handle bound to the current application."""
    return current_app.extensions[STORE_KEY]


def get_geocoding_service():
    """Return the geocoding service bound to the current application."""
    return current_app.extensions[GEOCODER_KEY]


def init_extensions(app):
    """
    Initialize all extensions with proper order and configuration.

    Args:
        app: Flask application instance
    """
    from trackas.services.attendance_store import AttendanceStore
    from trackas.services.geocoding_service import GeocodingService

    # Step 1: Initialize database first (required by other extensions)
    db.init_app(app)
    migrate.init_app(app, db)

    # Step 2: Initialize Flask-Login
    login_manager.init_app(app)
    login_manager.session_protection = 'basic'

    # Step 3: Initialize CSRF protection (after login manager)
    csrf.init_app(app)

    # Step 4: Collaborators handed to services by the controllers
    app.extensions[STORE_KEY] = AttendanceStore(db.session)
    app.extensions[GEOCODER_KEY] = GeocodingService(
        base_url=app.config['GEOCODER_URL'],
        timeout=app.config['GEOCODER_TIMEOUT'],
        user_agent=app.config['GEOCODER_USER_AGENT']
    )

    @login_manager.user_loader
    def load_user(user_id):
        # Import here to avoid circular imports
        from trackas.models import Lecturer

        return db.session.get(Lecturer, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({
            'success': False,
            'message': 'Authentication required',
            'error_code': 'authentication_required'
        }), 401

    app.logger.info("Extensions initialized successfully in correct order")
