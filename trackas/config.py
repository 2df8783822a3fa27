import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration class with all settings as static attributes."""

    # Core configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-here'
    DEBUG = _env_bool('FLASK_DEBUG', 'false')
    VERSION = '1.0.0'

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(hours=2)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    REMEMBER_COOKIE_DURATION = timedelta(days=7)
    REMEMBER_COOKIE_HTTPONLY = True

    # Database configuration, SQLite fallback when DATABASE_URL is not set
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///trackas.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "pool_pre_ping": True,
    }

    # Public URL the registration links (and their QR codes) point at
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', 'http://localhost:5000').rstrip('/')

    # Geofence policy. 30 km is a "same city" bound, not a tight geofence.
    ATTENDANCE_RADIUS_METERS = float(os.environ.get('ATTENDANCE_RADIUS_METERS', '30000'))

    # Address lookup used when a venue has no usable coordinate
    GEOCODER_URL = os.environ.get('GEOCODER_URL', 'https://nominatim.openstreetmap.org/search')
    GEOCODER_TIMEOUT = float(os.environ.get('GEOCODER_TIMEOUT', '5'))
    GEOCODER_USER_AGENT = os.environ.get('GEOCODER_USER_AGENT', 'trackas-attendance/1.0')

    # Options handed to the browser geolocation API
    POSITION_HIGH_ACCURACY = _env_bool('POSITION_HIGH_ACCURACY', 'true')
    POSITION_TIMEOUT_MS = int(os.environ.get('POSITION_TIMEOUT_MS', '15000'))
    POSITION_MAXIMUM_AGE_MS = 0

    # Attendance list refresh interval for lecturer views (seconds)
    ATTENDANCE_POLL_INTERVAL = int(os.environ.get('ATTENDANCE_POLL_INTERVAL', '5'))

    # Logging
    LOG_TO_FILE = _env_bool('LOG_TO_FILE', 'true')
    LOG_DIR = os.environ.get('LOG_DIR')

    @staticmethod
    def init_app(app):
        pass


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = _env_bool('SQL_DEBUG', 'false')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False

    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True

    @staticmethod
    def init_app(app):
        # Ensure secret key and database are set in production
        if not os.environ.get('SECRET_KEY'):
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if not os.environ.get('DATABASE_URL'):
            raise ValueError("DATABASE_URL environment variable must be set in production")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    LOG_TO_FILE = False

    PUBLIC_BASE_URL = 'https://trackas.test'
    ATTENDANCE_POLL_INTERVAL = 1


# Configuration dictionary
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}
