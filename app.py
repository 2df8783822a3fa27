# app.py
"""
Main application entry point.
This module creates the Flask application instance and handles application startup.
"""

import os

from trackas import create_app


def create_application():
    """
    Create and configure the Flask application.

    Returns:
        Flask: Configured application instance
    """
    config_name = os.environ.get('FLASK_ENV', 'development')
    return create_app(config_name)


# Create the application instance
app = create_application()


# Development server configuration
if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.logger.info(f"Starting development server on port {port}, debug={debug}")

    app.run(
        host='0.0.0.0',
        port=port,
        debug=debug,
        threaded=True
    )
