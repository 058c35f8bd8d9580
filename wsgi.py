"""WSGI entry point for production deployment with Gunicorn.

This module creates the Flask application instance for Gunicorn.
Configuration is read from environment variables:
- PORT: Port the CLI binds to (gunicorn uses gunicorn_config.bind)
- ADMIN_PASSWORD: Shared admin secret
- CHATRELAY_DATA_FILE: JSON snapshot path (default: data.json)
"""

import atexit

from chatrelay.server import create_app, socketio

app = create_app()

# Flush pending snapshot writes when the worker exits
atexit.register(app.extensions["store"].close)

# Export both app and socketio for Gunicorn
# Gunicorn will use the 'app' object
__all__ = ["app", "socketio"]
