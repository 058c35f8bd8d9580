"""Utility and system routes.

Handles health checks, versioning and the static index page.
"""

import logging
from pathlib import Path

from flask import Blueprint, current_app, send_from_directory

log = logging.getLogger(__name__)

utility = Blueprint("utility", __name__)


@utility.route("/health")
def health_check():
    """Health check endpoint for server status verification."""
    return {"status": "ok"}, 200


@utility.route("/api/version")
def get_version():
    """Get the chatrelay server version."""
    import chatrelay

    return {"version": chatrelay.__version__}, 200


@utility.route("/")
def index():
    """Serve index.html from the public directory."""
    config = current_app.extensions["config"]
    public_dir = Path(config.public_dir).resolve()
    if not (public_dir / "index.html").is_file():
        return {"error": "No frontend installed"}, 404
    return send_from_directory(public_dir, "index.html")
