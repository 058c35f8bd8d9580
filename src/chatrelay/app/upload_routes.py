"""Image upload route.

Files are written to ``ChatRelayConfig.upload_dir`` under a random name and
served back as static files below /uploads.
"""

import logging
import uuid
from pathlib import Path

from flask import Blueprint, current_app, request, send_from_directory
from werkzeug.utils import secure_filename

from chatrelay.constants import ALLOWED_UPLOAD_MIME_PREFIX, UPLOAD_URL_PREFIX

log = logging.getLogger(__name__)

uploads = Blueprint("uploads", __name__)


@uploads.route("/upload", methods=["POST"])
def upload_file():
    """Store an uploaded image.

    Request:
        multipart/form-data with:
        - file: image file

    Returns:
        {"filePath": "/uploads/<name>"}
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        return {"error": "No file uploaded"}, 400

    if not (file.mimetype or "").startswith(ALLOWED_UPLOAD_MIME_PREFIX):
        log.info(f"Rejected upload '{file.filename}' with type {file.mimetype}")
        return {"error": "Only images allowed"}, 400

    config = current_app.extensions["config"]
    suffix = Path(secure_filename(file.filename)).suffix.lower()
    name = f"{uuid.uuid4().hex}{suffix}"
    upload_dir = Path(config.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    try:
        file.save(upload_dir / name)
    except OSError as e:
        log.error(f"Failed to store upload '{file.filename}': {e}")
        return {"error": "Failed to store upload"}, 500

    log.info(f"Stored upload '{file.filename}' as {name}")
    return {"filePath": f"{UPLOAD_URL_PREFIX}/{name}"}, 200


@uploads.route(f"{UPLOAD_URL_PREFIX}/<path:filename>", methods=["GET"])
def serve_upload(filename: str):
    config = current_app.extensions["config"]
    return send_from_directory(Path(config.upload_dir).resolve(), filename)


@uploads.errorhandler(413)
def upload_too_large(_error):
    config = current_app.extensions["config"]
    return {"error": f"File exceeds {config.max_upload_mb}MB limit"}, 413
