"""Room list and message posting routes.

HTTP counterparts of ``getRooms`` and ``chatMessage`` for clients without a
socket connection.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from chatrelay.exceptions import InvalidPayload
from chatrelay.socket_events import PostMessage, parse

from .chat_utils import create_message

log = logging.getLogger(__name__)

messages = Blueprint("messages", __name__)


@messages.route("/rooms", methods=["GET"])
def list_rooms():
    """Return the current room names as a JSON list."""
    return jsonify(current_app.extensions["room_service"].list_rooms())


@messages.route("/messages", methods=["POST"])
def post_message():
    """Append a message and broadcast it to its room.

    Request:
        {"username": str, "message": str, "room": str}

    Returns:
        {"success": true}, or 400 {"error": ...} if a field is missing.
    """
    data = request.get_json(silent=True)
    try:
        payload = parse(PostMessage, data)
    except InvalidPayload as e:
        log.debug(f"Rejecting POST /messages: {e}")
        return {"error": "Missing required fields"}, 400

    with current_app.extensions["dispatch_lock"]:
        create_message(
            current_app.extensions["store"],
            current_app.extensions["broadcast_service"],
            payload.model_dump(),
            source="http",
        )
    return {"success": True}, 200
