import functools
import logging
import typing as t

from flask import current_app, request

from chatrelay.analytics import connected_sessions
from chatrelay.constants import SocketEvents
from chatrelay.exceptions import InvalidPayload
from chatrelay.server import socketio
from chatrelay.services import Session
from chatrelay.socket_events import (
    AuthResult,
    ChatMessageSend,
    RoomEdit,
    TypingBroadcast,
    TypingSignal,
    parse,
    parse_password,
    parse_room_name,
)

from .chat_utils import create_message

log = logging.getLogger(__name__)


# --- Helper Functions ---
def get_session() -> Session | None:
    """Look up the Session for the sid of the current event."""
    return current_app.extensions["session_service"].get(request.sid)


def serialized(f):
    """Run the handler under the application dispatch lock.

    Handlers therefore never interleave: each one finishes its store
    mutation and its broadcasts before the next starts.
    """

    @functools.wraps(f)
    def decorated_function(*args, **kwargs):
        with current_app.extensions["dispatch_lock"]:
            return f(*args, **kwargs)

    return decorated_function


def require_admin(refusal: t.Any = False):
    """Refuse the event unless the calling session authenticated as admin.

    A refused event returns ``refusal`` as its ack and has no other effect.
    """

    def decorator(f):
        @functools.wraps(f)
        def decorated_function(*args, **kwargs):
            admin_service = current_app.extensions["admin_service"]
            if not admin_service.is_authorized(get_session()):
                log.info(f"Refused {f.__name__} from non-admin session {request.sid}")
                return refusal
            return f(*args, **kwargs)

        return decorated_function

    return decorator


# --- Connection lifecycle ---


@socketio.on("connect")
@serialized
def handle_connect(auth=None):
    """Open a session in the default room and send it the room history."""
    sid = request.sid
    current_app.extensions["session_service"].open(sid)
    connected_sessions.inc()
    log.info(f"Client connected: {sid}")


@socketio.on("disconnect")
@serialized
def handle_disconnect(*args, **kwargs):
    """Drop the session. Flask-SocketIO provides request.sid."""
    sid = request.sid
    if current_app.extensions["session_service"].close(sid) is not None:
        connected_sessions.dec()
    log.info(f"Client disconnected: {sid}")


# --- Rooms ---


@socketio.on(SocketEvents.GET_ROOMS)
@serialized
def handle_get_rooms(*args):
    rooms = current_app.extensions["room_service"].list_rooms()
    current_app.extensions["broadcast_service"].send_to_session(
        request.sid, SocketEvents.ROOM_LIST, rooms
    )


@socketio.on(SocketEvents.JOIN_ROOM)
@serialized
def handle_join_room(data=None):
    """Leave the current room, join ``data`` and receive its history."""
    try:
        room = parse_room_name(data)
    except InvalidPayload as e:
        log.debug(f"Dropping joinRoom from {request.sid}: {e}")
        return
    current_app.extensions["session_service"].switch_room(request.sid, room)


@socketio.on(SocketEvents.CREATE_ROOM)
@serialized
@require_admin(refusal=False)
def handle_create_room(data=None):
    try:
        room = parse_room_name(data)
    except InvalidPayload as e:
        log.debug(f"Dropping createRoom from {request.sid}: {e}")
        return False
    return current_app.extensions["room_service"].create_room(room)


@socketio.on(SocketEvents.EDIT_ROOM)
@serialized
@require_admin(refusal=False)
def handle_edit_room(data=None):
    try:
        edit = parse(RoomEdit, data)
    except InvalidPayload as e:
        log.debug(f"Refusing editRoom from {request.sid}: {e}")
        return False
    return current_app.extensions["room_service"].rename_room(
        edit.oldName, edit.newName
    )


@socketio.on(SocketEvents.DELETE_ROOM)
@serialized
@require_admin(refusal=False)
def handle_delete_room(data=None):
    try:
        room = parse_room_name(data)
    except InvalidPayload as e:
        log.debug(f"Refusing deleteRoom from {request.sid}: {e}")
        return False
    return current_app.extensions["room_service"].delete_room(room)


# --- Admin ---


@socketio.on(SocketEvents.AUTHENTICATE_ADMIN)
@serialized
def handle_authenticate_admin(data=None):
    """Ack ``{"success": bool}``; the reason for a failure is never disclosed."""
    session = get_session()
    try:
        password = parse_password(data)
    except InvalidPayload:
        return AuthResult(success=False).model_dump()
    if session is None:
        return AuthResult(success=False).model_dump()
    success = current_app.extensions["admin_service"].authenticate(session, password)
    return AuthResult(success=success).model_dump()


# --- Chat ---


@socketio.on(SocketEvents.CHAT_MESSAGE)
@serialized
def handle_chat_message(data=None):
    """Stamp, persist and broadcast a message to the room it names."""
    try:
        payload = parse(ChatMessageSend, data)
    except InvalidPayload as e:
        log.debug(f"Dropping chatMessage from {request.sid}: {e}")
        return
    create_message(
        current_app.extensions["store"],
        current_app.extensions["broadcast_service"],
        payload.model_dump(),
        source="socket",
    )


def _relay_typing(event: str, data: t.Any) -> None:
    try:
        signal = parse(TypingSignal, data)
    except InvalidPayload as e:
        log.debug(f"Dropping {event} from {request.sid}: {e}")
        return
    current_app.extensions["broadcast_service"].send_to_room(
        event,
        TypingBroadcast(username=signal.username).model_dump(),
        signal.room,
        skip_sid=request.sid,
    )


@socketio.on(SocketEvents.TYPING)
@serialized
def handle_typing(data=None):
    _relay_typing(SocketEvents.TYPING, data)


@socketio.on(SocketEvents.STOP_TYPING)
@serialized
def handle_stop_typing(data=None):
    _relay_typing(SocketEvents.STOP_TYPING, data)
