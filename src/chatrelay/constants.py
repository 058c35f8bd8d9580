"""Constants for the chatrelay application."""


class SocketEvents:
    """Socket.IO event names."""

    # client -> server
    GET_ROOMS = "getRooms"
    AUTHENTICATE_ADMIN = "authenticateAdmin"
    JOIN_ROOM = "joinRoom"
    CREATE_ROOM = "createRoom"
    EDIT_ROOM = "editRoom"
    DELETE_ROOM = "deleteRoom"
    CHAT_MESSAGE = "chatMessage"

    # both directions
    TYPING = "typing"
    STOP_TYPING = "stopTyping"

    # server -> client
    INIT = "init"
    MESSAGE = "message"
    ROOM_LIST = "roomList"
    ROOM_EDITED = "roomEdited"
    ROOM_DELETED = "roomDeleted"


# Upload constraints
ALLOWED_UPLOAD_MIME_PREFIX = "image/"
UPLOAD_URL_PREFIX = "/uploads"
