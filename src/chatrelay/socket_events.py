"""Pydantic models for Socket.IO and HTTP payloads.

Every inbound payload is validated once, at the boundary, into one of the
request models below. Handlers only ever see validated objects.
"""

import typing as t

from pydantic import BaseModel, ConfigDict, StringConstraints, TypeAdapter, ValidationError

from chatrelay.exceptions import InvalidPayload

NonEmptyStr = t.Annotated[str, StringConstraints(min_length=1)]

ModelT = t.TypeVar("ModelT", bound=BaseModel)

# =============================================================================
# Request Models (client -> server)
# =============================================================================


class ChatMessageSend(BaseModel):
    """Send a chat message to a room.

    Additional fields are passed through to the stored message.
    """

    model_config = ConfigDict(extra="allow")

    username: NonEmptyStr
    message: NonEmptyStr
    room: NonEmptyStr


class PostMessage(BaseModel):
    """Body of ``POST /messages``."""

    username: NonEmptyStr
    message: NonEmptyStr
    room: NonEmptyStr


class TypingSignal(BaseModel):
    """A ``typing`` or ``stopTyping`` notification."""

    username: str
    room: NonEmptyStr


class RoomEdit(BaseModel):
    """Rename a room."""

    oldName: NonEmptyStr
    newName: NonEmptyStr


room_name_adapter = TypeAdapter(NonEmptyStr)
password_adapter = TypeAdapter(str)

# =============================================================================
# Broadcast / Response Models (server -> clients)
# =============================================================================


class AuthResult(BaseModel):
    """Ack for ``authenticateAdmin``."""

    success: bool


class TypingBroadcast(BaseModel):
    """Relayed typing notification, without the room."""

    username: str


class RoomEdited(BaseModel):
    """Broadcast when a room is renamed."""

    oldName: str
    newName: str


def parse(model: type[ModelT], data: t.Any) -> ModelT:
    """Validate ``data`` into ``model``.

    Raises
    ------
    InvalidPayload
        If validation fails.
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidPayload(f"Invalid {model.__name__} payload: {e}") from e


def parse_room_name(data: t.Any) -> str:
    """Validate a bare room-name payload.

    Raises
    ------
    InvalidPayload
        If the payload is not a non-empty string.
    """
    try:
        return room_name_adapter.validate_python(data, strict=True)
    except ValidationError as e:
        raise InvalidPayload(f"Invalid room name: {data!r}") from e


def parse_password(data: t.Any) -> str:
    """Validate a bare password payload.

    Raises
    ------
    InvalidPayload
        If the payload is not a string.
    """
    try:
        return password_adapter.validate_python(data, strict=True)
    except ValidationError as e:
        raise InvalidPayload("Invalid password payload") from e
