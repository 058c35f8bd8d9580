"""Pydantic models for the persisted snapshot."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ROOM = "Main"
DEFAULT_ROOMS = ("Main", "Tech", "Gaming")


class ChatMessage(BaseModel):
    """A stored chat message.

    Extra client-supplied fields (e.g. ``filePath`` of an uploaded image)
    are kept and broadcast unchanged.

    Attributes
    ----------
    username : str
        Display name of the author
    message : str
        Message text
    room : str
        Room name the message was addressed to. A soft reference: it is not
        rewritten when the room is renamed or deleted.
    timestamp : int | str
        Server-assigned milliseconds since epoch. Older snapshots may carry
        ISO 8601 strings.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    username: str
    message: str
    room: str
    timestamp: int | str


class Snapshot(BaseModel):
    """The unit written to and read from the data file."""

    users: list = Field(default_factory=list, description="Reserved, unused")
    messages: list[ChatMessage] = Field(default_factory=list)
    rooms: list[str] = Field(default_factory=lambda: list(DEFAULT_ROOMS))

    @classmethod
    def default(cls) -> "Snapshot":
        return cls()
