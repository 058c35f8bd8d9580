"""Per-connection session state and room switching."""

import dataclasses
import logging

from chatrelay.constants import SocketEvents
from chatrelay.models import DEFAULT_ROOM, ChatMessage
from chatrelay.storage import DurableStore

from .broadcast_service import BroadcastService

log = logging.getLogger(__name__)


@dataclasses.dataclass
class Session:
    """One live connection.

    ``is_admin`` only ever goes from False to True.
    """

    sid: str
    current_room: str = DEFAULT_ROOM
    is_admin: bool = dataclasses.field(default=False, init=False)

    def grant_admin(self) -> None:
        self.is_admin = True


class SessionService:
    """Tracks live sessions by Socket.IO sid.

    Parameters
    ----------
    store : DurableStore
        Source of room histories
    broadcast : BroadcastService
        Used for room subscription and the ``init`` history unicast
    """

    def __init__(self, store: DurableStore, broadcast: BroadcastService):
        self.store = store
        self.broadcast = broadcast
        self._sessions: dict[str, Session] = {}

    def open(self, sid: str) -> Session:
        """Create a session in the default room and send it that room's history."""
        session = Session(sid=sid)
        self._sessions[sid] = session
        self.broadcast.subscribe(sid, session.current_room)
        self._send_history(session)
        return session

    def get(self, sid: str) -> Session | None:
        return self._sessions.get(sid)

    def close(self, sid: str) -> Session | None:
        """Forget the session. Socket.IO drops its room membership itself."""
        return self._sessions.pop(sid, None)

    def count(self) -> int:
        return len(self._sessions)

    def switch_room(self, sid: str, room: str) -> list[ChatMessage]:
        """Move the session to ``room`` and unicast its history.

        ``room`` is not checked against the registry; an unknown room simply
        has an empty history.

        Returns
        -------
        list[ChatMessage]
            The history sent to the session. Empty if the sid is unknown.
        """
        session = self._sessions.get(sid)
        if session is None:
            log.warning(f"Room switch for unknown session {sid}")
            return []
        self.broadcast.unsubscribe(sid, session.current_room)
        session.current_room = room
        self.broadcast.subscribe(sid, room)
        history = self._send_history(session)
        log.info(f"{sid} joined room: {room}")
        return history

    def _send_history(self, session: Session) -> list[ChatMessage]:
        history = self.store.load_history(session.current_room)
        self.broadcast.send_to_session(
            session.sid, SocketEvents.INIT, [m.model_dump() for m in history]
        )
        return history
