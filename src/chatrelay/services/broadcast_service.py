"""Fan-out of events to Socket.IO rooms, sessions, and all connections."""

import logging
import typing as t

from flask_socketio import SocketIO

log = logging.getLogger(__name__)

NAMESPACE = "/"


class BroadcastService:
    """Routes outbound events to the right set of sessions.

    Each chat room maps one-to-one onto a Socket.IO room of the same name.
    Callers are serialized by the dispatch lock, so the order of calls for
    a room is the order its subscribers observe.

    Parameters
    ----------
    socketio : SocketIO
        Flask-SocketIO instance used for emitting and room membership
    """

    def __init__(self, socketio: SocketIO):
        self.socketio = socketio

    def subscribe(self, sid: str, room: str) -> None:
        self.socketio.server.enter_room(sid, room, namespace=NAMESPACE)

    def unsubscribe(self, sid: str, room: str) -> None:
        self.socketio.server.leave_room(sid, room, namespace=NAMESPACE)

    def send_to_room(
        self,
        event: str,
        payload: t.Any,
        room: str,
        skip_sid: str | None = None,
    ) -> None:
        """Deliver ``payload`` to every session subscribed to ``room``.

        Parameters
        ----------
        skip_sid : str | None
            Sender to exclude, used for typing signals.
        """
        self.socketio.emit(
            event, payload, to=room, skip_sid=skip_sid, namespace=NAMESPACE
        )

    def send_to_all(self, event: str, payload: t.Any) -> None:
        """Deliver ``payload`` to every connected session regardless of room."""
        self.socketio.emit(event, payload, namespace=NAMESPACE)

    def send_to_session(self, sid: str, event: str, payload: t.Any) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=NAMESPACE)
