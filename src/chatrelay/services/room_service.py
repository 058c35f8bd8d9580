"""Room registry: listing and admin-only structural changes.

Callers must have passed the admin gate before calling ``create_room``,
``rename_room`` or ``delete_room``. Stored messages are never touched: they
keep the room name they were sent to.
"""

import logging

from chatrelay.analytics import room_mutations_total
from chatrelay.constants import SocketEvents
from chatrelay.models import DEFAULT_ROOM
from chatrelay.socket_events import RoomEdited
from chatrelay.storage import DurableStore

from .broadcast_service import BroadcastService

log = logging.getLogger(__name__)


class RoomService:
    """Maintains the ordered set of room names.

    Parameters
    ----------
    store : DurableStore
        Owner of the room list
    broadcast : BroadcastService
        Used to notify every connection about topology changes
    """

    def __init__(self, store: DurableStore, broadcast: BroadcastService):
        self.store = store
        self.broadcast = broadcast

    def list_rooms(self) -> list[str]:
        return self.store.list_rooms()

    def create_room(self, name: str) -> bool:
        """Append ``name`` if it is non-empty and not taken.

        Broadcasts the full ``roomList`` to all connections on success.
        """

        def _create(rooms: list[str]) -> tuple[bool, bool]:
            if not name or name in rooms:
                return False, False
            rooms.append(name)
            return True, True

        if not self.store.mutate_rooms(_create):
            return False
        room_mutations_total.labels(action="create").inc()
        log.info(f"Room created: {name}")
        self.broadcast.send_to_all(SocketEvents.ROOM_LIST, self.list_rooms())
        return True

    def rename_room(self, old_name: str, new_name: str) -> bool:
        """Rename ``old_name`` in place, keeping its position in the list."""

        def _rename(rooms: list[str]) -> tuple[bool, bool]:
            if not new_name or old_name not in rooms or new_name in rooms:
                return False, False
            rooms[rooms.index(old_name)] = new_name
            return True, True

        if not self.store.mutate_rooms(_rename):
            return False
        room_mutations_total.labels(action="rename").inc()
        log.info(f"Room renamed: {old_name} -> {new_name}")
        self.broadcast.send_to_all(
            SocketEvents.ROOM_EDITED,
            RoomEdited(oldName=old_name, newName=new_name).model_dump(),
        )
        return True

    def delete_room(self, name: str) -> bool:
        """Remove ``name``. The default room can never be removed."""
        if name == DEFAULT_ROOM:
            log.warning(f"Refusing to delete protected room '{DEFAULT_ROOM}'")
            return False

        def _delete(rooms: list[str]) -> tuple[bool, bool]:
            if name not in rooms:
                return False, False
            rooms.remove(name)
            return True, True

        if not self.store.mutate_rooms(_delete):
            return False
        room_mutations_total.labels(action="delete").inc()
        log.info(f"Room deleted: {name}")
        self.broadcast.send_to_all(SocketEvents.ROOM_DELETED, name)
        return True
