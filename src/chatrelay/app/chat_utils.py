import logging
import typing as t

from chatrelay.analytics import messages_total
from chatrelay.constants import SocketEvents
from chatrelay.models import ChatMessage
from chatrelay.services import BroadcastService
from chatrelay.storage import DurableStore
from chatrelay.utils.time import utc_now_ms

log = logging.getLogger(__name__)


def create_message(
    store: DurableStore,
    broadcast: BroadcastService,
    fields: dict[str, t.Any],
    source: str,
) -> ChatMessage:
    """Stamp, store and broadcast a new chat message.

    Args:
        store: The durable store to append to
        broadcast: Router used to fan the message out to its room
        fields: Validated message fields. Any client ``timestamp`` is replaced.
        source: Metrics label, ``"socket"`` or ``"http"``

    Returns:
        ChatMessage: The stored message
    """
    message = ChatMessage(**{**fields, "timestamp": utc_now_ms()})
    store.append(message)
    messages_total.labels(source=source).inc()
    broadcast.send_to_room(SocketEvents.MESSAGE, message.model_dump(), message.room)
    log.debug(f"Message from {message.username} in room {message.room}")
    return message
