import collections
import typing as t

import pytest

from chatrelay.config import ChatRelayConfig
from chatrelay.server import create_app, socketio
from chatrelay.storage import DurableStore

ADMIN_PASSWORD = "midnight2025"


class RecordingBroadcast:
    """Stand-in for BroadcastService that records every call."""

    def __init__(self):
        self.subscriptions: dict[str, set[str]] = collections.defaultdict(set)
        self.sent: list[tuple] = []

    def subscribe(self, sid: str, room: str) -> None:
        self.subscriptions[room].add(sid)

    def unsubscribe(self, sid: str, room: str) -> None:
        self.subscriptions[room].discard(sid)

    def send_to_room(self, event, payload, room, skip_sid=None) -> None:
        self.sent.append(("room", event, payload, room, skip_sid))

    def send_to_all(self, event, payload) -> None:
        self.sent.append(("all", event, payload))

    def send_to_session(self, sid, event, payload) -> None:
        self.sent.append(("session", sid, event, payload))


def received_payloads(received: list[dict], event: str) -> list[t.Any]:
    """Return the payload of every received ``event``.

    The Flask-SocketIO test client stores "message" and "json" events with
    the bare payload as ``args``; every other event gets a list.
    """
    return [
        r["args"] if r["name"] in ("message", "json") else r["args"][0]
        for r in received
        if r["name"] == event
    ]


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data.json"


@pytest.fixture
def store(data_file):
    store = DurableStore(data_file)
    yield store
    store.close()


@pytest.fixture
def broadcast():
    return RecordingBroadcast()


@pytest.fixture
def config(tmp_path, data_file):
    return ChatRelayConfig(
        server_port=3000,
        admin_password=ADMIN_PASSWORD,
        data_file=str(data_file),
        public_dir=str(tmp_path / "public"),
        upload_dir=str(tmp_path / "public" / "uploads"),
        log_level="INFO",
    )


@pytest.fixture
def app(config):
    app = create_app(config=config)
    app.config["TESTING"] = True
    yield app
    app.extensions["store"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sio_client_factory(app):
    """Create connected Socket.IO test clients, disconnected on teardown."""
    clients = []

    def factory():
        sio_client = socketio.test_client(app)
        clients.append(sio_client)
        return sio_client

    yield factory

    for sio_client in clients:
        if sio_client.is_connected():
            sio_client.disconnect()


@pytest.fixture
def admin_client(sio_client_factory):
    """A connected client that has authenticated as admin."""
    sio_client = sio_client_factory()
    assert sio_client.emit("authenticateAdmin", ADMIN_PASSWORD, callback=True) == {
        "success": True
    }
    sio_client.get_received()
    return sio_client
