"""Tests for DurableStore."""

import json
import logging

from chatrelay.models import DEFAULT_ROOMS, ChatMessage
from chatrelay.storage import DurableStore


def _message(room: str, text: str, username: str = "alice", timestamp: int = 1) -> ChatMessage:
    return ChatMessage(username=username, message=text, room=room, timestamp=timestamp)


def _add_room(name: str):
    def _mutation(rooms: list[str]) -> tuple[bool, bool]:
        rooms.append(name)
        return True, True

    return _mutation


def test_missing_file_starts_with_default_rooms(store, data_file):
    """Test that a fresh store has the seeded rooms and no messages."""
    assert store.list_rooms() == list(DEFAULT_ROOMS)
    assert store.message_count() == 0
    assert not data_file.exists()


def test_corrupt_file_falls_back_to_defaults(data_file, caplog):
    """Test that an unparseable snapshot is logged, backed up and replaced by defaults."""
    data_file.write_text("{not json")

    with caplog.at_level(logging.ERROR, logger="chatrelay.storage"):
        store = DurableStore(data_file)

    assert store.list_rooms() == list(DEFAULT_ROOMS)
    assert store.message_count() == 0
    assert "Error reading data file" in caplog.text
    backup = data_file.with_name("data.json.corrupt")
    assert backup.read_text() == "{not json"
    store.close()


def test_invalid_schema_falls_back_to_defaults(data_file):
    """Test that valid JSON with the wrong shape loads defaults and keeps a backup."""
    original = json.dumps({"rooms": "Main", "messages": 5})
    data_file.write_text(original)

    store = DurableStore(data_file)

    assert store.list_rooms() == list(DEFAULT_ROOMS)
    assert store.message_count() == 0
    assert data_file.with_name("data.json.corrupt").read_text() == original
    store.close()


def test_legacy_snapshot_loads_every_record(data_file):
    """Test that custom rooms, numeric usernames and ISO timestamps survive a restart."""
    data_file.write_text(
        json.dumps(
            {
                "users": [],
                "rooms": ["Main", "Tech", "Gaming", "Archive"],
                "messages": [
                    {
                        "username": "alice",
                        "message": "old",
                        "room": "Archive",
                        "timestamp": "2024-01-01T00:00:00.000Z",
                    },
                    {"username": 42, "message": "hi", "room": "Main", "timestamp": 5},
                ],
            }
        )
    )

    store = DurableStore(data_file)
    assert store.list_rooms() == ["Main", "Tech", "Gaming", "Archive"]
    assert store.message_count() == 2
    assert store.load_history("Main")[0].username == "42"
    assert not data_file.with_name("data.json.corrupt").exists()

    store.append(_message("Main", "new"))
    assert store.flush() is True

    on_disk = json.loads(data_file.read_text())
    assert "Archive" in on_disk["rooms"]
    assert len(on_disk["messages"]) == 3
    store.close()


def test_invalid_message_is_skipped_and_original_backed_up(data_file, caplog):
    """Test that one bad record does not discard the rest of the history."""
    original = json.dumps(
        {
            "users": [],
            "rooms": ["Main", "Tech", "Gaming", "Archive"],
            "messages": [
                {"username": "alice", "message": "one", "room": "Main", "timestamp": 1},
                {"username": "bob", "message": "no room", "timestamp": 2},
                {"username": "carol", "message": "three", "room": "Tech", "timestamp": 3},
            ],
        }
    )
    data_file.write_text(original)

    with caplog.at_level(logging.WARNING, logger="chatrelay.storage"):
        store = DurableStore(data_file)

    assert store.list_rooms() == ["Main", "Tech", "Gaming", "Archive"]
    assert [m.message for m in store.load_history("Main")] == ["one"]
    assert [m.message for m in store.load_history("Tech")] == ["three"]
    assert "Skipping invalid message #1" in caplog.text
    assert data_file.with_name("data.json.corrupt").read_text() == original
    store.close()


def test_repeated_rejections_keep_earlier_backups(data_file):
    """Test that a second rejected file does not overwrite the first backup."""
    data_file.with_name("data.json.corrupt").write_text("first")
    data_file.write_text("[]")

    store = DurableStore(data_file)

    assert data_file.with_name("data.json.corrupt").read_text() == "first"
    assert data_file.with_name("data.json.corrupt.1").read_text() == "[]"
    store.close()


def test_load_history_filters_by_room_in_append_order(store):
    """Test that history is a per-room view of the global sequence."""
    store.append(_message("Tech", "first"))
    store.append(_message("Gaming", "other room"))
    store.append(_message("Tech", "second"))
    store.append(_message("Tech", "third"))

    history = store.load_history("Tech")

    assert [m.message for m in history] == ["first", "second", "third"]
    assert all(m.room == "Tech" for m in history)
    assert [m.message for m in store.load_history("Gaming")] == ["other room"]
    assert store.load_history("Nowhere") == []


def test_append_persists_snapshot(store, data_file):
    """Test that an append rewrites the data file."""
    store.append(_message("Main", "hello"))

    assert store.flush() is True
    data = json.loads(data_file.read_text())
    assert data["users"] == []
    assert data["rooms"] == list(DEFAULT_ROOMS)
    assert data["messages"] == [
        {"username": "alice", "message": "hello", "room": "Main", "timestamp": 1}
    ]


def test_snapshot_round_trip(data_file):
    """Test that rooms and messages survive a restart unchanged."""
    store = DurableStore(data_file)
    store.append(_message("Tech", "hi", timestamp=10))
    store.mutate_rooms(_add_room("Lounge"))
    store.append(_message("Lounge", "welcome", username="bob", timestamp=20))
    rooms = store.list_rooms()
    messages = [m.model_dump() for m in store.load_history("Tech")] + [
        m.model_dump() for m in store.load_history("Lounge")
    ]
    store.close()

    restarted = DurableStore(data_file)

    assert restarted.list_rooms() == rooms
    assert [m.model_dump() for m in restarted.load_history("Tech")] + [
        m.model_dump() for m in restarted.load_history("Lounge")
    ] == messages
    restarted.close()


def test_mutate_rooms_without_change_does_not_persist(store, data_file):
    """Test that a rejected room mutation leaves the data file untouched."""
    result = store.mutate_rooms(lambda rooms: (False, "unchanged"))

    assert result == "unchanged"
    store.flush()
    assert not data_file.exists()


def test_mutate_rooms_returns_result(store):
    """Test that the mutation's result is passed back to the caller."""
    assert store.mutate_rooms(_add_room("Lounge")) is True
    assert store.list_rooms() == [*DEFAULT_ROOMS, "Lounge"]


def test_list_rooms_returns_copy(store):
    """Test that callers cannot mutate the room list directly."""
    rooms = store.list_rooms()
    rooms.append("Sneaky")

    assert "Sneaky" not in store.list_rooms()


def test_write_failure_is_logged_and_keeps_memory_state(tmp_path, caplog):
    """Test that a failed write neither raises nor rolls back the append."""
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be")
    store = DurableStore(blocker / "data.json")

    with caplog.at_level(logging.ERROR, logger="chatrelay.storage"):
        store.append(_message("Main", "still here"))
        assert store.flush() is False

    assert [m.message for m in store.load_history("Main")] == ["still here"]
    assert "Error saving data" in caplog.text
    store.close()


def test_extra_message_fields_are_preserved(data_file):
    """Test that client-supplied extra fields survive persistence."""
    store = DurableStore(data_file)
    store.append(
        ChatMessage(
            username="alice",
            message="look",
            room="Main",
            timestamp=1,
            filePath="/uploads/abc.png",
        )
    )
    store.close()

    restarted = DurableStore(data_file)
    (message,) = restarted.load_history("Main")

    assert message.model_dump()["filePath"] == "/uploads/abc.png"
    restarted.close()


def test_legacy_snapshot_with_iso_timestamps_loads(data_file):
    """Test that snapshots with string timestamps and reserved users load."""
    data_file.write_text(
        json.dumps(
            {
                "users": [{"name": "legacy"}],
                "messages": [
                    {
                        "username": "alice",
                        "message": "old",
                        "room": "Main",
                        "timestamp": "2025-01-01T12:00:00.000Z",
                    }
                ],
                "rooms": ["Main", "Archive"],
            }
        )
    )

    store = DurableStore(data_file)
    store.append(_message("Archive", "new"))
    store.close()

    data = json.loads(data_file.read_text())
    assert data["users"] == [{"name": "legacy"}]
    assert data["rooms"] == ["Main", "Archive"]
    assert data["messages"][0]["timestamp"] == "2025-01-01T12:00:00.000Z"
    assert len(data["messages"]) == 2
