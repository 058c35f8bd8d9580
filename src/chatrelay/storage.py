"""Durable store for rooms and chat messages.

The store owns the single in-memory ``Snapshot`` of the relay. All reads and
writes go through its methods; nothing else holds a reference to the
snapshot's lists.

Persistence is write-behind. A mutation is committed in memory as soon as
the method returns; the serialized snapshot is handed to a single writer
thread that replaces the data file. Writes reach disk in mutation order.
A crash before the writer finishes loses the latest mutation. Call
``flush()`` when a caller needs the durable copy to have caught up.
"""

import json
import logging
import os
import shutil
import tempfile
import threading
import typing as t
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

from pydantic import ValidationError

from chatrelay.analytics import snapshot_write_failures_total
from chatrelay.exceptions import SnapshotLoadError
from chatrelay.models import DEFAULT_ROOMS, ChatMessage, Snapshot

log = logging.getLogger(__name__)

T = t.TypeVar("T")

# A room mutation returns (changed, result). Only changes are persisted.
RoomMutation = t.Callable[[list[str]], tuple[bool, T]]


def read_snapshot(path: Path) -> tuple[Snapshot, int]:
    """Read a snapshot file, keeping every record that validates.

    Rooms, messages and users are checked one record at a time. Records
    that do not fit are skipped with a warning instead of discarding the
    whole file.

    Returns
    -------
    tuple[Snapshot, int]
        The loaded snapshot and the number of skipped records.

    Raises
    ------
    SnapshotLoadError
        If the file cannot be read or is not a JSON object.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotLoadError(f"Could not read {path}: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotLoadError(f"Expected a JSON object in {path}")

    skipped = 0

    rooms_raw = data.get("rooms", list(DEFAULT_ROOMS))
    if not isinstance(rooms_raw, list):
        log.warning(f"Ignoring non-list 'rooms' in {path}, using default rooms")
        rooms_raw = list(DEFAULT_ROOMS)
        skipped += 1
    rooms: list[str] = []
    for room in rooms_raw:
        if isinstance(room, str) and room and room not in rooms:
            rooms.append(room)
        else:
            log.warning(f"Skipping invalid or duplicate room entry {room!r}")
            skipped += 1

    messages_raw = data.get("messages", [])
    if not isinstance(messages_raw, list):
        log.warning(f"Ignoring non-list 'messages' in {path}")
        messages_raw = []
        skipped += 1
    messages: list[ChatMessage] = []
    for index, record in enumerate(messages_raw):
        try:
            messages.append(ChatMessage.model_validate(record))
        except ValidationError as e:
            log.warning(f"Skipping invalid message #{index}: {e}")
            skipped += 1

    users = data.get("users", [])
    if not isinstance(users, list):
        log.warning(f"Ignoring non-list 'users' in {path}")
        users = []
        skipped += 1

    return Snapshot(users=users, messages=messages, rooms=rooms), skipped


def backup_path(path: Path) -> Path:
    """First free ``<name>.corrupt[.N]`` path next to ``path``."""
    candidate = path.with_name(f"{path.name}.corrupt")
    n = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.corrupt.{n}")
        n += 1
    return candidate


def write_snapshot(path: Path, payload: str) -> None:
    """Atomically replace ``path`` with ``payload``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class DurableStore:
    """Owner of the rooms/messages snapshot.

    Parameters
    ----------
    path : str | Path
        Data file location. Loaded once here, rewritten on every mutation.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._snapshot = self._load()
        self._writer = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="snapshot-writer"
        )
        self._pending: Future | None = None
        self._last_write_ok = True

    def _load(self) -> Snapshot:
        if not self.path.exists():
            log.info(f"No data file at {self.path}, starting with default rooms")
            return Snapshot.default()
        try:
            snapshot, skipped = read_snapshot(self.path)
        except SnapshotLoadError as e:
            log.error(f"Error reading data file: {e}")
            self._preserve_rejected()
            log.warning("Falling back to default rooms and empty history")
            return Snapshot.default()
        if skipped:
            log.warning(f"Skipped {skipped} invalid records in {self.path}")
            self._preserve_rejected()
        log.info(
            f"Loaded {len(snapshot.rooms)} rooms and "
            f"{len(snapshot.messages)} messages from {self.path}"
        )
        return snapshot

    def _preserve_rejected(self) -> None:
        # The next mutation rewrites the data file; keep the original bytes.
        target = backup_path(self.path)
        try:
            shutil.copy2(self.path, target)
        except OSError as e:
            log.error(f"Could not back up {self.path} to {target}: {e}")
            return
        log.warning(f"Copied rejected data file to {target}")

    # --- reads ---

    def list_rooms(self) -> list[str]:
        with self._lock:
            return list(self._snapshot.rooms)

    def load_history(self, room: str) -> list[ChatMessage]:
        """Return all messages addressed to ``room`` in insertion order."""
        with self._lock:
            return [m for m in self._snapshot.messages if m.room == room]

    def message_count(self) -> int:
        with self._lock:
            return len(self._snapshot.messages)

    # --- writes ---

    def append(self, message: ChatMessage) -> None:
        """Append a message to the global sequence and schedule persistence."""
        with self._lock:
            self._snapshot.messages.append(message)
            self._schedule_write()

    def mutate_rooms(self, fn: RoomMutation[T]) -> T:
        """Apply ``fn`` to the room list.

        ``fn`` receives the live list and returns ``(changed, result)``.
        The snapshot is persisted only if ``changed`` is true.
        """
        with self._lock:
            changed, result = fn(self._snapshot.rooms)
            if changed:
                self._schedule_write()
            return result

    def _schedule_write(self) -> None:
        # Serialize under the lock so the written copy is consistent.
        payload = self._snapshot.model_dump_json(indent=2)
        self._pending = self._writer.submit(self._write, payload)

    def _write(self, payload: str) -> bool:
        try:
            write_snapshot(self.path, payload)
        except OSError as e:
            log.error(f"Error saving data: {e}")
            snapshot_write_failures_total.inc()
            self._last_write_ok = False
            return False
        self._last_write_ok = True
        return True

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every scheduled write has finished.

        Returns
        -------
        bool
            True if the most recent write succeeded (or none was pending).
        """
        with self._lock:
            pending = self._pending
        if pending is None:
            return self._last_write_ok
        try:
            pending.result(timeout=timeout)
        except FutureTimeoutError:
            log.warning(f"Timed out after {timeout}s waiting for snapshot write")
            return False
        return self._last_write_ok

    def close(self) -> None:
        """Flush pending writes and stop the writer thread."""
        self.flush()
        self._writer.shutdown(wait=True)
