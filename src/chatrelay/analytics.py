"""Prometheus metrics for chatrelay.

Exposed at /metrics by ``create_app``.
"""

from prometheus_client import Counter, Gauge

connected_sessions = Gauge(
    "chatrelay_connected_sessions", "Number of currently connected sessions"
)

messages_total = Counter(
    "chatrelay_messages_total",
    "Chat messages accepted by the relay",
    ["source"],  # Labels: 'socket' or 'http'
)

room_mutations_total = Counter(
    "chatrelay_room_mutations_total",
    "Successful room registry changes",
    ["action"],  # Labels: 'create', 'rename', 'delete'
)

snapshot_write_failures_total = Counter(
    "chatrelay_snapshot_write_failures_total",
    "Snapshot writes that failed to reach disk",
)
