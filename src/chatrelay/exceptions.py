"""chatrelay exception classes."""


class ChatRelayException(Exception):
    """Base exception for all chatrelay errors."""
    pass


class InvalidPayload(ChatRelayException):
    """Raised when an inbound event or request body fails validation."""
    pass


class SnapshotLoadError(ChatRelayException):
    """Raised when the persisted snapshot cannot be read or parsed."""
    pass
