"""Service layer for domain logic."""

from .admin_service import AdminService
from .broadcast_service import BroadcastService
from .room_service import RoomService
from .session_service import Session, SessionService

__all__ = [
    "AdminService",
    "BroadcastService",
    "RoomService",
    "Session",
    "SessionService",
]
