from . import events  # noqa: E402
from .message_routes import messages
from .upload_routes import uploads
from .utility_routes import utility

__all__ = [
    "events",
    "messages",
    "uploads",
    "utility",
]
