"""chatrelay: real-time multi-room chat relay."""
import importlib.metadata
import logging

from chatrelay.server import create_app, socketio

__all__ = ["create_app", "socketio"]

log = logging.getLogger(__name__)
log.setLevel(logging.INFO)
handler = logging.StreamHandler()
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)
log.addHandler(handler)

__version__ = importlib.metadata.version("chatrelay")
