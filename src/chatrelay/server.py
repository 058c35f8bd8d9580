import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from flask import Flask
from flask_socketio import SocketIO
from prometheus_client import make_wsgi_app
from werkzeug.middleware.dispatcher import DispatcherMiddleware

if TYPE_CHECKING:
    from chatrelay.config import ChatRelayConfig

log = logging.getLogger(__name__)

socketio = SocketIO(cors_allowed_origins="*")


def services_init_app(app: Flask) -> None:
    """Initialize the store and the service layer.

    Every service receives the single ``DurableStore`` instance by reference;
    none of them reaches for a global. Handlers find them in
    ``app.extensions``.
    """
    from chatrelay.services import (
        AdminService,
        BroadcastService,
        RoomService,
        SessionService,
    )
    from chatrelay.storage import DurableStore

    config = app.extensions["config"]

    store = DurableStore(config.data_file)
    broadcast = BroadcastService(socketio)

    app.extensions["store"] = store
    app.extensions["broadcast_service"] = broadcast
    app.extensions["admin_service"] = AdminService(config.admin_password)
    app.extensions["room_service"] = RoomService(store, broadcast)
    app.extensions["session_service"] = SessionService(store, broadcast)
    # Handlers run one at a time under this lock.
    app.extensions["dispatch_lock"] = threading.RLock()


def create_app(config: "ChatRelayConfig | None" = None) -> Flask:
    """Create and configure Flask application.

    Parameters
    ----------
    config : ChatRelayConfig | None
        Configuration object. If None, loads from environment via get_config().

    Returns
    -------
    Flask
        Configured Flask application instance.
    """
    from chatrelay.config import get_config as _get_config

    if config is None:
        config = _get_config()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("chatrelay").setLevel(log_level)
    log.info(f"Logging configured at level: {config.log_level}")

    public_dir = Path(config.public_dir).resolve()
    app = Flask(__name__, static_folder=str(public_dir), static_url_path="")

    app.extensions["config"] = config
    app.config["SECRET_KEY"] = config.flask_secret_key
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_mb * 1024 * 1024

    Path(config.upload_dir).mkdir(parents=True, exist_ok=True)

    from chatrelay.app import messages, uploads, utility

    app.register_blueprint(utility)
    app.register_blueprint(messages)
    app.register_blueprint(uploads)

    services_init_app(app)

    socketio.init_app(app, cors_allowed_origins="*")

    app.wsgi_app = DispatcherMiddleware(app.wsgi_app, {"/metrics": make_wsgi_app()})
    log.info("Prometheus metrics endpoint enabled at /metrics")

    return app
