"""Gunicorn configuration for production deployment.

Flask-SocketIO in threading mode uses simple-websocket for WebSocket support.
The relay keeps its state in one process, so exactly one worker is run.
"""

import os

# Server socket
bind = f"0.0.0.0:{os.getenv('PORT', '3000')}"
backlog = 2048

# Single worker: rooms, sessions and the snapshot live in process memory
workers = 1

# Worker class - sync (threaded) for Flask-SocketIO without gevent/eventlet
worker_class = "sync"

# Each thread can hold one long-lived WebSocket connection
threads = int(os.getenv("GUNICORN_THREADS", "200"))

# Timeouts
# Long enough for image uploads
timeout = 120
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("CHATRELAY_LOG_LEVEL", "info").lower()

# Process naming
proc_name = "chatrelay"

# Server mechanics
daemon = False
pidfile = None


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("=" * 80)
    server.log.info("chatrelay Gunicorn server starting")
    server.log.info(f"Workers: {workers}, Threads per worker: {threads}")
    server.log.info(f"Worker class: {worker_class}")
    server.log.info(f"Timeout: {timeout}s")
    server.log.info("=" * 80)
