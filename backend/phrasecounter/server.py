from __future__ import annotations

import sys
from typing import Any

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.store import RoomStore
from .realtime.broadcaster import RoomBroadcaster
from .realtime.handlers import register_socketio_handlers
from .routes.health import bp as health_bp


def _default_async_mode() -> str:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(overrides: dict[str, Any] | None = None) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = app.config.get("SOCKETIO_ASYNC_MODE") or _default_async_mode()

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    store = RoomStore(default_title=app.config.get("DEFAULT_ROOM_TITLE"))
    app.extensions["room_store"] = store

    app.register_blueprint(health_bp, url_prefix="/api")

    sessions = register_socketio_handlers(socketio, store, RoomBroadcaster(socketio))
    app.extensions["room_sessions"] = sessions

    return app, socketio
