"""
Pytest configuration and fixtures for testing
"""
import pytest

from phrasecounter.game.store import RoomStore
from phrasecounter.server import create_app


TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test",
    "SOCKETIO_ASYNC_MODE": "threading",
    "TRUST_PROXY_HEADERS": False,
}


@pytest.fixture()
def store() -> RoomStore:
    """A fresh, empty room store"""
    return RoomStore(default_title="Test Room")


@pytest.fixture()
def app_and_socketio():
    app, socketio = create_app(TEST_CONFIG)
    yield app, socketio


@pytest.fixture()
def app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def app_store(app) -> RoomStore:
    return app.extensions["room_store"]


@pytest.fixture()
def make_sio_client(app_and_socketio):
    """Factory for Socket.IO test clients connected to the app"""
    app, socketio = app_and_socketio
    clients = []

    def _make():
        client = socketio.test_client(app)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture()
def received():
    """Payloads of every event called ``name`` a test client got since the last call"""

    def _received(client, name: str) -> list[dict]:
        return [msg["args"][0] for msg in client.get_received() if msg["name"] == name]

    return _received
