from __future__ import annotations

import logging

from flask_socketio import SocketIO

from ..game import service
from ..game.models import Room
from .events import GAME_UPDATE, ROOM_CLOSED

logger = logging.getLogger(__name__)


class RoomBroadcaster:
    """Pushes full room snapshots to the Socket.IO channel named after the room."""

    def __init__(self, socketio: SocketIO):
        self.socketio = socketio

    def broadcast_room_state(self, room: Room) -> None:
        self.socketio.emit(GAME_UPDATE, {"room": service.room_public_state(room)}, to=room.id)

    def broadcast_room_closed(self, room_id: str) -> None:
        self.socketio.emit(ROOM_CLOSED, {"roomId": room_id}, to=room_id)
        # Unsubscribes every connection still in the channel.
        self.socketio.close_room(room_id)
        logger.info("Closed channel for room %s", room_id)
