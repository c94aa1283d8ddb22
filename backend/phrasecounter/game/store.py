from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import RLock

from ..config import Config
from .models import Player, Room
from . import service

logger = logging.getLogger(__name__)


class RoomStore:
    """In-memory registry of every room served by this process.

    Mutations return the affected room when they were applied and ``None``
    when they were rejected. Rejections never raise: an unauthorised caller,
    a wrong state or an unknown room/player all end up as a silent no-op.
    """

    def __init__(self, default_title: str | None = None):
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self.default_title = default_title or Config.DEFAULT_ROOM_TITLE

    @contextmanager
    def locked(self):
        """Hold the store lock across several steps, e.g. delete plus broadcast."""
        with self._lock:
            yield self

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def ensure_room(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(id=room_id, title=self.default_title, last_updated=service.now_ms())
                self._rooms[room_id] = room
                logger.info("Created room %s", room_id)
            return room

    def get_room(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(room_id)

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def assign_host_if_absent(self, room: Room, player_id: str) -> bool:
        """Make ``player_id`` host unless the room already has one.

        Returns whether ``player_id`` is the host afterwards.
        """
        with self._lock:
            if not room.host:
                room.host = player_id
                logger.info("Player %s is host of room %s", player_id, room.id)
            return room.host == player_id

    def _host_room(self, room_id: str, caller_id: str) -> Room | None:
        room = self._rooms.get(room_id)
        if room is None:
            logger.debug("Ignoring command for unknown room %s", room_id)
            return None
        if not caller_id or room.host != caller_id:
            logger.debug("Ignoring host command from %s in room %s", caller_id, room_id)
            return None
        return room

    def add_player(self, room_id: str, player_id: str, name: str) -> Room | None:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or room.state != "waiting":
                return None
            if room.find_player(player_id) is not None:
                return None

            room.players.append(Player(id=player_id, name=name, joined_at=service.now_ms()))
            service.touch(room)
            return room

    def remove_player(self, room_id: str, caller_id: str, target_id: str) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None:
                return None

            room.players = [p for p in room.players if p.id != target_id]
            if room.winner is not None and room.winner.id == target_id:
                room.winner = None
            service.touch(room)
            return room

    def start_guessing(self, room_id: str, caller_id: str) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None or room.state != "waiting" or not room.players:
                return None

            room.state = "guessing"
            service.touch(room)
            return room

    def set_guess(self, room_id: str, player_id: str, guess: int) -> Room | None:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or room.state != "guessing":
                return None

            player = room.find_player(player_id)
            if player is None:
                return None

            player.guess = guess
            service.touch(room)
            return room

    def reveal_answer(self, room_id: str, caller_id: str, answer: int) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None:
                return None

            service.compute_results(room, answer)
            service.touch(room)
            return room

    def reset_room(self, room_id: str, caller_id: str) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None:
                return None

            service.clear_round(room)
            service.touch(room)
            return room

    def set_title(self, room_id: str, caller_id: str, title: str) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None:
                return None

            room.title = title
            service.touch(room)
            return room

    def set_phrase(self, room_id: str, caller_id: str, phrase: str | None) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None:
                return None

            room.phrase = phrase
            service.touch(room)
            return room

    def delete_room(self, room_id: str, caller_id: str) -> Room | None:
        with self._lock:
            room = self._host_room(room_id, caller_id)
            if room is None:
                return None

            del self._rooms[room_id]
            logger.info("Host %s closed room %s", caller_id, room_id)
            return room
