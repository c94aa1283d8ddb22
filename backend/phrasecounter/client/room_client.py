from __future__ import annotations

import logging
import typing as t

import socketio

from ..game.service import rank_players
from ..realtime import events
from ..utils.ids import new_player_id

log = logging.getLogger(__name__)

Listener = t.Callable[["RoomClient"], None]


def parse_number(value: t.Any) -> int | None:
    """Integer from user input, or ``None`` if it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class RoomClient:
    """Client-side view of one room.

    The latest snapshot pushed by the server is kept in ``room`` and is
    always replaced wholesale. Commands are fire-and-forget: they return
    ``True`` once the intent is sent and their effect, if any, only shows
    up with the next snapshot.
    """

    def __init__(
        self,
        url: str,
        room_id: str,
        player_id: str | None = None,
        sio: socketio.Client | None = None,
    ):
        self.url = url
        self.room_id = room_id
        self.player_id = player_id or new_player_id()
        self.room: dict | None = None
        self.is_host = False
        self.connected = False
        self.room_closed = False
        self._listeners: list[Listener] = []

        self.sio = sio if sio is not None else socketio.Client(reconnection=True)
        self._register_handlers()

    def _register_handlers(self):
        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)
        self.sio.on("connect_error", self._on_connect_error)
        self.sio.on(events.ROOM_JOINED, self._on_room_joined)
        self.sio.on(events.GAME_UPDATE, self._on_game_update)
        self.sio.on(events.ROOM_CLOSED, self._on_room_closed)

    def connect(self, wait: bool = True):
        if self.sio.connected:
            log.debug("Already connected.")
            return
        self.sio.connect(self.url, transports=["websocket", "polling"], wait=wait)

    def disconnect(self):
        if self.sio.connected:
            self.sio.disconnect()

    def wait(self):
        self.sio.wait()

    def subscribe(self, listener: Listener) -> t.Callable[[], None]:
        """Call ``listener`` after every state change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    # --- inbound events -------------------------------------------------

    def _on_connect(self):
        log.info(f"Connected to {self.url}, joining room {self.room_id}")
        self.connected = True
        # Re-sent after every reconnect; the server recognises us by player id.
        self.sio.emit(events.JOIN_ROOM, {"roomId": self.room_id, "playerId": self.player_id})
        self._notify()

    def _on_disconnect(self, *_args):
        log.info("Disconnected from server")
        self.connected = False
        self._notify()

    def _on_connect_error(self, data=None):
        log.warning(f"Connection error: {data}")
        self.connected = False
        self._notify()

    def _on_room_joined(self, data):
        self.room = data.get("room")
        self.is_host = bool(data.get("isHost"))
        self._notify()

    def _on_game_update(self, data):
        self.room = data.get("room")
        self._notify()

    def _on_room_closed(self, data):
        log.info(f"Room closed: {data.get('roomId')}")
        self.room_closed = True
        self.room = None
        self._notify()

    # --- commands -------------------------------------------------------

    def _send(self, event: str, payload: dict) -> bool:
        if not self.sio.connected:
            return False
        self.sio.emit(event, {"roomId": self.room_id, **payload})
        return True

    def join_game(self, player_name: str) -> bool:
        name = (player_name or "").strip()
        if not name:
            return False
        return self._send(events.JOIN_GAME, {"playerId": self.player_id, "playerName": name})

    def submit_guess(self, guess: t.Any) -> bool:
        value = parse_number(guess)
        if value is None:
            return False
        return self._send(events.SUBMIT_GUESS, {"playerId": self.player_id, "guess": value})

    def start_guessing(self) -> bool:
        return self._send(events.START_GUESSING, {"hostId": self.player_id})

    def reveal_answer(self, answer: t.Any) -> bool:
        value = parse_number(answer)
        if value is None:
            return False
        return self._send(events.REVEAL_ANSWER, {"hostId": self.player_id, "answer": value})

    def reset_game(self) -> bool:
        return self._send(events.RESET_GAME, {"hostId": self.player_id})

    def update_title(self, title: str) -> bool:
        title = (title or "").strip()
        if not title:
            return False
        return self._send(events.UPDATE_TITLE, {"hostId": self.player_id, "title": title})

    def update_phrase(self, phrase: str | None) -> bool:
        return self._send(events.UPDATE_PHRASE, {"hostId": self.player_id, "phrase": phrase})

    def remove_player(self, player_id: str) -> bool:
        return self._send(events.REMOVE_PLAYER, {"hostId": self.player_id, "playerId": player_id})

    def close_room(self) -> bool:
        return self._send(events.CLOSE_ROOM, {"hostId": self.player_id})

    # --- derived views --------------------------------------------------

    @property
    def me(self) -> dict | None:
        if not self.room:
            return None
        for p in self.room.get("players", []):
            if p.get("id") == self.player_id:
                return p
        return None

    def leaderboard(self) -> list[dict]:
        if not self.room:
            return []
        return rank_players(self.room.get("players", []))

    def rank_of(self, player_id: str) -> int | None:
        """1-based rank once the room is finished, ``None`` for players without a result."""
        if not self.room or self.room.get("state") != "finished":
            return None
        for idx, p in enumerate(self.leaderboard(), start=1):
            if p.get("id") == player_id:
                return idx if p.get("difference") is not None else None
        return None
