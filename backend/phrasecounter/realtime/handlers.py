from __future__ import annotations

import logging
from typing import Any

from flask import current_app, request
from flask_socketio import SocketIO, emit, join_room

from ..game import service
from ..game.store import RoomStore
from ..utils.ip import get_client_ip
from . import events
from .broadcaster import RoomBroadcaster
from .sessions import SessionTable

logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip()


def _as_int(raw: Any) -> int | None:
    # Numbers are validated client side; anything else is dropped here.
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def register_socketio_handlers(
    socketio: SocketIO,
    store: RoomStore,
    broadcaster: RoomBroadcaster | None = None,
    sessions: SessionTable | None = None,
) -> SessionTable:
    broadcaster = broadcaster or RoomBroadcaster(socketio)
    sessions = sessions if sessions is not None else SessionTable()

    def _room_id(payload: dict) -> str:
        room_id = _text(payload, "roomId")
        bound = sessions.get(request.sid)
        if bound is None:
            return room_id
        if room_id and room_id != bound.room_id:
            logger.debug("Connection %s is bound to %s, ignoring command for %s", request.sid, bound.room_id, room_id)
            return ""
        return bound.room_id

    def _publish(room) -> None:
        if room is None:
            return
        broadcaster.broadcast_room_state(room)

    @socketio.on("connect")
    def on_connect(*_args):
        trust = current_app.config.get("TRUST_PROXY_HEADERS", False)
        logger.info("Client connected: %s (%s)", request.sid, get_client_ip(request, trust) or "unknown")

    @socketio.on("disconnect")
    def on_disconnect(*_args):
        # The player stays in the roster; only the binding goes away.
        sessions.unbind(request.sid)
        logger.info("Client disconnected: %s", request.sid)

    @socketio.on(events.JOIN_ROOM)
    def join_room_event(data=None):
        payload = _payload(data)
        room_id = _text(payload, "roomId")
        player_id = _text(payload, "playerId")
        if not room_id or not player_id:
            logger.debug("Ignoring joinRoom with invalid payload from %s", request.sid)
            return

        # Same lock as closeRoom, so a join never lands halfway through a close.
        with store.locked():
            if sessions.bind(request.sid, room_id, player_id) is None:
                logger.debug("Connection %s already bound to another room, ignoring joinRoom %s", request.sid, room_id)
                return

            join_room(room_id)
            room = store.ensure_room(room_id)
            is_host = store.assign_host_if_absent(room, player_id)
            snapshot = service.room_public_state(room)

        emit(events.ROOM_JOINED, {"room": snapshot, "isHost": is_host})

    @socketio.on(events.JOIN_GAME)
    def join_game(data=None):
        payload = _payload(data)
        player_id = _text(payload, "playerId")
        name = _text(payload, "playerName")
        if not player_id or not name:
            return

        _publish(store.add_player(_room_id(payload), player_id, name))

    @socketio.on(events.REMOVE_PLAYER)
    def remove_player(data=None):
        payload = _payload(data)
        target_id = _text(payload, "playerId")
        if not target_id:
            return

        _publish(store.remove_player(_room_id(payload), _text(payload, "hostId"), target_id))

    @socketio.on(events.START_GUESSING)
    def start_guessing(data=None):
        payload = _payload(data)
        _publish(store.start_guessing(_room_id(payload), _text(payload, "hostId")))

    @socketio.on(events.SUBMIT_GUESS)
    def submit_guess(data=None):
        payload = _payload(data)
        guess = _as_int(payload.get("guess"))
        if guess is None:
            logger.debug("Ignoring non-integer guess from %s", request.sid)
            return

        _publish(store.set_guess(_room_id(payload), _text(payload, "playerId"), guess))

    @socketio.on(events.REVEAL_ANSWER)
    def reveal_answer(data=None):
        payload = _payload(data)
        answer = _as_int(payload.get("answer"))
        if answer is None:
            logger.debug("Ignoring non-integer answer from %s", request.sid)
            return

        _publish(store.reveal_answer(_room_id(payload), _text(payload, "hostId"), answer))

    @socketio.on(events.RESET_GAME)
    def reset_game(data=None):
        payload = _payload(data)
        _publish(store.reset_room(_room_id(payload), _text(payload, "hostId")))

    @socketio.on(events.UPDATE_TITLE)
    def update_title(data=None):
        payload = _payload(data)
        if not isinstance(payload.get("title"), str):
            return

        _publish(store.set_title(_room_id(payload), _text(payload, "hostId"), _text(payload, "title")))

    @socketio.on(events.UPDATE_PHRASE)
    def update_phrase(data=None):
        payload = _payload(data)
        raw = payload.get("phrase")
        if raw is not None and not isinstance(raw, str):
            return

        phrase = _text(payload, "phrase") or None
        _publish(store.set_phrase(_room_id(payload), _text(payload, "hostId"), phrase))

    @socketio.on(events.CLOSE_ROOM)
    def close_room(data=None):
        payload = _payload(data)
        with store.locked():
            room = store.delete_room(_room_id(payload), _text(payload, "hostId"))
            if room is None:
                return

            broadcaster.broadcast_room_closed(room.id)
            sessions.unbind_room(room.id)

    return sessions
