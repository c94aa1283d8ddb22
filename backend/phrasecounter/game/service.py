from __future__ import annotations

import time
from dataclasses import asdict

from .models import Player, Room


def now_ms() -> int:
    return int(time.time() * 1000)


def touch(room: Room) -> None:
    room.last_updated = now_ms()


def compute_results(room: Room, answer: int) -> None:
    """Apply a reveal: store the answer, score every guess and pick the winner.

    Ties go to whichever tied player joined first, because only a strictly
    smaller difference replaces the current candidate.
    """
    room.correct_answer = answer
    room.state = "finished"

    winner: Player | None = None
    for p in room.players:
        if p.guess is None:
            p.difference = None
            continue
        p.difference = abs(p.guess - answer)
        if winner is None or p.difference < winner.difference:
            winner = p

    room.winner = winner


def clear_round(room: Room) -> None:
    room.state = "waiting"
    room.players = []
    room.correct_answer = None
    room.winner = None


def player_public_state(player: Player) -> dict:
    d = asdict(player)
    return {
        "id": d["id"],
        "name": d["name"],
        "guess": d["guess"],
        "difference": d["difference"],
        "joinedAt": d["joined_at"],
    }


def room_public_state(room: Room) -> dict:
    return {
        "id": room.id,
        "title": room.title,
        "phrase": room.phrase,
        "state": room.state,
        "players": [player_public_state(p) for p in room.players],
        "correctAnswer": room.correct_answer,
        "winner": player_public_state(room.winner) if room.winner else None,
        "host": room.host,
        "lastUpdated": room.last_updated,
    }


def rank_players(players: list[dict]) -> list[dict]:
    """Order snapshot players by difference, players without one last.

    The sort is stable so equal differences keep join order.
    """
    return sorted(
        players,
        key=lambda p: (p.get("difference") is None, p.get("difference") or 0),
    )
