from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


RoomState = Literal["waiting", "guessing", "finished"]


@dataclass
class Player:
    id: str
    name: str
    guess: int | None = None
    difference: int | None = None
    joined_at: int = 0


@dataclass
class Room:
    id: str
    title: str
    phrase: str | None = None
    state: RoomState = "waiting"
    players: list[Player] = field(default_factory=list)
    correct_answer: int | None = None
    winner: Player | None = None
    # First joiner; never reassigned.
    host: str | None = None
    last_updated: int = 0

    def find_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None
