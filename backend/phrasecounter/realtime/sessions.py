from __future__ import annotations

from dataclasses import dataclass
from threading import RLock


@dataclass(frozen=True)
class Session:
    room_id: str
    player_id: str


class SessionTable:
    """Connection sid -> the room and claimed player id it joined with.

    A connection is bound to one room for its whole lifetime. The player id
    is whatever the client claimed; it is not verified.
    """

    def __init__(self):
        self._lock = RLock()
        self._sessions: dict[str, Session] = {}

    def bind(self, sid: str, room_id: str, player_id: str) -> Session | None:
        """Bind ``sid`` to a room. Returns ``None`` if it is bound to another room."""
        with self._lock:
            current = self._sessions.get(sid)
            if current is not None and current.room_id != room_id:
                return None
            session = Session(room_id=room_id, player_id=player_id)
            self._sessions[sid] = session
            return session

    def get(self, sid: str) -> Session | None:
        with self._lock:
            return self._sessions.get(sid)

    def unbind(self, sid: str) -> None:
        with self._lock:
            self._sessions.pop(sid, None)

    def unbind_room(self, room_id: str) -> None:
        with self._lock:
            for sid in [s for s, sess in self._sessions.items() if sess.room_id == room_id]:
                del self._sessions[sid]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
