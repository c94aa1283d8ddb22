from __future__ import annotations

import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def new_player_id() -> str:
    return f"player_{int(time.time() * 1000)}_{_random_suffix(9)}"


def new_room_id() -> str:
    """Shareable room id, e.g. ``meeting_1718000000000_k3j9xq``."""
    return f"meeting_{int(time.time() * 1000)}_{_random_suffix(6)}"
