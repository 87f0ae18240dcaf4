from __future__ import annotations

import os
from contextlib import contextmanager

import redis


class GameBusyError(ValueError):
    """Another request currently holds the game's lock."""


def get_lock_ttl_ms() -> int:
    return int(os.environ.get("TILEMERGE_LOCK_TTL_MS", "5000"))


@contextmanager
def game_lock(*, r: redis.Redis, game_id: str, ttl_ms: int | None = None):
    """Best-effort per-game lock.

    Moves on one game are serialized; a second writer fails fast instead of
    waiting. The TTL bounds how long a crashed holder can block the game.
    """

    key = f"lock:tilemerge:{game_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms or get_lock_ttl_ms())
    if not acquired:
        raise GameBusyError("Game is busy")
    try:
        yield
    finally:
        r.delete(key)
