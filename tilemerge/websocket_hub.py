from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket


logger = logging.getLogger(__name__)


class GameWebSocketHub:
    """In-process WebSocket fan-out keyed by game_id.

    Renderers connect with `connect(game_id, websocket)` and receive every
    `broadcast(game_id, payload)` for that game. Payloads are JSON-serializable
    dicts. Sockets that fail to receive are dropped.
    """

    def __init__(self) -> None:
        self._by_game: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, game_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_game[game_id].add(websocket)

    async def disconnect(self, game_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._discard(game_id, websocket)

    def _discard(self, game_id: str, websocket: WebSocket) -> None:
        conns = self._by_game.get(game_id)
        if conns is None:
            return
        conns.discard(websocket)
        if not conns:
            del self._by_game[game_id]

    def connection_count(self, game_id: str) -> int:
        return len(self._by_game.get(game_id, ()))

    async def broadcast(self, game_id: str, payload: dict[str, object]) -> int:
        """Send `payload` to every socket of the game; returns how many received it."""

        async with self._lock:
            conns = list(self._by_game.get(game_id, ()))
        if not conns:
            return 0

        results = await asyncio.gather(*(ws.send_json(payload) for ws in conns), return_exceptions=True)
        dead = [ws for ws, res in zip(conns, results) if isinstance(res, Exception)]

        if dead:
            logger.debug("Dropping %d dead socket(s) for game %s", len(dead), game_id)
            async with self._lock:
                for ws in dead:
                    self._discard(game_id, ws)

        return len(conns) - len(dead)


hub = GameWebSocketHub()
