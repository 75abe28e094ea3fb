from __future__ import annotations

import asyncio
from collections import defaultdict

from fastapi import WebSocket


# Topic that receives messages from every surface.
ALL_SURFACES = "*"


class SurfaceWebSocketHub:
    """In-process WebSocket pub/sub keyed by surface id.

    Contract:
      - subscribe a connection via `connect(topic, websocket)`; topic is a
        surface id or `ALL_SURFACES`.
      - `broadcast(game_id, payload)` delivers to that id's subscribers and to
        `ALL_SURFACES` subscribers.

    Payloads should be JSON-serializable dicts.
    """

    def __init__(self) -> None:
        self._by_topic: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, topic: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_topic[topic].add(websocket)

    async def disconnect(self, topic: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_topic.get(topic)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_topic.pop(topic, None)

    async def broadcast(self, game_id: str, payload: dict[str, object]) -> None:
        async with self._lock:
            targets = [(topic, ws) for topic in (game_id, ALL_SURFACES) for ws in self._by_topic.get(topic, set())]

        if not targets:
            return

        dead: list[tuple[str, WebSocket]] = []
        for topic, ws in targets:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append((topic, ws))

        if dead:
            async with self._lock:
                for topic, ws in dead:
                    self._by_topic.get(topic, set()).discard(ws)


hub = SurfaceWebSocketHub()
