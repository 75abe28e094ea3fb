from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis

from playfeed.api.models import RelayedMessage
from playfeed.scores import record_surface_message
from playfeed.websocket_hub import SurfaceWebSocketHub


logger = logging.getLogger(__name__)


class HostRelay:
    """Default host message handler wired into the pool.

    Each relayed message is appended to the surface's Redis event stream and
    fanned out to WebSocket subscribers. The pool calls this synchronously, so
    the broadcast is scheduled on the running loop rather than awaited.
    """

    def __init__(self, *, r: redis.Redis, hub: SurfaceWebSocketHub) -> None:
        self._r = r
        self._hub = hub
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, game_id: str, data: dict[str, Any]) -> None:
        try:
            record_surface_message(r=self._r, game_id=game_id, data=data)
        except redis.RedisError:
            logger.warning("could not record message from %s", game_id, exc_info=True)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running loop; message from %s not broadcast", game_id)
            return

        payload = RelayedMessage(game_id=game_id, data=data).model_dump(mode="json")
        task = loop.create_task(self._hub.broadcast(game_id, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
