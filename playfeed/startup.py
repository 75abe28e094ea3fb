from __future__ import annotations

import logging

from playfeed.host import HostRelay
from playfeed.infra.redis_client import create_redis
from playfeed.pool.manager import SurfacePoolManager
from playfeed.pool.singleton import close_pool, init_pool, pool_initialized
from playfeed.request_filter import blocked_fragments
from playfeed.settings import settings_from_env
from playfeed.surfaces.playwright_surface import PlaywrightSurfaceFactory
from playfeed.websocket_hub import hub


logger = logging.getLogger(__name__)

# Set only when startup created the pool (tests install their own beforehand).
_factory: PlaywrightSurfaceFactory | None = None


def init_pool_for_app() -> None:
    global _factory
    if pool_initialized():
        return

    settings = settings_from_env()
    _factory = PlaywrightSurfaceFactory(settings=settings)
    init_pool(
        SurfacePoolManager(
            factory=_factory,
            on_message=HostRelay(r=create_redis(), hub=hub),
            capacity=settings.capacity,
            scroll_mode=settings.scroll_mode,
            blocked_fragments=blocked_fragments(settings.extra_blocked_fragments),
        )
    )
    logger.info("surface pool ready (capacity=%d)", settings.capacity)


async def shutdown_pool_for_app() -> None:
    global _factory
    if _factory is None:
        return
    close_pool()
    await _factory.close()
    _factory = None
