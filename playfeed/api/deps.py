from __future__ import annotations

from collections.abc import Generator

import redis

from playfeed.infra.redis_client import create_redis
from playfeed.pool.manager import SurfacePoolManager
from playfeed.pool.singleton import get_pool
from playfeed.settings import PoolSettings, settings_from_env


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        try:
            client.close()
        except Exception:
            # Some redis client versions don't require explicit close.
            pass


def get_surface_pool() -> SurfacePoolManager:
    return get_pool()


def get_settings() -> PoolSettings:
    return settings_from_env()
