from __future__ import annotations

from playfeed.pool.manager import SurfacePoolManager


_POOL: SurfacePoolManager | None = None


def init_pool(pool: SurfacePoolManager) -> SurfacePoolManager:
    """Install the process-wide pool once.

    Safe to call multiple times; subsequent calls return the already installed instance.
    """

    global _POOL
    if _POOL is None:
        _POOL = pool
    return _POOL


def pool_initialized() -> bool:
    return _POOL is not None


def close_pool() -> None:
    """Release every resident surface and drop the installed pool."""

    global _POOL
    if _POOL is not None:
        _POOL.release_all()
    _POOL = None


def reset_pool_for_tests() -> None:
    """Drop the installed pool.

    This is intended for tests so each one can install a pool over a fake factory.
    """

    close_pool()


def get_pool() -> SurfacePoolManager:
    if _POOL is None:
        raise RuntimeError("Surface pool not initialized. Call init_pool() at startup.")
    return _POOL
