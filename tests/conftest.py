from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest

from playfeed.pool.manager import SurfacePoolManager
from playfeed.surfaces.base import SurfaceHooks


class RecordingSurface:
    """Stand-in for a content surface that records every instruction it gets."""

    def __init__(self, *, game_id: str, url: str, hooks: SurfaceHooks, log: list[tuple[str, str]]) -> None:
        self.game_id = game_id
        self.url = url
        self.hooks = hooks
        self.instructions: list[str] = []
        self.release_count = 0
        self.reload_count = 0
        self._log = log

    def inject(self, script: str) -> None:
        self.instructions.append(script)
        self._log.append((self.game_id, script))

    def reload(self) -> None:
        self.reload_count += 1

    def release(self) -> None:
        self.release_count += 1

    # Content side.

    def finish_load(self) -> None:
        self.hooks.on_loaded()

    def post(self, raw: str) -> None:
        self.hooks.on_message(raw)


class RecordingSurfaceFactory:
    def __init__(self) -> None:
        self.created: list[RecordingSurface] = []
        # (surface id, script) across all surfaces, in issue order.
        self.log: list[tuple[str, str]] = []

    def create(self, *, game_id: str, url: str, hooks: SurfaceHooks) -> RecordingSurface:
        surface = RecordingSurface(game_id=game_id, url=url, hooks=hooks, log=self.log)
        self.created.append(surface)
        return surface

    def latest(self, game_id: str) -> RecordingSurface:
        for surface in reversed(self.created):
            if surface.game_id == game_id:
                return surface
        raise AssertionError(f"no surface created for {game_id}")


@pytest.fixture()
def factory() -> RecordingSurfaceFactory:
    return RecordingSurfaceFactory()


@pytest.fixture()
def relayed() -> list[tuple[str, dict[str, Any]]]:
    return []


@pytest.fixture()
def pool(factory: RecordingSurfaceFactory, relayed: list[tuple[str, dict[str, Any]]]) -> SurfacePoolManager:
    return SurfacePoolManager(
        factory=factory,
        on_message=lambda game_id, data: relayed.append((game_id, data)),
        capacity=4,
    )


@pytest.fixture()
def app_pool(factory: RecordingSurfaceFactory):
    """Shared fixture for API tests: TestClient, fakeredis and the installed pool.

    The pool is installed before the app starts, so startup never launches a browser.
    """

    import fakeredis
    from fastapi.testclient import TestClient

    from playfeed.api.deps import get_redis
    from playfeed.host import HostRelay
    from playfeed.main import app
    from playfeed.pool.singleton import init_pool, reset_pool_for_tests
    from playfeed.websocket_hub import hub

    r = fakeredis.FakeRedis(decode_responses=True)
    reset_pool_for_tests()
    pool = init_pool(SurfacePoolManager(factory=factory, on_message=HostRelay(r=r, hub=hub), capacity=4))

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r, pool
    app.dependency_overrides.clear()
    reset_pool_for_tests()
