from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class SurfaceHooks:
    """What a surface is given at creation time.

    - `init_script`: installed as a load-time hook, before document scripts run.
    - `allow_request`: consulted before every navigation / sub-resource load.
    - `on_loaded`: called each time the document finishes loading.
    - `on_message`: called with every raw string the content posts.
    """

    init_script: str
    allow_request: Callable[[str], bool]
    on_loaded: Callable[[], None]
    on_message: Callable[[str], None]


class ContentSurface(Protocol):
    """An isolated rendering host owned by exactly one pool entry.

    All instruction methods are fire-and-forget: they return immediately and
    there is no completion signal.
    """

    def inject(self, script: str) -> None: ...

    def reload(self) -> None: ...

    def release(self) -> None: ...


class SurfaceFactory(Protocol):
    def create(self, *, game_id: str, url: str, hooks: SurfaceHooks) -> ContentSurface: ...
