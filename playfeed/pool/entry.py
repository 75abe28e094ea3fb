from __future__ import annotations

from dataclasses import dataclass

from playfeed.pool.lifecycle import SurfaceLifecycle, SurfaceState
from playfeed.surfaces.base import ContentSurface


@dataclass(frozen=True, slots=True)
class PoolEntry:
    """One tracked surface. The entry is the only owner of `surface`."""

    id: str
    url: str
    surface: ContentSurface
    lifecycle: SurfaceLifecycle

    @property
    def loaded(self) -> bool:
        return self.lifecycle.loaded

    @property
    def state(self) -> SurfaceState:
        return self.lifecycle.surface_state
