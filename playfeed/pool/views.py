from __future__ import annotations

from pydantic import BaseModel, Field

from playfeed.pool.lifecycle import SurfaceState


class PoolEntryView(BaseModel):
    id: str
    url: str
    loaded: bool
    state: SurfaceState
    active: bool
    # Active and not in scroll mode.
    interactive: bool


class PoolSnapshot(BaseModel):
    capacity: int
    active_id: str | None = None
    scroll_mode: bool
    entries: list[PoolEntryView] = Field(default_factory=list)
