from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine


class SurfaceState(StrEnum):
    loading = "loading"
    ready = "ready"
    released = "released"


class SurfaceLifecycle(StateMachine):
    """Lifecycle of one pooled surface.

    loading -> ready when the document reports load, ready -> loading on reload,
    and either -> released on eviction. Released is final; the manager drops the
    entry from tracking at the same time, so nothing ever signals a released entry.
    """

    loading = State(SurfaceState.loading.value, value=SurfaceState.loading.value, initial=True)
    ready = State(SurfaceState.ready.value, value=SurfaceState.ready.value)
    released = State(SurfaceState.released.value, value=SurfaceState.released.value, final=True)

    # A document reload fires load again while already ready.
    finish_loading = loading.to(ready) | ready.to.itself()
    begin_reload = ready.to(loading) | loading.to.itself()
    release = loading.to(released) | ready.to(released)

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__()

    @property
    def surface_state(self) -> SurfaceState:
        return SurfaceState(str(self.current_state.value))

    @property
    def loaded(self) -> bool:
        return self.surface_state == SurfaceState.ready
