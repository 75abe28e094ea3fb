from __future__ import annotations

import logging
from typing import Any

from playfeed.instrumentation import INSTRUMENTATION_SCRIPT, MUTE_SCRIPT, START_GAME_SCRIPT, UNMUTE_SCRIPT
from playfeed.pool.entry import PoolEntry
from playfeed.pool.lifecycle import SurfaceLifecycle
from playfeed.pool.views import PoolEntryView, PoolSnapshot
from playfeed.relay import MessageHandler, decode_surface_message
from playfeed.request_filter import BLOCKED_URL_FRAGMENTS, allow
from playfeed.settings import DEFAULT_POOL_CAPACITY
from playfeed.surfaces.base import ContentSurface, SurfaceFactory, SurfaceHooks


logger = logging.getLogger(__name__)


class SurfaceNotFoundError(ValueError):
    """An operation with side-effect intent named an id that is not resident."""

    def __init__(self, game_id: str):
        super().__init__(f"Surface not found: {game_id}")
        self.game_id = game_id


class SurfacePoolManager:
    """Owns the bounded set of live surfaces.

    Contract:
      - at most `capacity` entries are resident, at most one per id.
      - admission order is eviction order (FIFO), skipping the active id while
        any other entry exists.
      - at most one entry is active; switching always issues mute to the old
        surface before unmute to the new one.
      - surface instructions are fire-and-forget; nothing here awaits a surface.
      - a misbehaving surface or message handler is logged and contained, it
        never raises out of a pool operation.

    Not thread-safe: calls are expected from a single event loop.
    """

    def __init__(
        self,
        *,
        factory: SurfaceFactory,
        on_message: MessageHandler | None = None,
        capacity: int = DEFAULT_POOL_CAPACITY,
        scroll_mode: bool = True,
        blocked_fragments: tuple[str, ...] = BLOCKED_URL_FRAGMENTS,
        init_script: str = INSTRUMENTATION_SCRIPT,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self._factory = factory
        self._on_message = on_message
        self._capacity = capacity
        self._scroll_mode = scroll_mode
        self._blocked = blocked_fragments
        self._init_script = init_script

        # dict preserves insertion order, which is the eviction order.
        self._entries: dict[str, PoolEntry] = {}
        self._active_id: str | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def scroll_mode(self) -> bool:
        return self._scroll_mode

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._entries

    def ids(self) -> list[str]:
        return list(self._entries)

    # -- commands -----------------------------------------------------------

    def preload(self, game_id: str, url: str) -> bool:
        """Admit `game_id` unless it is already resident.

        Returns True when a new surface was created. A factory failure is
        logged and returns False with the resident entries untouched.
        """

        if game_id in self._entries:
            return False

        lifecycle = SurfaceLifecycle(game_id)
        hooks = SurfaceHooks(
            init_script=self._init_script,
            allow_request=self._allow_request,
            on_loaded=lambda: self._from_surface(game_id, lifecycle, self.on_surface_loaded),
            on_message=lambda raw: self._from_surface(game_id, lifecycle, self.on_surface_message, raw),
        )
        # Create before evicting so a failed creation costs no resident surface.
        try:
            surface = self._factory.create(game_id=game_id, url=url, hooks=hooks)
        except Exception:
            logger.exception("could not create surface %s", game_id)
            return False

        if len(self._entries) >= self._capacity:
            self._evict(self._pick_victim())
        self._entries[game_id] = PoolEntry(id=game_id, url=url, surface=surface, lifecycle=lifecycle)
        logger.info("admitted surface %s (%d/%d)", game_id, len(self._entries), self._capacity)
        return True

    def set_active(self, game_id: str) -> None:
        entry = self._entries.get(game_id)
        if entry is None:
            raise SurfaceNotFoundError(game_id)

        previous = self._active_id
        if previous is not None and previous != game_id:
            prev_entry = self._entries.get(previous)
            if prev_entry is not None:
                self._send(prev_entry, MUTE_SCRIPT)

        self._send(entry, UNMUTE_SCRIPT)
        self._active_id = game_id
        if previous != game_id:
            logger.info("active surface %s -> %s", previous, game_id)

    def inject_script(self, game_id: str, script: str) -> None:
        entry = self._entries.get(game_id)
        if entry is None:
            logger.debug("inject for non-resident surface %s ignored", game_id)
            return
        self._send(entry, script)

    def start_game(self, game_id: str) -> None:
        self.inject_script(game_id, START_GAME_SCRIPT)

    def reload(self, game_id: str) -> None:
        entry = self._entries.get(game_id)
        if entry is None:
            raise SurfaceNotFoundError(game_id)
        entry.lifecycle.begin_reload()
        try:
            entry.surface.reload()
        except Exception:
            logger.exception("surface %s failed to reload", game_id)

    def set_scroll_mode(self, enabled: bool) -> None:
        self._scroll_mode = bool(enabled)

    def release_all(self) -> None:
        for game_id in list(self._entries):
            self._evict(game_id)

    # -- lookups ------------------------------------------------------------

    def get_active_handle(self, game_id: str) -> ContentSurface | None:
        entry = self._entries.get(game_id)
        return entry.surface if entry is not None else None

    def get_entry(self, game_id: str) -> PoolEntry | None:
        return self._entries.get(game_id)

    def is_loaded(self, game_id: str) -> bool:
        entry = self._entries.get(game_id)
        return entry is not None and entry.loaded

    def is_interactive(self, game_id: str) -> bool:
        return game_id == self._active_id and not self._scroll_mode

    def snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(
            capacity=self._capacity,
            active_id=self._active_id,
            scroll_mode=self._scroll_mode,
            entries=[self.view(e) for e in self._entries.values()],
        )

    def view(self, entry: PoolEntry) -> PoolEntryView:
        return PoolEntryView(
            id=entry.id,
            url=entry.url,
            loaded=entry.loaded,
            state=entry.state,
            active=entry.id == self._active_id,
            interactive=self.is_interactive(entry.id),
        )

    # -- surface callbacks ----------------------------------------------------

    def on_surface_loaded(self, game_id: str) -> None:
        entry = self._entries.get(game_id)
        if entry is None:
            logger.debug("stale load callback for %s dropped", game_id)
            return
        entry.lifecycle.finish_loading()

    def on_surface_message(self, game_id: str, raw_payload: Any) -> None:
        if game_id not in self._entries:
            logger.debug("stale message from %s dropped", game_id)
            return

        data = decode_surface_message(raw_payload)
        if data is None:
            logger.debug("malformed message from %s dropped", game_id)
            return

        if self._on_message is None:
            return
        try:
            self._on_message(game_id, data)
        except Exception:
            logger.exception("message handler failed for surface %s", game_id)

    # -- internals ------------------------------------------------------------

    def _allow_request(self, url: str) -> bool:
        return allow(url, blocked=self._blocked)

    def _from_surface(self, game_id: str, lifecycle: SurfaceLifecycle, callback, *args: Any) -> None:
        # A surface evicted and re-admitted under the same id must not feed the new entry.
        entry = self._entries.get(game_id)
        if entry is None or entry.lifecycle is not lifecycle:
            logger.debug("callback from released surface %s dropped", game_id)
            return
        callback(game_id, *args)

    def _pick_victim(self) -> str:
        for game_id in self._entries:
            if game_id != self._active_id:
                return game_id
        # Only reachable with capacity 1 and the single entry active.
        return next(iter(self._entries))

    def _evict(self, game_id: str) -> None:
        # Drop from tracking first: any callback arriving later is stale.
        entry = self._entries.pop(game_id)
        if game_id == self._active_id:
            self._active_id = None
        entry.lifecycle.release()
        try:
            entry.surface.release()
        except Exception:
            logger.exception("surface %s failed to release", game_id)
        logger.info("evicted surface %s", game_id)

    def _send(self, entry: PoolEntry, script: str) -> None:
        try:
            entry.surface.inject(script)
        except Exception:
            logger.exception("surface %s rejected an instruction", entry.id)


