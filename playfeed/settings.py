from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_POOL_CAPACITY = 4
DEFAULT_LOOKAHEAD = 3
DEFAULT_GAMES_HOST = "https://gametok-games.pages.dev"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _parse_viewport(raw: str) -> tuple[int, int]:
    w, sep, h = raw.lower().partition("x")
    if not sep:
        raise ValueError(f"PLAYFEED_VIEWPORT must look like 390x844, got {raw!r}")
    return int(w), int(h)


@dataclass(frozen=True, slots=True)
class PoolSettings:
    # Upper bound on simultaneously resident surfaces.
    capacity: int = DEFAULT_POOL_CAPACITY
    # While scrolling, even the active surface does not take input.
    scroll_mode: bool = True
    # How many feed items past the active one get preloaded.
    lookahead: int = DEFAULT_LOOKAHEAD
    games_host: str = DEFAULT_GAMES_HOST

    browser_engine: str = "chromium"
    headless: bool = True
    viewport_width: int = 390
    viewport_height: int = 844

    # Appended to the built-in deny-list of the request filter.
    extra_blocked_fragments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be a positive integer")
        if self.lookahead < 0:
            raise ValueError("lookahead must be >= 0")
        if self.lookahead >= self.capacity:
            raise ValueError("lookahead must be smaller than capacity")
        if self.viewport_width < 1 or self.viewport_height < 1:
            raise ValueError("viewport dimensions must be positive")


def settings_from_env() -> PoolSettings:
    width, height = _parse_viewport(os.environ.get("PLAYFEED_VIEWPORT", "390x844"))
    extra = os.environ.get("PLAYFEED_EXTRA_BLOCKED", "")
    return PoolSettings(
        capacity=_env_int("PLAYFEED_POOL_CAPACITY", DEFAULT_POOL_CAPACITY),
        scroll_mode=_env_flag("PLAYFEED_SCROLL_MODE", True),
        lookahead=_env_int("PLAYFEED_LOOKAHEAD", DEFAULT_LOOKAHEAD),
        games_host=os.environ.get("PLAYFEED_GAMES_HOST", DEFAULT_GAMES_HOST).rstrip("/"),
        browser_engine=os.environ.get("PLAYFEED_BROWSER", "chromium"),
        headless=_env_flag("PLAYFEED_HEADLESS", True),
        viewport_width=width,
        viewport_height=height,
        extra_blocked_fragments=tuple(s.strip() for s in extra.split(",") if s.strip()),
    )
