from __future__ import annotations

import time
from collections.abc import Sequence
from urllib.parse import quote

from playfeed.api.models import FeedGame, FeedItem
from playfeed.pool.manager import SurfacePoolManager
from playfeed.settings import DEFAULT_GAMES_HOST, DEFAULT_LOOKAHEAD


def build_game_url(game: FeedGame, *, games_host: str = DEFAULT_GAMES_HOST) -> str:
    host = games_host.rstrip("/")
    if game.embed_url:
        sep = "&" if "?" in game.embed_url else "?"
        return f"{game.embed_url}{sep}gd_sdk_referrer_url={quote(host, safe='')}"
    return f"{host}/{game.id}/"


def generate_feed(
    games: Sequence[FeedGame],
    *,
    count: int,
    start_index: int = 0,
    games_host: str = DEFAULT_GAMES_HOST,
    now_ms: int | None = None,
) -> list[FeedItem]:
    """Produce `count` feed items cycling through `games` from `start_index`.

    Unique ids embed the feed position and a timestamp, so the same game can
    appear many times in the feed with distinct surfaces.
    """

    if not games:
        raise ValueError("At least one game is required")
    if count < 0:
        raise ValueError("count must be >= 0")

    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    items: list[FeedItem] = []
    for i in range(count):
        position = start_index + i
        game = games[position % len(games)]
        items.append(
            FeedItem(
                unique_id=f"{game.id}-{position}-{stamp}",
                game_id=game.id,
                name=game.name,
                url=build_game_url(game, games_host=games_host),
            )
        )
    return items


def feed_window(items: Sequence[FeedItem], active_index: int, lookahead: int = DEFAULT_LOOKAHEAD) -> list[FeedItem]:
    """The active item followed by up to `lookahead` items after it."""

    if active_index < 0:
        raise ValueError("active_index must be >= 0")
    return list(items[active_index : active_index + lookahead + 1])


def sync_feed_window(
    pool: SurfacePoolManager,
    items: Sequence[FeedItem],
    active_index: int,
    *,
    lookahead: int = DEFAULT_LOOKAHEAD,
) -> FeedItem | None:
    """Activate the item at `active_index`, then preload the items after it.

    The current item is preloaded and made active first, so admitting the
    look-ahead items can never evict it. Look-ahead is capped at
    `pool.capacity - 1` so the window never evicts its own members.

    Returns the activated item, or None when the index is past the end of the
    feed or its surface could not be created.
    """

    window = feed_window(items, active_index, min(lookahead, pool.capacity - 1))
    if not window:
        return None

    current = window[0]
    pool.preload(current.unique_id, current.url)
    if current.unique_id not in pool:
        return None
    pool.set_active(current.unique_id)
    for item in window[1:]:
        pool.preload(item.unique_id, item.url)
    return current
