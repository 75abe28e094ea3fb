from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, cast

import redis

from playfeed.api.models import BestScore
from playfeed.events import GameOverEvent
from playfeed.relay import parse_game_event


BEST_SCORES_KEY = "playfeed:best_scores"


def events_key(game_id: str) -> str:
    return f"surface:{game_id}:events"


def record_surface_message(*, r: redis.Redis, game_id: str, data: dict[str, Any]) -> str:
    """Append a relayed message to the surface's event stream.

    A `gameOver` with a positive score also updates the best score for the id.
    Returns the stream entry id.
    """

    fields = {
        "type": str(data.get("type", "")),
        "game_id": game_id,
        "data": json.dumps(data, separators=(",", ":"), default=str),
        "ts": datetime.now(tz=UTC).isoformat(),
    }
    stream_id = r.xadd(events_key(game_id), fields)

    event = parse_game_event(data)
    if isinstance(event, GameOverEvent) and event.score > 0:
        submit_score(r=r, game_id=game_id, score=float(event.score))

    return cast(str, stream_id)


def submit_score(*, r: redis.Redis, game_id: str, score: float) -> bool:
    """Keep the higher of the stored and the submitted score. Returns True on improvement."""

    current = r.zscore(BEST_SCORES_KEY, game_id)
    if current is not None and float(current) >= score:
        return False
    r.zadd(BEST_SCORES_KEY, {game_id: score})
    return True


def get_best_score(*, r: redis.Redis, game_id: str) -> float | None:
    raw = r.zscore(BEST_SCORES_KEY, game_id)
    return None if raw is None else float(raw)


def list_best_scores(*, r: redis.Redis, limit: int = 10) -> list[BestScore]:
    rows = r.zrevrange(BEST_SCORES_KEY, 0, limit - 1, withscores=True)
    return [BestScore(game_id=str(gid), score=float(score)) for gid, score in rows]


def read_surface_events(*, r: redis.Redis, game_id: str, count: int = 20) -> list[dict[str, Any]]:
    entries = r.xrange(events_key(game_id), count=count)
    out: list[dict[str, Any]] = []
    for entry_id, fields in entries:
        try:
            data = json.loads(fields.get("data", "{}"))
        except ValueError:
            data = {}
        out.append({"id": entry_id, "type": fields.get("type", ""), "ts": fields.get("ts"), "data": data})
    return out
