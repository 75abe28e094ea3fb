from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# Core models served as-is by the API.
from playfeed.events import GameEvent, GameOverEvent, ScoreEvent
from playfeed.pool.views import PoolEntryView, PoolSnapshot

__all__ = [
    "BestScore",
    "BestScoresResponse",
    "FeedGame",
    "FeedGenerateRequest",
    "FeedItem",
    "FeedResponse",
    "FeedWindowRequest",
    "GameEvent",
    "GameOverEvent",
    "InjectRequest",
    "LoadedResponse",
    "PoolEntryView",
    "PoolSnapshot",
    "PreloadRequest",
    "PreloadResponse",
    "RelayedMessage",
    "ScoreEvent",
    "ScrollModeRequest",
    "SurfaceMessageRequest",
]


class PreloadRequest(BaseModel):
    game_id: str = Field(..., min_length=1, max_length=256)
    url: str = Field(..., min_length=1)


class InjectRequest(BaseModel):
    script: str = Field(..., min_length=1)


class SurfaceMessageRequest(BaseModel):
    # Raw string exactly as the content posted it; decoding happens in the pool.
    payload: str


class ScrollModeRequest(BaseModel):
    enabled: bool


class LoadedResponse(BaseModel):
    game_id: str
    loaded: bool


class PreloadResponse(BaseModel):
    admitted: bool
    pool: PoolSnapshot


class RelayedMessage(BaseModel):
    type: Literal["surface_message"] = "surface_message"
    game_id: str
    data: dict[str, Any]


# Feed


class FeedGame(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    # Third-party hosted build; otherwise the game is served from the games host.
    embed_url: str | None = None


class FeedItem(BaseModel):
    unique_id: str
    game_id: str
    name: str = ""
    url: str


class FeedGenerateRequest(BaseModel):
    games: list[FeedGame] = Field(..., min_length=1)
    count: int = Field(10, ge=1, le=200)
    start_index: int = Field(0, ge=0)


class FeedWindowRequest(BaseModel):
    items: list[FeedItem]
    active_index: int = Field(..., ge=0)
    lookahead: int | None = Field(None, ge=0, le=20)


class FeedResponse(BaseModel):
    items: list[FeedItem]


# Scores


class BestScore(BaseModel):
    game_id: str
    score: float


class BestScoresResponse(BaseModel):
    scores: list[BestScore]
