"""Messages posted by game payloads that the host understands."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class GameOverEvent(BaseModel):
    type: Literal["gameOver"]
    score: int | float


class ScoreEvent(BaseModel):
    type: Literal["score"]
    score: int | float


GameEvent = Annotated[GameOverEvent | ScoreEvent, Field(discriminator="type")]
