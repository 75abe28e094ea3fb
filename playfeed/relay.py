from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from pydantic import TypeAdapter, ValidationError

from playfeed.events import GameEvent, GameOverEvent, ScoreEvent


# Receives (surface id, decoded message).
MessageHandler = Callable[[str, dict[str, Any]], None]

_GAME_EVENT: TypeAdapter[GameOverEvent | ScoreEvent] = TypeAdapter(GameEvent)


def decode_surface_message(raw: Any) -> dict[str, Any] | None:
    """Decode a surface payload into a key-value message.

    Content is untrusted; anything that is not a JSON object (bad JSON, bare
    numbers, arrays, non-strings) yields None and is meant to be dropped.
    """

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(raw, str):
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return data


def parse_game_event(data: dict[str, Any]) -> GameOverEvent | ScoreEvent | None:
    """Recognise the score messages game payloads emit; None for anything else."""

    try:
        return _GAME_EVENT.validate_python(data)
    except ValidationError:
        return None
