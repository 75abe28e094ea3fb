from __future__ import annotations

import fakeredis
import pytest
from statemachine.exceptions import TransitionNotAllowed

from playfeed.events import GameOverEvent, ScoreEvent
from playfeed.pool.lifecycle import SurfaceLifecycle, SurfaceState
from playfeed.relay import decode_surface_message, parse_game_event
from playfeed.scores import (
    events_key,
    get_best_score,
    list_best_scores,
    read_surface_events,
    record_surface_message,
    submit_score,
)


def test_lifecycle_transitions() -> None:
    sm = SurfaceLifecycle("a")
    assert sm.surface_state == SurfaceState.loading
    assert sm.loaded is False

    sm.finish_loading()
    assert sm.loaded is True
    sm.finish_loading()
    assert sm.surface_state == SurfaceState.ready

    sm.begin_reload()
    assert sm.surface_state == SurfaceState.loading

    sm.release()
    assert sm.surface_state == SurfaceState.released
    assert sm.loaded is False


def test_released_is_final() -> None:
    sm = SurfaceLifecycle("a")
    sm.release()
    with pytest.raises(TransitionNotAllowed):
        sm.finish_loading()


def test_decode_and_parse() -> None:
    assert decode_surface_message('{"type":"gameOver","score":2450}') == {"type": "gameOver", "score": 2450}
    assert decode_surface_message(b'{"a": 1}') == {"a": 1}
    assert decode_surface_message("{not valid}") is None

    event = parse_game_event({"type": "gameOver", "score": 2450})
    assert isinstance(event, GameOverEvent)
    assert event.score == 2450
    assert isinstance(parse_game_event({"type": "score", "score": 3}), ScoreEvent)
    assert parse_game_event({"type": "levelUp"}) is None
    assert parse_game_event({"type": "gameOver", "score": "lots"}) is None


def test_record_surface_message_appends_to_stream() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    record_surface_message(r=r, game_id="stack-0-1", data={"type": "score", "score": 5})
    record_surface_message(r=r, game_id="stack-0-1", data={"type": "gameOver", "score": 120})

    entries = r.xrange(events_key("stack-0-1"))
    assert [f["type"] for _, f in entries] == ["score", "gameOver"]

    events = read_surface_events(r=r, game_id="stack-0-1")
    assert events[1]["data"] == {"type": "gameOver", "score": 120}
    assert get_best_score(r=r, game_id="stack-0-1") == 120.0


def test_only_positive_game_over_scores_count() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    record_surface_message(r=r, game_id="a", data={"type": "gameOver", "score": 0})
    record_surface_message(r=r, game_id="a", data={"type": "score", "score": 900})
    assert get_best_score(r=r, game_id="a") is None


def test_best_score_only_improves() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    assert submit_score(r=r, game_id="a", score=50) is True
    assert submit_score(r=r, game_id="a", score=20) is False
    assert submit_score(r=r, game_id="b", score=70) is True
    assert get_best_score(r=r, game_id="a") == 50.0

    top = list_best_scores(r=r, limit=5)
    assert [(s.game_id, s.score) for s in top] == [("b", 70.0), ("a", 50.0)]
