from __future__ import annotations

import pytest

from playfeed.settings import DEFAULT_GAMES_HOST, PoolSettings, settings_from_env


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PLAYFEED_POOL_CAPACITY",
        "PLAYFEED_SCROLL_MODE",
        "PLAYFEED_LOOKAHEAD",
        "PLAYFEED_GAMES_HOST",
        "PLAYFEED_VIEWPORT",
        "PLAYFEED_EXTRA_BLOCKED",
    ):
        monkeypatch.delenv(name, raising=False)

    s = settings_from_env()
    assert s.capacity == 4
    assert s.scroll_mode is True
    assert s.lookahead == 3
    assert s.games_host == DEFAULT_GAMES_HOST
    assert (s.viewport_width, s.viewport_height) == (390, 844)
    assert s.extra_blocked_fragments == ()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLAYFEED_POOL_CAPACITY", "6")
    monkeypatch.setenv("PLAYFEED_SCROLL_MODE", "false")
    monkeypatch.setenv("PLAYFEED_GAMES_HOST", "https://games.example/")
    monkeypatch.setenv("PLAYFEED_VIEWPORT", "360x640")
    monkeypatch.setenv("PLAYFEED_EXTRA_BLOCKED", "tracker.example, ads.example")

    s = settings_from_env()
    assert s.capacity == 6
    assert s.scroll_mode is False
    assert s.games_host == "https://games.example"
    assert (s.viewport_width, s.viewport_height) == (360, 640)
    assert s.extra_blocked_fragments == ("tracker.example", "ads.example")


@pytest.mark.parametrize("raw", ["0", "-2", "four"])
def test_bad_capacity_is_rejected(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("PLAYFEED_POOL_CAPACITY", raw)
    with pytest.raises(ValueError):
        settings_from_env()


def test_direct_construction_validates() -> None:
    with pytest.raises(ValueError):
        PoolSettings(lookahead=-1)
    with pytest.raises(ValueError):
        PoolSettings(viewport_width=0)


def test_lookahead_must_fit_in_the_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValueError):
        PoolSettings(capacity=2, lookahead=10)
    with pytest.raises(ValueError):
        PoolSettings(capacity=4, lookahead=4)
    assert PoolSettings(capacity=4, lookahead=3).lookahead == 3

    monkeypatch.setenv("PLAYFEED_POOL_CAPACITY", "2")
    monkeypatch.setenv("PLAYFEED_LOOKAHEAD", "5")
    with pytest.raises(ValueError):
        settings_from_env()
