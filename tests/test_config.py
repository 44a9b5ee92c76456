import logging

import pytest

from minefield import (
    DIFFICULTY_LEVELS,
    ConfigurationError,
    GameEngine,
    GameParams,
    GameStatus,
    configure_logging,
    params_for_level,
)


@pytest.mark.parametrize("level", sorted(DIFFICULTY_LEVELS))
def test_every_level_builds_a_playable_game(level):
    params = params_for_level(level)
    engine = GameEngine(params)
    assert engine.status is GameStatus.IDLE
    assert engine.flags_remaining == params.mines
    assert len(engine.game_snapshot.mined_cells) == params.mines


def test_level_lookup_is_case_insensitive():
    assert params_for_level("Expert") == GameParams(rows=16, cols=30, mines=99)


def test_unknown_level_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        params_for_level("nightmare")


def test_configuration_errors_are_value_errors():
    with pytest.raises(ValueError):
        GameEngine(GameParams(rows=2, cols=2, mines=4))


def test_engine_rejects_unknown_field_types():
    with pytest.raises(ConfigurationError):
        GameEngine(GameParams(3, 3, 1), field_type="triangle")


def test_configure_logging_sets_the_root_level(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    configure_logging(logging.DEBUG)

    assert calls["level"] == logging.DEBUG
    assert "%(name)s" in calls["format"]
