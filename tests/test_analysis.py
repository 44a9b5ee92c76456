import random

import pytest

from minefield import (
    GameParams,
    MineProbability,
    Position,
    choose_move,
    format_probabilities,
    format_snapshot,
    run_solver_level_analysis,
    run_solver_many_tests,
    run_solver_single_test,
)


def test_format_snapshot_marks_closed_flagged_and_exploded_cells(make_engine):
    engine = make_engine(3, 3, [(0, 0)])
    engine.reveal_cell(Position(1, 1)).apply()
    engine.toggle_flag(Position(2, 2)).apply()

    text = format_snapshot(engine.game_snapshot)
    lines = text.splitlines()
    assert len(lines) == 5
    assert lines[3].endswith(" .  1  .")
    assert lines[4].endswith(" .  .  F")

    engine.reveal_cell(Position(0, 0)).apply()
    assert "!" in format_snapshot(engine.game_snapshot)
    full = format_snapshot(engine.game_snapshot, reveal_all=True).splitlines()
    assert full[2].endswith(" !  1  0")
    assert full[3].endswith(" 1  1  0")


def test_format_probabilities_prints_percentages():
    params = GameParams(rows=1, cols=3, mines=1)
    text = format_probabilities(params, [MineProbability(Position(0, 0), 0.5)])
    assert text == " 50   .   ."


def test_choose_move_prefers_certain_cells(make_engine):
    engine = make_engine(3, 3, [(0, 0)])
    engine.reveal_cell(Position(1, 1)).apply()
    snapshot = engine.game_snapshot
    rng = random.Random(0)

    safe = [MineProbability(Position(0, 1), 0), MineProbability(Position(0, 0), 1)]
    assert choose_move(snapshot, engine.params, safe, rng) == ("reveal", Position(0, 1), "certain_safe")

    mine = [MineProbability(Position(0, 0), 1)]
    assert choose_move(snapshot, engine.params, mine, rng) == ("flag", Position(0, 0), "certain_mine")


def test_choose_move_guesses_the_least_likely_cell(make_engine):
    engine = make_engine(3, 3, [(0, 0)])
    engine.reveal_cell(Position(1, 1)).apply()
    estimates = [
        MineProbability(Position(r, c), 0.9)
        for r in range(3) for c in range(3)
        if (r, c) not in {(1, 1), (2, 2)}
    ] + [MineProbability(Position(2, 2), 0.05)]

    action, position, method = choose_move(
        engine.game_snapshot, engine.params, estimates, random.Random(0)
    )

    assert (action, position, method) == ("reveal", Position(2, 2), "guess")


def test_single_autoplayed_game_reaches_the_end():
    payload = run_solver_single_test(6, 6, 5, seed=4)

    assert payload["status"] in ("won", "lost")
    moves = payload["reveal_moves_count"] + payload["flag_moves_count"]
    assert moves == payload["certain_moves_count"] + payload["guesses_count"]
    assert payload["guesses_count"] >= 1
    if payload["status"] == "won":
        assert payload["revealed_cells_count"] == 36 - 5


def test_easy_boards_are_always_won():
    results = run_solver_many_tests(5, 5, 1, runs=5, seed=1)
    assert results["win_rate"] == pytest.approx(1.0)
    assert results["guess_failure_rate"] == 0.0
    assert results["avg_guesses_count"] >= 1.0


def test_level_analysis_covers_every_level():
    results = run_solver_level_analysis(
        2, seed=3, levels={"tiny": (4, 4, 2), "small": (5, 6, 4)}, show=False
    )
    assert set(results) == {"tiny", "small"}
    for stats in results.values():
        assert 0.0 <= stats["win_rate"] <= 1.0
        assert "avg_reveal_moves_count" in stats
