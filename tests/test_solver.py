import logging
import random

import pytest

from minefield import (
    FieldConfig,
    FieldSolver,
    GameEngine,
    GameParams,
    MineProbability,
    Position,
    RegionTooLargeError,
)


def all_but(rows, cols, hidden):
    hidden = set(hidden)
    return [(r, c) for r in range(rows) for c in range(cols) if (r, c) not in hidden]


def test_local_rules_chain_mine_then_safe(make_field):
    # Mine at (0, 0); only (0, 0) and (0, 2) are closed.
    field = make_field(3, 3, [(0, 0)], revealed=all_but(3, 3, [(0, 0), (0, 2)]))
    solver = FieldSolver(field)

    result = solver.solve()

    assert result == [
        MineProbability(Position(0, 0), 1),
        MineProbability(Position(0, 2), 0),
    ]
    assert solver.solve(exhaustive=False) == result
    assert solver.is_guessing_state() is False


def test_single_number_spreads_probability_evenly(make_field):
    field = make_field(3, 3, [(0, 0)], revealed=[(1, 1)])
    solver = FieldSolver(field)

    probabilities = solver.probability_map()

    assert len(probabilities) == 8
    assert all(value == pytest.approx(1 / 8) for value in probabilities.values())
    assert solver.is_guessing_state() is True


def test_region_enumeration_finds_what_local_rules_miss(make_field):
    # Top row closed. The empty (1, 2) pins its closed neighbors to zero,
    # which only the enumeration takes into account.
    field = make_field(3, 3, [(0, 0)], revealed=all_but(3, 3, [(0, 0), (0, 1), (0, 2)]))
    solver = FieldSolver(field)

    assert solver.solve(exhaustive=False) == []
    assert solver.probability_map() == {
        Position(0, 0): 1,
        Position(0, 1): 0,
        Position(0, 2): 0,
    }
    assert solver.is_guessing_state() is False


def test_enumeration_weights_by_consistent_assignments(make_field):
    # 1x5 strip: mines at (0, 0) and (0, 4), numbers show 1 . 1 with one
    # shared closed cell in the middle.
    field = make_field(1, 5, [(0, 0), (0, 4)], revealed=[(0, 1), (0, 3)])
    solver = FieldSolver(field)

    probabilities = solver.probability_map()

    # Assignments: {0,4}, {2}. Cell 2 is a mine in one of two.
    assert probabilities[Position(0, 0)] == pytest.approx(0.5)
    assert probabilities[Position(0, 2)] == pytest.approx(0.5)
    assert probabilities[Position(0, 4)] == pytest.approx(0.5)


def test_regions_split_on_unshared_closed_cells(make_field):
    field = make_field(1, 7, [(0, 0), (0, 6)], revealed=[(0, c) for c in range(1, 6)])
    solver = FieldSolver(field)

    regions = solver.connected_regions()

    assert [[cell.position for cell in region] for region in regions] == [
        [Position(0, 1)],
        [Position(0, 5)],
    ]
    assert solver.probability_map() == {Position(0, 0): 1, Position(0, 6): 1}


def test_regions_join_through_shared_closed_cells(make_field):
    field = make_field(1, 5, [(0, 0), (0, 4)], revealed=[(0, 1), (0, 3)])
    regions = FieldSolver(field).connected_regions()
    assert len(regions) == 1
    assert {cell.position for cell in regions[0]} == {Position(0, 1), Position(0, 3)}


def test_oversized_region_fails_explicitly(make_field):
    field = make_field(3, 3, [(0, 0)], revealed=[(1, 1)])

    with pytest.raises(RegionTooLargeError) as excinfo:
        FieldSolver(field, max_region_variables=3).solve()

    assert excinfo.value.variables_count == 8
    assert excinfo.value.ceiling == 3
    assert len(FieldSolver(field, max_region_variables=None).solve()) == 8


def test_region_ceiling_is_keyword_only(make_field):
    field = make_field(3, 3, [(0, 0)], revealed=[(1, 1)])
    with pytest.raises(TypeError):
        FieldSolver(field, 3)


def test_inconsistent_region_is_skipped_with_a_warning(make_field, caplog):
    # A number no mine layout can satisfy: 2 with a single closed neighbor.
    field = make_field(1, 2, [], revealed=[(0, 0)])
    field.cell(Position(0, 0)).adjacent_mines = 2
    solver = FieldSolver(field)

    with caplog.at_level(logging.WARNING, logger="minefield.solver"):
        assert solver.solve() == []

    assert "No consistent mine assignment" in caplog.text


def test_exploded_mines_are_not_counted_again(make_field):
    # The "1" at (0, 1) is already explained by the exploded mine next to it.
    field = make_field(1, 3, [(0, 0)], revealed=[(0, 0), (0, 1)])
    solver = FieldSolver(field)

    assert solver.probability_map() == {Position(0, 2): 0}
    assert solver.is_guessing_state() is False


def test_lost_game_snapshot_gives_sound_estimates(make_engine):
    engine = make_engine(3, 4, [(0, 0), (2, 3)])
    engine.reveal_cell(Position(1, 1)).apply()
    engine.reveal_cell(Position(0, 0)).apply()
    snapshot = engine.game_snapshot
    assert snapshot.status.value == "lost"

    solver = FieldSolver.from_config(FieldConfig(params=engine.params, data=snapshot.field))
    mines = {cell.position for cell in snapshot.mined_cells}

    for item in solver.solve():
        if item.value == 1:
            assert item.position in mines
        if item.value == 0:
            assert item.position not in mines


def test_solver_on_a_saved_snapshot_leaves_the_game_alone(make_engine):
    engine = make_engine(4, 4, [(0, 0), (3, 3)])
    engine.reveal_cell(Position(0, 1)).apply()
    before = engine.game_snapshot

    solver = FieldSolver.from_config(FieldConfig(params=engine.params, data=before.field))
    solver.solve()

    assert engine.game_snapshot == before
    assert solver.field is not engine.state.field


def test_solver_never_contradicts_the_hidden_board():
    params = GameParams(rows=9, cols=9, mines=10)
    for seed in range(15):
        rng = random.Random(seed)
        engine = GameEngine(params, rng=rng.random)
        engine.reveal_cell(Position(4, 4)).apply()

        for _ in range(20):
            if engine.status.is_terminal:
                break
            snapshot = engine.game_snapshot
            mines = {cell.position for cell in snapshot.mined_cells}
            solver = FieldSolver.from_config(FieldConfig(params=params, data=snapshot.field))
            try:
                probabilities = solver.solve()
            except RegionTooLargeError:
                probabilities = solver.solve(exhaustive=False)

            for item in probabilities:
                assert 0 <= item.value <= 1
                if item.value == 0:
                    assert item.position not in mines
                if item.value == 1:
                    assert item.position in mines

            safe = [p.position for p in probabilities if p.value == 0]
            if not safe:
                break
            engine.reveal_cell(safe[0]).apply()
