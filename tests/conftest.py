"""
Pytest configuration and shared fixtures.
"""
import itertools
from typing import Callable, Iterable, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")

import pytest

from minefield import GameEngine, GameParams, Position, SquareField


def rng_for(rows: int, cols: int, mines_at: Iterable[Tuple[int, int]]) -> Callable[[], float]:
    """Random source that makes rejection sampling pick exactly ``mines_at``, in order."""
    values = []
    for row, col in mines_at:
        values.append((col + 0.5) / cols)
        values.append((row + 0.5) / rows)
    if not values:
        values = [0.0]
    source = itertools.cycle(values)
    return lambda: next(source)


def count_mined_neighbors(field: SquareField, position: Position) -> int:
    return sum(1 for sibling in field.neighbors(position) if sibling.is_mine)


def assert_invariants(field: SquareField) -> None:
    """Adjacent counts match live mines, and the mine total matches the params."""
    for cell in field.cells():
        assert cell.adjacent_mines == count_mined_neighbors(field, cell.position)
    if field.mines_placed:
        assert sum(1 for cell in field.cells() if cell.is_mine) == field.params.mines


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def make_field() -> Callable[..., SquareField]:
    """Build a square field with mines at fixed positions, optionally revealing cells."""

    def _make(
        rows: int,
        cols: int,
        mines_at: Sequence[Tuple[int, int]],
        revealed: Iterable[Tuple[int, int]] = (),
    ) -> SquareField:
        field = SquareField(
            GameParams(rows=rows, cols=cols, mines=len(mines_at)),
            rng=rng_for(rows, cols, mines_at),
        )
        field.place_mines()
        for row, col in revealed:
            field.cell(Position(row, col)).is_revealed = True
        return field

    return _make


@pytest.fixture
def make_engine() -> Callable[..., GameEngine]:
    """Build an engine whose mines sit at fixed positions."""

    def _make(rows: int, cols: int, mines_at: Sequence[Tuple[int, int]]) -> GameEngine:
        return GameEngine(
            GameParams(rows=rows, cols=cols, mines=len(mines_at)),
            rng=rng_for(rows, cols, mines_at),
        )

    return _make
