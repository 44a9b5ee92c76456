"""Grid helpers shared by field implementations."""

import itertools
from typing import Callable, Dict, List, Tuple, TypeVar

from .types import Position

T = TypeVar("T")

Neighborhoods = Dict[Position, Tuple[Position, ...]]

# Row/column steps to the eight cells touching a square, in row-major order.
_SQUARE_STEPS = tuple(
    step for step in itertools.product((-1, 0, 1), repeat=2) if step != (0, 0)
)

_neighborhoods_by_shape: Dict[Tuple[int, int], Neighborhoods] = {}


def get_neighborhoods(rows: int, cols: int) -> Neighborhoods:
    """
    Adjacency table of a rows x cols square board.

    Every position maps to the positions touching it, edges and corners
    clipped. Tables are built once per board shape and shared by every
    field of that shape, so callers must not mutate them.
    """
    if rows <= 0 or cols <= 0:
        raise ValueError("Board dimensions must be positive.")

    shape = (rows, cols)
    if shape not in _neighborhoods_by_shape:
        _neighborhoods_by_shape[shape] = {
            Position(row, col): tuple(
                Position(row + dr, col + dc)
                for dr, dc in _SQUARE_STEPS
                if 0 <= row + dr < rows and 0 <= col + dc < cols
            )
            for row in range(rows)
            for col in range(cols)
        }
    return _neighborhoods_by_shape[shape]


def create_grid(
    rows: int, cols: int, factory: Callable[[Position], T]
) -> List[List[T]]:
    """Build a rows x cols nested list, calling ``factory`` once per position."""
    return [[factory(Position(row, col)) for col in range(cols)] for row in range(rows)]
