"""Board model: mine placement, adjacency, flood fill and snapshots."""

import logging
import random
from collections import deque
from typing import Deque, Dict, Iterator, List, Optional, Protocol, Sequence, Set, Tuple

from .cell import Cell
from .errors import ConfigurationError
from .types import (
    CellData,
    FieldConfig,
    FieldState,
    GameParams,
    Grid,
    Position,
    RandomSource,
)
from .utils import create_grid, get_neighborhoods

logger = logging.getLogger(__name__)

SQUARE = "square"


class Field(Protocol):
    """
    Capability set every board shape provides.

    The game engine and the solver only talk to a board through this
    interface; shapes other than square plug in through :func:`create_field`.
    """

    params: GameParams
    mines_placed: bool

    def place_mines(self) -> None: ...

    def relocate_mine(self, source: Position, target: Position) -> None: ...

    def neighbors(self, position: Position) -> List[Cell]: ...

    def area_to_reveal(self, position: Position) -> List[Cell]: ...

    def clone(self) -> "Field": ...

    def state(self) -> FieldState: ...

    def cell(self, position: Position) -> Cell: ...

    def cell_data(self, position: Position) -> CellData: ...

    def cells(self) -> Iterator[Cell]: ...

    def data(self) -> Grid: ...


def summarize_cells(grid: Grid) -> FieldState:
    """Classify every cell of a snapshot grid in a single pass."""
    mined: List[CellData] = []
    flagged: List[CellData] = []
    revealed: List[CellData] = []
    exploded: List[CellData] = []
    error_flags: List[CellData] = []
    not_found: List[CellData] = []

    for row in grid:
        for cell in row:
            if cell.is_mine:
                mined.append(cell)
            if cell.is_flagged:
                flagged.append(cell)
            if cell.is_revealed:
                revealed.append(cell)
            if cell.is_exploded:
                exploded.append(cell)
            if cell.is_missed:
                error_flags.append(cell)
            if cell.not_found_mine:
                not_found.append(cell)

    return FieldState(
        field=grid,
        mined_cells=tuple(mined),
        flagged_cells=tuple(flagged),
        revealed_cells=tuple(revealed),
        exploded_cells=tuple(exploded),
        error_flags=tuple(error_flags),
        not_found_mines=tuple(not_found),
    )


class SquareField:
    """Rectangular board with 8-connected cells."""

    def __init__(
        self,
        params: GameParams,
        rng: Optional[RandomSource] = None,
        data: Optional[Sequence[Sequence[CellData]]] = None,
    ) -> None:
        """
        Build a fresh board, or restore one from a saved data grid.

        Args:
            params: Board dimensions and mine count (validated here).
            rng: Zero-argument callable returning floats in [0, 1); defaults
                to ``random.random``.
            data: Saved grid of :class:`CellData`, ``params.rows`` rows of
                ``params.cols`` cells. Adjacent-mine counts are recomputed
                from the saved mines.

        Raises:
            ConfigurationError: If params are invalid, the grid shape does not
                match them, or the grid holds mines but not ``params.mines``
                of them.
        """
        self.params: GameParams = params.validate()
        self.rng: RandomSource = rng if rng is not None else random.random
        self._neighborhoods: Dict[Position, Tuple[Position, ...]] = get_neighborhoods(
            params.rows, params.cols
        )
        self.grid: List[List[Cell]] = self._create_grid(data)
        mines_count = sum(1 for cell in self.cells() if cell.is_mine)
        if data is not None and mines_count and mines_count != params.mines:
            raise ConfigurationError(
                f"Restored grid holds {mines_count} mines, expected {params.mines}."
            )
        self.mines_placed: bool = mines_count > 0
        if data is not None:
            self._recount_adjacent()

    def _create_grid(
        self, data: Optional[Sequence[Sequence[CellData]]]
    ) -> List[List[Cell]]:
        rows, cols = self.params.rows, self.params.cols
        if data is None:
            return create_grid(rows, cols, Cell)

        if len(data) != rows or any(len(row) != cols for row in data):
            raise ConfigurationError(
                f"Restored grid does not match a {rows}x{cols} board."
            )
        grid: List[List[Cell]] = []
        for r, row in enumerate(data):
            grid_row: List[Cell] = []
            for c, cell_data in enumerate(row):
                if tuple(cell_data.position) != (r, c):
                    raise ConfigurationError(
                        f"Cell at ({r}, {c}) carries position {tuple(cell_data.position)}."
                    )
                grid_row.append(Cell.from_data(cell_data))
            grid.append(grid_row)
        return grid

    # -------------------------------------------------------------------------
    # Mines
    # -------------------------------------------------------------------------

    def place_mines(self) -> None:
        """
        Scatter ``params.mines`` mines by rejection sampling.

        Does nothing if the board already carries mines.
        """
        if self.mines_placed:
            return

        self.mines_placed = True
        rows, cols, mines = self.params.rows, self.params.cols, self.params.mines
        chosen: Set[Position] = set()

        while len(chosen) < mines:
            col = int(self.rng() * cols)
            row = int(self.rng() * rows)
            position = Position(row, col)
            if position in chosen:
                continue
            chosen.add(position)
            self._mine_cell(position)

        logger.debug("Placed %d mines on a %dx%d board", mines, rows, cols)

    def relocate_mine(self, source: Position, target: Position) -> None:
        """Move the mine at ``source`` to ``target``, keeping neighbor counts exact."""
        self._unmine_cell(source)
        self._mine_cell(target)
        logger.debug("Relocated mine from %s to %s", tuple(source), tuple(target))

    def _mine_cell(self, position: Position) -> None:
        self.cell(position).is_mine = True
        for sibling in self.neighbors(position):
            sibling.adjacent_mines += 1

    def _unmine_cell(self, position: Position) -> None:
        self.cell(position).is_mine = False
        for sibling in self.neighbors(position):
            sibling.adjacent_mines -= 1

    def _recount_adjacent(self) -> None:
        stale = 0
        for cell in self.cells():
            count = sum(1 for sibling in self.neighbors(cell.position) if sibling.is_mine)
            if cell.adjacent_mines != count:
                cell.adjacent_mines = count
                stale += 1
        if stale:
            logger.warning("Corrected %d stale adjacent-mine counts in restored grid", stale)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.params.rows and 0 <= col < self.params.cols

    def cell(self, position: Position) -> Cell:
        if not self.in_bounds(position):
            raise ValueError("Cell coordinates are outside the board.")
        row, col = position
        return self.grid[row][col]

    def cell_data(self, position: Position) -> CellData:
        return self.cell(position).data()

    def cells(self) -> Iterator[Cell]:
        """Iterate cells in row-major order."""
        for row in self.grid:
            yield from row

    def neighbors(self, position: Position) -> List[Cell]:
        if not self.in_bounds(position):
            raise ValueError("Cell coordinates are outside the board.")
        return [self.grid[r][c] for r, c in self._neighborhoods[Position(*position)]]

    def area_to_reveal(self, position: Position) -> List[Cell]:
        """
        Collect the cells a reveal at ``position`` opens.

        Breadth-first from ``position``; only empty cells are expanded, so the
        result is the connected empty region plus its numbered border. Reveal
        and flag state are ignored here; the caller decides what to do with
        each cell.
        """
        target = self.cell(position)
        if not target.is_empty:
            return [target]

        queue: Deque[Cell] = deque([target])
        visited: Set[Position] = {target.position}
        area: List[Cell] = []

        while queue:
            current = queue.popleft()
            area.append(current)
            if not current.is_empty:
                continue
            for sibling in self.neighbors(current.position):
                if sibling.position in visited:
                    continue
                visited.add(sibling.position)
                queue.append(sibling)

        return area

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def clone(self) -> "SquareField":
        """Return an independent deep copy sharing only params and rng."""
        copy = SquareField.__new__(SquareField)
        copy.params = self.params
        copy.rng = self.rng
        copy._neighborhoods = self._neighborhoods
        copy.grid = [[cell.copy() for cell in row] for row in self.grid]
        copy.mines_placed = self.mines_placed
        return copy

    def data(self) -> Grid:
        return tuple(tuple(cell.data() for cell in row) for row in self.grid)

    def state(self) -> FieldState:
        return summarize_cells(self.data())


_FIELD_TYPES = {SQUARE: SquareField}


def create_field(config: FieldConfig) -> Field:
    """
    Build a board for ``config``.

    Fresh boards get their mines immediately unless ``config.lazy_mines`` is
    set. Restored boards keep their saved state; a saved board without mines is
    seeded later by the engine on the first reveal.

    Raises:
        ConfigurationError: If the shape is unknown or the params are invalid.
    """
    field_cls = _FIELD_TYPES.get(config.field_type)
    if field_cls is None:
        raise ConfigurationError(
            f"Unknown field type {config.field_type!r}; "
            f"expected one of {sorted(_FIELD_TYPES)}."
        )

    field = field_cls(config.params, rng=config.rng, data=config.data)
    if config.data is None and not config.lazy_mines:
        field.place_mines()
    return field
