"""Value types shared by the field, the game engine and the solver."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple

from .errors import ConfigurationError

RandomSource = Callable[[], float]


class Position(NamedTuple):
    """Grid coordinate, 0-based."""

    row: int
    col: int


def create_key(position: Position) -> str:
    """Return the stable string key of a position ("col-row")."""
    return f"{position.col}-{position.row}"


def parse_key(key: str) -> Position:
    """Inverse of :func:`create_key`."""
    col, row = (int(part) for part in key.split("-"))
    return Position(row, col)


class GameStatus(str, Enum):
    """Lifecycle of one play session."""

    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (GameStatus.WON, GameStatus.LOST)


@dataclass(frozen=True)
class GameParams:
    """Board dimensions and mine count."""

    rows: int
    cols: int
    mines: int

    @property
    def cells_count(self) -> int:
        return self.rows * self.cols

    @property
    def safe_cells_count(self) -> int:
        return self.rows * self.cols - self.mines

    def validate(self) -> "GameParams":
        """
        Check that a board with these parameters can be played.

        Returns:
            self, so construction sites can chain the call.

        Raises:
            ConfigurationError: If a dimension is non-positive, the mine count
                is negative, or there is no room left for a safe first reveal.
        """
        if self.rows <= 0 or self.cols <= 0:
            raise ConfigurationError("rows and cols must be positive.")
        if self.mines < 0:
            raise ConfigurationError("mines must be non-negative.")
        if self.mines >= self.rows * self.cols:
            raise ConfigurationError(
                f"mines ({self.mines}) must be lower than the number of cells "
                f"({self.rows * self.cols}) so the first reveal can be safe."
            )
        return self


@dataclass(frozen=True)
class CellData:
    """Immutable copy of one cell, the only cell shape exposed outside a field."""

    position: Position
    is_mine: bool = False
    is_revealed: bool = False
    is_flagged: bool = False
    adjacent_mines: int = 0
    is_empty: bool = False
    is_exploded: bool = False
    is_missed: bool = False
    not_found_mine: bool = False
    is_untouched: bool = True

    @property
    def key(self) -> str:
        return create_key(self.position)

    def to_dict(self) -> Dict[str, Any]:
        """Plain, JSON-friendly form used for saving a board."""
        return {
            "key": self.key,
            "position": {"row": self.position.row, "col": self.position.col},
            "isMine": self.is_mine,
            "isRevealed": self.is_revealed,
            "isFlagged": self.is_flagged,
            "adjacentMines": self.adjacent_mines,
            "isEmpty": self.is_empty,
            "isExploded": self.is_exploded,
            "isMissed": self.is_missed,
            "notFoundMine": self.not_found_mine,
            "isUntouched": self.is_untouched,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CellData":
        """
        Rebuild a cell from :meth:`to_dict` output.

        Only the stored fields are read; derived predicates are recomputed.
        """
        pos = raw["position"]
        position = Position(int(pos["row"]), int(pos["col"]))
        is_mine = bool(raw.get("isMine", False))
        is_revealed = bool(raw.get("isRevealed", False))
        is_flagged = bool(raw.get("isFlagged", False))
        adjacent_mines = int(raw.get("adjacentMines", 0))
        return cls(
            position=position,
            is_mine=is_mine,
            is_revealed=is_revealed,
            is_flagged=is_flagged,
            adjacent_mines=adjacent_mines,
            is_empty=not is_mine and adjacent_mines == 0,
            is_exploded=is_mine and is_revealed,
            is_missed=is_flagged and not is_mine,
            not_found_mine=is_mine and not is_flagged,
            is_untouched=not is_revealed and not is_flagged,
        )


Grid = Tuple[Tuple[CellData, ...], ...]


def field_from_dicts(rows: Sequence[Sequence[Mapping[str, Any]]]) -> Grid:
    """Rebuild a saved grid from nested :meth:`CellData.to_dict` output."""
    return tuple(tuple(CellData.from_dict(raw) for raw in row) for row in rows)


@dataclass(frozen=True)
class FieldState:
    """Whole-board snapshot with cells grouped by category."""

    field: Grid
    mined_cells: Tuple[CellData, ...] = ()
    flagged_cells: Tuple[CellData, ...] = ()
    revealed_cells: Tuple[CellData, ...] = ()
    exploded_cells: Tuple[CellData, ...] = ()
    error_flags: Tuple[CellData, ...] = ()
    not_found_mines: Tuple[CellData, ...] = ()


@dataclass(frozen=True)
class GameSnapshot(FieldState):
    status: GameStatus = GameStatus.IDLE

    @classmethod
    def from_state(cls, state: FieldState, status: GameStatus) -> "GameSnapshot":
        return cls(
            field=state.field,
            mined_cells=state.mined_cells,
            flagged_cells=state.flagged_cells,
            revealed_cells=state.revealed_cells,
            exploded_cells=state.exploded_cells,
            error_flags=state.error_flags,
            not_found_mines=state.not_found_mines,
            status=status,
        )


@dataclass(frozen=True)
class ActionChanges:
    """Cells touched by one action, as they were before the action changed them."""

    target: CellData
    handled_cells: Tuple[CellData, ...] = ()
    flagged_cells: Tuple[CellData, ...] = ()
    unflagged_cells: Tuple[CellData, ...] = ()
    revealed_cells: Tuple[CellData, ...] = ()
    exploded_cells: Tuple[CellData, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.handled_cells
            or self.flagged_cells
            or self.unflagged_cells
            or self.revealed_cells
            or self.exploded_cells
        )


@dataclass(frozen=True)
class ActionData:
    action_snapshot: GameSnapshot
    action_changes: ActionChanges


class MineProbability(NamedTuple):
    position: Position
    value: float


@dataclass(frozen=True)
class FieldConfig:
    """
    Everything the field factory needs to build a board.

    Attributes:
        params: Board dimensions and mine count.
        field_type: Board shape; only "square" is implemented.
        rng: Zero-argument callable returning floats in [0, 1).
        data: Saved per-cell grid to restore instead of generating a board.
        lazy_mines: Defer mine placement until the first reveal.
    """

    params: GameParams
    field_type: str = "square"
    rng: Optional[RandomSource] = None
    data: Optional[Sequence[Sequence[CellData]]] = field(default=None, repr=False)
    lazy_mines: bool = False
