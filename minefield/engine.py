"""Game engine: turn legality, chording, win/loss and preview/commit of actions."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .field import SQUARE, Field, create_field
from .types import (
    ActionChanges,
    ActionData,
    CellData,
    FieldConfig,
    FieldState,
    GameParams,
    GameSnapshot,
    GameStatus,
    Position,
    RandomSource,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineState:
    """The three values the engine commits together."""

    field: Field
    status: GameStatus
    flags_remaining: int


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one action against an :class:`EngineState`."""

    state: EngineState
    snapshot: GameSnapshot
    changes: ActionChanges


@dataclass
class _Delta:
    handled: List[CellData] = field(default_factory=list)
    flagged: List[CellData] = field(default_factory=list)
    unflagged: List[CellData] = field(default_factory=list)
    revealed: List[CellData] = field(default_factory=list)
    exploded: List[CellData] = field(default_factory=list)

    def freeze(self, target: CellData) -> ActionChanges:
        return ActionChanges(
            target=target,
            handled_cells=tuple(self.handled),
            flagged_cells=tuple(self.flagged),
            unflagged_cells=tuple(self.unflagged),
            revealed_cells=tuple(self.revealed),
            exploded_cells=tuple(self.exploded),
        )


def determine_status(state: FieldState, params: GameParams) -> GameStatus:
    """LOST on any exploded cell, WON once every safe cell is revealed, else PLAYING."""
    if state.exploded_cells:
        return GameStatus.LOST
    if len(state.revealed_cells) == params.safe_cells_count:
        return GameStatus.WON
    return GameStatus.PLAYING


def count_flags_remaining(state: FieldState, params: GameParams) -> int:
    return params.mines - len(state.flagged_cells)


def _open_area(board: Field, position: Position, delta: _Delta) -> None:
    """Flood-fill reveal from ``position``, clearing flags on every cell it opens."""
    for cell in board.area_to_reveal(position):
        cell_data = cell.data()
        if cell.is_flagged:
            cell.is_flagged = False
            delta.unflagged.append(cell_data)
        if not cell.is_revealed:
            cell.is_revealed = True
            delta.revealed.append(cell_data)


def _chord(board: Field, position: Position, delta: _Delta) -> None:
    """Open every untouched neighbor of a revealed cell if its flags match its number."""
    target = board.cell(position)
    siblings = board.neighbors(position)
    flags = sum(1 for sibling in siblings if sibling.is_flagged)
    if flags != target.adjacent_mines:
        return

    delta.handled.extend(sibling.data() for sibling in siblings if sibling.is_untouched)

    for sibling in siblings:
        if sibling.is_flagged or sibling.is_revealed:
            continue
        if sibling.is_mine:
            delta.exploded.append(sibling.data())
            sibling.is_revealed = True
        else:
            _open_area(board, sibling.position, delta)


def _first_safe_cell(board: Field) -> Optional[Position]:
    for cell in board.cells():
        if not cell.is_mine:
            return cell.position
    return None


def resolve_reveal(
    state: EngineState, params: GameParams, position: Position
) -> Resolution:
    """
    Compute what revealing ``position`` would do, without touching ``state``.

    Args:
        state: Committed engine state to start from.
        params: Board parameters of the game.
        position: Cell the player clicked.

    Returns:
        The hypothetical next state, its snapshot and the cells that changed.
        Illegal reveals (flagged target, mismatched chord, finished game)
        resolve to an unchanged snapshot with an empty delta.

    Raises:
        ValueError: If ``position`` is outside the board.
    """
    position = Position(*position)
    working = state.field.clone()
    status = state.status
    delta = _Delta()
    target = working.cell(position)

    if status is GameStatus.IDLE:
        if not working.mines_placed:
            working.place_mines()
        if target.is_mine:
            safe = _first_safe_cell(working)
            if safe is None:
                raise RuntimeError("No safe cell left to move the first mine to.")
            working.relocate_mine(position, safe)
        status = GameStatus.PLAYING

    target_data = target.data()

    if status is GameStatus.PLAYING and not target.is_flagged:
        if target.is_mine:
            target.is_revealed = True
            delta.handled.append(target_data)
            delta.exploded.append(target_data)
        elif target.is_revealed:
            _chord(working, position, delta)
        else:
            delta.handled.append(target_data)
            _open_area(working, position, delta)

    field_state = working.state()
    if status is GameStatus.PLAYING:
        status = determine_status(field_state, params)

    next_state = EngineState(
        field=working,
        status=status,
        flags_remaining=count_flags_remaining(field_state, params),
    )
    return Resolution(
        state=next_state,
        snapshot=GameSnapshot.from_state(field_state, status),
        changes=delta.freeze(target_data),
    )


def resolve_flag(
    state: EngineState, params: GameParams, position: Position
) -> Resolution:
    """
    Compute what toggling the flag on ``position`` would do, without touching ``state``.

    Flags can only change while the game is being played and only on
    unrevealed cells. Removing a flag is always allowed; placing one needs a
    flag left in the counter.

    Raises:
        ValueError: If ``position`` is outside the board.
    """
    position = Position(*position)
    working = state.field.clone()
    delta = _Delta()
    cell = working.cell(position)
    cell_data = cell.data()

    if state.status is GameStatus.PLAYING and not cell.is_revealed:
        if cell.is_flagged:
            cell.is_flagged = False
            delta.unflagged.append(cell_data)
        elif state.flags_remaining > 0:
            cell.is_flagged = True
            delta.flagged.append(cell_data)

    field_state = working.state()
    next_state = EngineState(
        field=working,
        status=state.status,
        flags_remaining=count_flags_remaining(field_state, params),
    )
    return Resolution(
        state=next_state,
        snapshot=GameSnapshot.from_state(field_state, state.status),
        changes=delta.freeze(cell_data),
    )


class ActionResult:
    """
    Preview of one action plus the means to commit it.

    ``data`` is what the board would look like after the action. Nothing in
    the engine changes until :meth:`apply` is called.
    """

    __slots__ = ("_engine", "_resolution")

    def __init__(self, engine: "GameEngine", resolution: Resolution) -> None:
        self._engine = engine
        self._resolution = resolution

    @property
    def data(self) -> ActionData:
        return ActionData(
            action_snapshot=self._resolution.snapshot,
            action_changes=self._resolution.changes,
        )

    @property
    def resolution(self) -> Resolution:
        return self._resolution

    def apply(self) -> None:
        self._engine.commit(self._resolution.state)


class GameEngine:
    """Holds one play session and resolves reveal/flag actions against it."""

    def __init__(
        self,
        params: GameParams,
        *,
        field_type: str = SQUARE,
        rng: Optional[RandomSource] = None,
        data: Optional[Sequence[Sequence[CellData]]] = None,
        lazy_mines: bool = False,
    ) -> None:
        """
        Start a new game, or resume a saved one.

        Args:
            params: Board dimensions and mine count.
            field_type: Board shape passed to the field factory.
            rng: Random source used for mine placement.
            data: Saved cell grid (``game_snapshot.field``) to resume from.
            lazy_mines: Place mines on the first reveal instead of now.

        Raises:
            ConfigurationError: If the params or the saved grid are invalid.
        """
        self.config = FieldConfig(
            params=params,
            field_type=field_type,
            rng=rng,
            data=data,
            lazy_mines=lazy_mines,
        )
        board = create_field(self.config)
        field_state = board.state()

        status = GameStatus.IDLE
        if field_state.revealed_cells:
            status = determine_status(field_state, params)

        self._state = EngineState(
            field=board,
            status=status,
            flags_remaining=count_flags_remaining(field_state, params),
        )

    @classmethod
    def from_config(cls, config: FieldConfig) -> "GameEngine":
        return cls(
            config.params,
            field_type=config.field_type,
            rng=config.rng,
            data=config.data,
            lazy_mines=config.lazy_mines,
        )

    @property
    def params(self) -> GameParams:
        return self.config.params

    @property
    def status(self) -> GameStatus:
        return self._state.status

    @property
    def flags_remaining(self) -> int:
        return self._state.flags_remaining

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def game_snapshot(self) -> GameSnapshot:
        state = self._state
        return GameSnapshot.from_state(state.field.state(), state.status)

    def reveal_cell(self, position: Position) -> ActionResult:
        return ActionResult(self, resolve_reveal(self._state, self.params, position))

    def toggle_flag(self, position: Position) -> ActionResult:
        return ActionResult(self, resolve_flag(self._state, self.params, position))

    def commit(self, state: EngineState) -> None:
        """Replace the held field, status and flag counter in one assignment."""
        previous = self._state.status
        self._state = state
        if state.status is not previous and state.status.is_terminal:
            logger.info("Game finished: %s", state.status.value)
        logger.debug(
            "Committed action: status=%s flags_remaining=%d",
            state.status.value,
            state.flags_remaining,
        )
