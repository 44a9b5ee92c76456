"""Mutable cell record held inside a field."""

from .types import CellData, Position


class Cell:
    """One grid cell. Only the owning field mutates it; callers get :class:`CellData` copies."""

    __slots__ = ("position", "is_mine", "is_revealed", "is_flagged", "adjacent_mines")

    def __init__(
        self,
        position: Position,
        is_mine: bool = False,
        is_revealed: bool = False,
        is_flagged: bool = False,
        adjacent_mines: int = 0,
    ) -> None:
        self.position: Position = position
        self.is_mine: bool = is_mine
        self.is_revealed: bool = is_revealed
        self.is_flagged: bool = is_flagged
        self.adjacent_mines: int = adjacent_mines

    @classmethod
    def from_data(cls, data: CellData) -> "Cell":
        return cls(
            Position(*data.position),
            is_mine=data.is_mine,
            is_revealed=data.is_revealed,
            is_flagged=data.is_flagged,
            adjacent_mines=data.adjacent_mines,
        )

    @property
    def is_empty(self) -> bool:
        return not self.is_mine and self.adjacent_mines == 0

    @property
    def is_exploded(self) -> bool:
        return self.is_mine and self.is_revealed

    @property
    def is_missed(self) -> bool:
        return self.is_flagged and not self.is_mine

    @property
    def not_found_mine(self) -> bool:
        return self.is_mine and not self.is_flagged

    @property
    def is_untouched(self) -> bool:
        return not self.is_revealed and not self.is_flagged

    def copy(self) -> "Cell":
        return Cell(
            self.position,
            is_mine=self.is_mine,
            is_revealed=self.is_revealed,
            is_flagged=self.is_flagged,
            adjacent_mines=self.adjacent_mines,
        )

    def data(self) -> CellData:
        """Return an immutable snapshot of the cell with derived predicates filled in."""
        return CellData(
            position=self.position,
            is_mine=self.is_mine,
            is_revealed=self.is_revealed,
            is_flagged=self.is_flagged,
            adjacent_mines=self.adjacent_mines,
            is_empty=self.is_empty,
            is_exploded=self.is_exploded,
            is_missed=self.is_missed,
            not_found_mine=self.not_found_mine,
            is_untouched=self.is_untouched,
        )

    def __repr__(self) -> str:
        return (
            f"Cell({self.position.row}, {self.position.col}, mine={self.is_mine}, "
            f"revealed={self.is_revealed}, flagged={self.is_flagged}, "
            f"adjacent={self.adjacent_mines})"
        )
