"""Mine probability solver: local deduction plus exhaustive per-region enumeration."""

import itertools
import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .errors import RegionTooLargeError
from .field import Field, create_field
from .types import CellData, FieldConfig, MineProbability, Position

logger = logging.getLogger(__name__)

# Unknown cells per region above which exhaustive enumeration is refused.
DEFAULT_MAX_REGION_VARIABLES = 24

# (unknown neighbors, mines still to place among them)
Constraint = Tuple[Tuple[Position, ...], int]


class FieldSolver:
    """
    Advisory solver over a board snapshot.

    The solver only reads revealed numbers and which cells are still closed;
    it never looks at hidden mines and never mutates the board it was given.

    The analysis runs in two stages:
    1. Local inference: the certain-mine and certain-safe rules are applied
       to every revealed number until a full pass finds nothing new.
    2. Region enumeration: frontier numbers sharing a closed neighbor are
       grouped into regions, and every mine assignment consistent with a
       region's numbers is enumerated to get per-cell mine probabilities.
    """

    def __init__(
        self,
        field: Field,
        *,
        max_region_variables: Optional[int] = DEFAULT_MAX_REGION_VARIABLES,
    ) -> None:
        """
        Args:
            field: Board to analyse; typically restored from a saved grid.
            max_region_variables: Largest number of unknown cells a region may
                have before enumeration is refused with
                :class:`RegionTooLargeError`. ``None`` removes the limit.
        """
        self.field: Field = field
        self.max_region_variables: Optional[int] = max_region_variables

    @classmethod
    def from_config(
        cls,
        config: FieldConfig,
        *,
        max_region_variables: Optional[int] = DEFAULT_MAX_REGION_VARIABLES,
    ) -> "FieldSolver":
        """Build the solver on its own board, independent of any running game."""
        return cls(create_field(config), max_region_variables=max_region_variables)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def solve(self, exhaustive: bool = True) -> List[MineProbability]:
        """
        Estimate the mine probability of every closed cell next to a revealed number.

        Args:
            exhaustive: Run region enumeration after local inference. With
                False only certain cells (0 or 1) are reported.

        Returns:
            Certain cells first, in the order they were deduced, then the
            remaining frontier cells in row-major order.

        Raises:
            RegionTooLargeError: If a region exceeds ``max_region_variables``.
        """
        probabilities: Dict[Position, float] = {}

        numbered = [
            cell for cell in self._revealed_cells() if not cell.is_empty
        ]
        changed = True
        while changed:
            mines_found = self._infer_certain_mines(numbered, probabilities)
            safes_found = self._infer_certain_safes(numbered, probabilities)
            changed = mines_found or safes_found

        if exhaustive:
            for position, value in self._infer_by_regions(probabilities):
                probabilities[position] = value

        return [MineProbability(position, value) for position, value in probabilities.items()]

    def probability_map(self) -> Dict[Position, float]:
        return {item.position: item.value for item in self.solve()}

    def is_guessing_state(self) -> bool:
        """True when no cell is provably safe, so the next reveal is a guess."""
        return all(item.value != 0 for item in self.solve())

    def connected_regions(self) -> List[List[CellData]]:
        """Regions of frontier cells, for inspection and debugging."""
        return [
            [self.field.cell_data(position) for position in region]
            for region in self._group_regions()
        ]

    # -------------------------------------------------------------------------
    # Local inference
    # -------------------------------------------------------------------------

    def _revealed_cells(self) -> List[CellData]:
        return [
            cell.data()
            for cell in self.field.cells()
            if cell.is_revealed and not cell.is_mine
        ]

    def _closed_neighbors(self, position: Position) -> List[Position]:
        return [
            sibling.position
            for sibling in self.field.neighbors(position)
            if not sibling.is_revealed
        ]

    def _hidden_mines(self, cell: CellData) -> int:
        """Mines around ``cell`` still under closed cells; exploded mines are already visible."""
        exploded = sum(
            1 for sibling in self.field.neighbors(cell.position) if sibling.is_exploded
        )
        return cell.adjacent_mines - exploded

    def _infer_certain_mines(
        self, cells: Sequence[CellData], probabilities: Dict[Position, float]
    ) -> bool:
        """
        If a number equals its closed neighbors minus the ones known safe,
        every closed neighbor not known safe is a mine.
        """
        updated = False
        for cell in cells:
            closed = self._closed_neighbors(cell.position)
            if not closed:
                continue

            known_safe = sum(1 for p in closed if probabilities.get(p) == 0)
            if self._hidden_mines(cell) != len(closed) - known_safe:
                continue

            for position in closed:
                if position in probabilities:
                    continue
                probabilities[position] = 1
                updated = True
        return updated

    def _infer_certain_safes(
        self, cells: Sequence[CellData], probabilities: Dict[Position, float]
    ) -> bool:
        """If a number is already met by known mines, every other closed neighbor is safe."""
        updated = False
        for cell in cells:
            closed = self._closed_neighbors(cell.position)
            if not closed:
                continue

            known_mines = sum(1 for p in closed if probabilities.get(p) == 1)
            if known_mines != self._hidden_mines(cell):
                continue

            for position in closed:
                if position in probabilities:
                    continue
                probabilities[position] = 0
                updated = True
        return updated

    # -------------------------------------------------------------------------
    # Region enumeration
    # -------------------------------------------------------------------------

    def _group_regions(self) -> List[List[Position]]:
        """
        Partition frontier cells into regions.

        Two revealed cells belong to the same region when they share at least
        one closed neighbor, transitively.
        """
        frontier: Dict[Position, List[Position]] = {}
        closed_to_numbers: Dict[Position, List[Position]] = {}
        for cell in self._revealed_cells():
            closed = self._closed_neighbors(cell.position)
            if not closed:
                continue
            frontier[cell.position] = closed
            for position in closed:
                closed_to_numbers.setdefault(position, []).append(cell.position)

        regions: List[List[Position]] = []
        seen: Set[Position] = set()

        for start in frontier:
            if start in seen:
                continue

            stack: List[Position] = [start]
            seen.add(start)
            region: List[Position] = []

            while stack:
                current = stack.pop()
                region.append(current)
                for closed in frontier[current]:
                    for other in closed_to_numbers[closed]:
                        if other not in seen:
                            seen.add(other)
                            stack.append(other)

            regions.append(sorted(region))

        return regions

    def _infer_by_regions(
        self, certain: Dict[Position, float]
    ) -> List[Tuple[Position, float]]:
        results: List[Tuple[Position, float]] = []

        for region in self._group_regions():
            constraints: List[Constraint] = []
            variables: Set[Position] = set()

            for position in region:
                cell = self.field.cell_data(position)
                closed = self._closed_neighbors(position)
                unknown = tuple(p for p in closed if p not in certain)
                known_mines = sum(1 for p in closed if certain.get(p) == 1)
                constraints.append((unknown, self._hidden_mines(cell) - known_mines))
                variables.update(unknown)

            if not variables:
                continue

            ordered = sorted(variables)
            if (
                self.max_region_variables is not None
                and len(ordered) > self.max_region_variables
            ):
                raise RegionTooLargeError(len(ordered), self.max_region_variables)

            solutions, mine_counts = self._enumerate_region(constraints)
            logger.debug(
                "Region of %d cells, %d unknowns: %d consistent assignments",
                len(region),
                len(ordered),
                solutions,
            )
            if solutions == 0:
                logger.warning(
                    "No consistent mine assignment for region starting at %s; skipping",
                    tuple(region[0]),
                )
                continue

            for position in ordered:
                results.append((position, mine_counts.get(position, 0) / solutions))

        return results

    @staticmethod
    def _enumerate_region(
        constraints: Sequence[Constraint],
    ) -> Tuple[int, Dict[Position, int]]:
        """
        Count assignments satisfying every constraint, and how often each cell is a mine.

        Each constraint fixes the cells it still leaves open, one combination
        of mines at a time, and the search backs off as soon as a constraint
        can no longer be met. Every variable belongs to some constraint, so
        the leaves are exactly the satisfying members of the full 2^n space.
        """
        assignment: Dict[Position, bool] = {}
        mine_counts: Dict[Position, int] = {}
        solutions = 0

        def dfs(i: int) -> None:
            nonlocal solutions

            if i == len(constraints):
                solutions += 1
                for position, is_mine in assignment.items():
                    if is_mine:
                        mine_counts[position] = mine_counts.get(position, 0) + 1
                return

            cells, expected = constraints[i]
            assigned_mines = 0
            unassigned: List[Position] = []
            for position in cells:
                value = assignment.get(position)
                if value is None:
                    unassigned.append(position)
                elif value:
                    assigned_mines += 1

            needed = expected - assigned_mines
            if needed < 0 or needed > len(unassigned):
                return

            for mines in itertools.combinations(unassigned, needed):
                chosen = set(mines)
                for position in unassigned:
                    assignment[position] = position in chosen
                dfs(i + 1)

            for position in unassigned:
                del assignment[position]

        dfs(0)
        return solutions, mine_counts
