"""Solver-driven autoplay, benchmarking and text formatting tools."""

import logging
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .config import DIFFICULTY_LEVELS
from .engine import GameEngine
from .errors import RegionTooLargeError
from .solver import DEFAULT_MAX_REGION_VARIABLES, FieldSolver
from .types import FieldConfig, GameParams, GameSnapshot, GameStatus, MineProbability, Position

logger = logging.getLogger(__name__)

REVEAL = "reveal"
FLAG = "flag"

Move = Tuple[str, Position, str]


def format_snapshot(snapshot: GameSnapshot, *, reveal_all: bool = False) -> str:
    """
    Render a snapshot as a multi-line string.

    Args:
        snapshot: Board snapshot to draw.
        reveal_all: If True, show mines and numbers under closed cells.

    Returns:
        A text grid with column labels on top and row labels on the left.
        Closed cells are '.', flags 'F', mines 'M' and exploded mines '!'.
    """
    cols = len(snapshot.field[0]) if snapshot.field else 0

    def cell_str(cell: Any) -> str:
        if cell.is_exploded:
            return "!"
        if cell.is_revealed or reveal_all:
            if cell.is_mine:
                return "M"
            return str(cell.adjacent_mines)
        if cell.is_flagged:
            return "F"
        return "."

    out = ["   " + " ".join(f"{c:2d}" for c in range(cols))]
    out.append("   " + "-" * (3 * cols - 1))
    for r, row in enumerate(snapshot.field):
        out.append(f"{r:2d} |" + " ".join(f" {cell_str(cell)}" for cell in row))
    return "\n".join(out)


def format_probabilities(
    params: GameParams, probabilities: Sequence[MineProbability]
) -> str:
    """Render solver output as a grid of percentages; cells without an estimate are '.'."""
    by_position = {p.position: p.value for p in probabilities}
    lines: List[str] = []
    for row in range(params.rows):
        cells = []
        for col in range(params.cols):
            value = by_position.get(Position(row, col))
            cells.append("  ." if value is None else f"{round(value * 100):3d}")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def choose_move(
    snapshot: GameSnapshot,
    params: GameParams,
    probabilities: Sequence[MineProbability],
    rng: random.Random,
) -> Move:
    """
    Pick the next action for an autoplayer.

    Preference order: reveal a provably safe cell, flag a provably mined
    cell, reveal the untouched cell with the lowest mine probability. Cells
    the solver has no estimate for are priced at the density of the mines
    left among them.

    Returns:
        (action, position, method) where action is "reveal" or "flag" and
        method is "certain_safe", "certain_mine" or "guess".
    """
    untouched = [cell.position for row in snapshot.field for cell in row if cell.is_untouched]
    if not untouched:
        raise ValueError("No untouched cell left to play.")

    estimates = {p.position: p.value for p in probabilities}

    for position in untouched:
        if estimates.get(position) == 0:
            return REVEAL, position, "certain_safe"

    if len(snapshot.flagged_cells) < params.mines:
        for position in untouched:
            if estimates.get(position) == 1:
                return FLAG, position, "certain_mine"

    unknown = [p for p in untouched if p not in estimates]
    expected_on_frontier = sum(estimates.get(p, 0.0) for p in untouched)
    mines_left = params.mines - len(snapshot.flagged_cells) - expected_on_frontier
    density = max(mines_left, 0.0) / len(unknown) if unknown else 1.0

    costs = np.array([estimates.get(p, density) for p in untouched], dtype=float)
    best = np.flatnonzero(np.isclose(costs, costs.min()))
    return REVEAL, untouched[int(rng.choice(list(best)))], "guess"


def run_solver_single_test(
    rows: int,
    cols: int,
    mines: int,
    *,
    seed: Optional[int] = None,
    max_region_variables: Optional[int] = DEFAULT_MAX_REGION_VARIABLES,
    show_boards: bool = False,
) -> Dict[str, Any]:
    """
    Play one game to the end, letting the solver pick every move.

    Each turn the solver is built from the saved cell grid of the current
    snapshot, the same way a client would restore a game.

    Args:
        rows: Board height.
        cols: Board width.
        mines: Total number of mines.
        seed: Seed for both mine placement and guess tie-breaking.
        max_region_variables: Region enumeration ceiling; regions over it
            fall back to local inference for that turn.
        show_boards: If True, print the final board.

    Returns:
        Payload with "status" ("won" or "lost") and move counters.
    """
    rng = random.Random(seed)
    params = GameParams(rows=rows, cols=cols, mines=mines)
    engine = GameEngine(params, rng=rng.random, lazy_mines=True)

    counters = {
        "reveal_moves_count": 0,
        "flag_moves_count": 0,
        "certain_moves_count": 0,
        "guesses_count": 0,
        "region_overflow_count": 0,
    }

    while not engine.status.is_terminal:
        snapshot = engine.game_snapshot
        solver = FieldSolver.from_config(
            FieldConfig(params=params, data=snapshot.field),
            max_region_variables=max_region_variables,
        )
        try:
            probabilities = solver.solve()
        except RegionTooLargeError as error:
            logger.debug("Falling back to local inference: %s", error)
            counters["region_overflow_count"] += 1
            probabilities = solver.solve(exhaustive=False)

        action, position, method = choose_move(snapshot, params, probabilities, rng)
        if action == FLAG:
            engine.toggle_flag(position).apply()
            counters["flag_moves_count"] += 1
        else:
            engine.reveal_cell(position).apply()
            counters["reveal_moves_count"] += 1

        if method == "guess":
            counters["guesses_count"] += 1
        else:
            counters["certain_moves_count"] += 1

    final = engine.game_snapshot
    if show_boards:
        print(format_snapshot(final, reveal_all=True))
        print(f"\nFinished with status {final.status.value}.")

    payload: Dict[str, Any] = dict(counters)
    payload["status"] = final.status.value
    payload["revealed_cells_count"] = len(final.revealed_cells)
    return payload


def run_solver_many_tests(
    rows: int,
    cols: int,
    mines: int,
    runs: int,
    *,
    seed: Optional[int] = None,
    max_region_variables: Optional[int] = DEFAULT_MAX_REGION_VARIABLES,
) -> Dict[str, float]:
    """
    Run many independent autoplayed games and return averaged counters plus win rate.

    Returns:
        "avg_<counter>" for every numeric payload counter, "win_rate", and
        "guess_failure_rate" (losses per guess).
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    seeder = random.Random(seed)
    payloads = [
        run_solver_single_test(
            rows,
            cols,
            mines,
            seed=seeder.randrange(2**32),
            max_region_variables=max_region_variables,
        )
        for _ in range(runs)
    ]

    keys = [k for k, v in payloads[0].items() if isinstance(v, int) and not isinstance(v, bool)]
    table = np.array([[p[k] for k in keys] for p in payloads], dtype=float)
    out: Dict[str, float] = {
        f"avg_{k}": float(v) for k, v in zip(keys, table.mean(axis=0))
    }

    wins = sum(1 for p in payloads if p["status"] == GameStatus.WON.value)
    out["win_rate"] = wins / runs

    total_guesses = float(sum(p["guesses_count"] for p in payloads))
    losses = runs - wins
    out["guess_failure_rate"] = losses / total_guesses if total_guesses > 0 else 0.0
    return out


def run_solver_level_analysis(
    runs: int,
    *,
    seed: Optional[int] = None,
    max_region_variables: Optional[int] = DEFAULT_MAX_REGION_VARIABLES,
    levels: Optional[Mapping[str, Tuple[int, int, int]]] = None,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Benchmark the autoplayer on difficulty levels and plot summaries.

    Args:
        runs: Games per level.
        seed: Seed for the whole benchmark.
        max_region_variables: Region enumeration ceiling.
        levels: name -> (rows, cols, mines); defaults to the standard levels.
        show: Display the charts; when False the figures are closed.

    Returns:
        Mapping from level name to the statistics of run_solver_many_tests().
    """
    levels = dict(levels or DIFFICULTY_LEVELS)
    results: Dict[str, Dict[str, float]] = {}
    for level, (rows, cols, mines) in levels.items():
        logger.info("Benchmarking %s (%dx%d, %d mines)", level, rows, cols, mines)
        results[level] = run_solver_many_tests(
            rows,
            cols,
            mines,
            runs,
            seed=seed,
            max_region_variables=max_region_variables,
        )

    level_names = list(levels)
    x = np.arange(len(level_names))

    # 1) Win rate by level
    win_rates = [results[n]["win_rate"] for n in level_names]
    fig_win = plt.figure()  # type: ignore[misc]
    plt.bar(x, win_rates)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Win rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Win rate by difficulty level")  # type: ignore[misc]
    plt.tight_layout()

    # 2) Certain moves versus guesses
    bar_w = 0.35
    certain = [results[n]["avg_certain_moves_count"] for n in level_names]
    guesses = [results[n]["avg_guesses_count"] for n in level_names]
    fig_moves = plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, certain, width=bar_w, label="certain")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, guesses, width=bar_w, label="guess")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average moves per game")  # type: ignore[misc]
    plt.title("Certain moves and guesses (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]
    else:
        plt.close(fig_win)
        plt.close(fig_moves)

    return results
