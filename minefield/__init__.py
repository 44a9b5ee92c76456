"""
Minefield

A rules engine for the mine-finding grid puzzle:
- Field model: mine placement, adjacency, flood fill, snapshots
- Game engine: reveal, flag and chord actions with preview/commit
- Solver: local deduction plus exhaustive per-region probabilities
- Analysis: solver-driven autoplay and benchmarks
"""

from .analysis import (
    choose_move,
    format_probabilities,
    format_snapshot,
    run_solver_level_analysis,
    run_solver_many_tests,
    run_solver_single_test,
)
from .cell import Cell
from .config import DIFFICULTY_LEVELS, configure_logging, params_for_level
from .engine import ActionResult, EngineState, GameEngine, Resolution, resolve_flag, resolve_reveal
from .errors import ConfigurationError, MinefieldError, RegionTooLargeError
from .field import Field, SquareField, create_field
from .solver import DEFAULT_MAX_REGION_VARIABLES, FieldSolver
from .types import (
    ActionChanges,
    ActionData,
    CellData,
    FieldConfig,
    FieldState,
    GameParams,
    GameSnapshot,
    GameStatus,
    MineProbability,
    Position,
    field_from_dicts,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "GameEngine",
    "FieldSolver",
    "SquareField",
    "Field",
    "Cell",
    "create_field",
    # Actions
    "ActionResult",
    "EngineState",
    "Resolution",
    "resolve_reveal",
    "resolve_flag",
    # Value types
    "ActionChanges",
    "ActionData",
    "CellData",
    "FieldConfig",
    "FieldState",
    "GameParams",
    "GameSnapshot",
    "GameStatus",
    "MineProbability",
    "Position",
    "field_from_dicts",
    # Errors
    "MinefieldError",
    "ConfigurationError",
    "RegionTooLargeError",
    # Configuration
    "DIFFICULTY_LEVELS",
    "DEFAULT_MAX_REGION_VARIABLES",
    "params_for_level",
    "configure_logging",
    # Analysis functions
    "choose_move",
    "format_snapshot",
    "format_probabilities",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_level_analysis",
]
