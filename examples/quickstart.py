"""
Quickstart example for minefield.

This script demonstrates the engine, the solver and the benchmark helpers.
"""

from minefield import (
    FieldConfig,
    FieldSolver,
    GameEngine,
    Position,
    configure_logging,
    format_probabilities,
    format_snapshot,
    params_for_level,
    run_solver_many_tests,
)


def main():
    configure_logging()

    print("=" * 60)
    print("Minefield - Quickstart Example")
    print("=" * 60)

    # Example 1: Play a few moves by hand
    print("\n1. Revealing the centre of a Beginner board (9x9, 10 mines)...")
    print("-" * 60)

    params = params_for_level("beginner")
    engine = GameEngine(params)

    result = engine.reveal_cell(Position(4, 4))
    changes = result.data.action_changes
    print(f"Preview: {len(changes.revealed_cells)} cells would open, "
          f"status would be {result.data.action_snapshot.status.value}")
    print(f"Engine status before commit: {engine.status.value}")
    result.apply()
    print(f"Engine status after commit: {engine.status.value}")
    print(format_snapshot(engine.game_snapshot))

    # Example 2: Ask the solver about the current board
    print("\n2. Mine probabilities (percent) on the saved board:")
    print("-" * 60)

    snapshot = engine.game_snapshot
    solver = FieldSolver.from_config(FieldConfig(params=params, data=snapshot.field))
    probabilities = solver.solve()
    print(format_probabilities(params, probabilities))
    print(f"Guessing state: {solver.is_guessing_state()}")

    # Example 3: Let the solver play many games
    print("\n3. Running 20 autoplayed Beginner games...")
    print("-" * 60)

    results = run_solver_many_tests(9, 9, 10, runs=20, seed=7)
    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average reveal moves per game: {results['avg_reveal_moves_count']:.1f}")
    print(f"Average guesses per game: {results['avg_guesses_count']:.1f}")

    print("\n" + "=" * 60)
    print("Done! See README.md for more detailed usage instructions.")
    print("=" * 60)


if __name__ == "__main__":
    main()
