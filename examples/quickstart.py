"""
Quickstart example for the Minesweeper Deduction Solver.

This script demonstrates basic usage of the solver.
"""

from minesweeper_deduce import (
    Board,
    MinesweeperSolver,
    TurnResult,
    advance,
    format_solver_moves,
    run_solver_many_tests,
)


def main():
    print("=" * 60)
    print("Minesweeper Deduction Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game
    print("\n1. Solving a single Intermediate game (16x16, 40 mines)...")
    print("-" * 60)

    board = Board(size=16, mines_count=40, mines_generation_algorithm="safe_neighborhood_rule")
    solver = MinesweeperSolver(board)
    status, payload = solver.solve()

    result = {1: "WON", 0: "STUCK", -1: "LOST"}[status]
    print(f"Result: {result}")
    print(f"Turns: {payload['turns_count']}")
    print(f"Cells revealed: {payload['revealed_cells_count']}")
    print(f"Mines marked: {payload['markings_count']}")
    print(f"Heuristic actions: {payload['heuristic_count']}")
    print(f"Seeded conclusions: {payload['seed_count']}")
    print(f"Deduced actions: {payload['deduced_count']}")
    print(f"Derived facts: {payload['derived_facts_count']}")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(board.format_board(reveal_all=False))
    print("\nMoves:")
    print(format_solver_moves(payload["moves_sequence"]))

    # Example 3: Drive turns by hand with the bare engine (no heuristics)
    print("\n3. Turn-by-turn with advance() on a 8x8 board...")
    print("-" * 60)

    board = Board(size=8, mines_count=10)
    turns = 0
    while not board.complete() and advance(board) is TurnResult.ACTION_TAKEN:
        turns += 1
    print(board.format_board(reveal_all=False))
    print(f"{turns} turns, {'complete' if board.complete() else 'stuck'}")

    # Example 4: Run multiple games for statistics
    print("\n4. Running 50 games for outcome statistics...")
    print("-" * 60)

    results = run_solver_many_tests(size=16, mines_count=40, runs=50)

    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Stuck rate: {results['stuck_rate']*100:.1f}%")
    print(f"Average turns per game: {results['avg_turns_count']:.1f}")
    print(f"Share of deduced actions: {results['deduced_frac']*100:.1f}%")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
