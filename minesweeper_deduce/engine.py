"""Square Minesweeper board with first-click safety, flags and zero flood fill."""

import random
from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Sequence, Set, Tuple

from .errors import SolverError
from .utils import Coord, get_neighborhoods

if TYPE_CHECKING:
    from .solver import MinesweeperSolver

MINES_GENERATION_ALGORITHMS: Tuple[str, ...] = (
    "safe_first_action_rule",
    "safe_neighborhood_rule",
)


class Board:
    """Square Minesweeper board with first-click safety and constrained mine placement."""

    def __init__(
        self,
        size: int,
        mines_count: int,
        mines_generation_algorithm: str = "safe_neighborhood_rule",
    ) -> None:
        """
        Initialize an empty board; mines are placed on the first reveal.

        Args:
            size: Side length of the square grid, must be > 0.
            mines_count: Total number of mines to place, must be >= 0.
            mines_generation_algorithm: Mine placement rule; one of
                {"safe_first_action_rule", "safe_neighborhood_rule"}.

        Raises:
            ValueError: If dimensions are invalid, the algorithm is
                unrecognized, or the mines cannot fit.
        """
        if size <= 0:
            raise ValueError("Size must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")

        if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )

        reserved = 1 if mines_generation_algorithm == "safe_first_action_rule" else 9
        if mines_count > size * size - min(reserved, size * size):
            raise ValueError(
                f"Cannot place {mines_count} mines and satisfy {mines_generation_algorithm}."
            )

        self.size: int = size
        self.mines_count: int = mines_count
        self.mines_generation_algorithm: str = mines_generation_algorithm

        self._neighborhoods: Dict[Coord, Tuple[Coord, ...]] = get_neighborhoods(size)

        self.mines: List[List[bool]] = []
        self.flags: List[List[bool]] = []
        self.revealed: List[List[bool]] = []
        self.counts: List[List[int]] = []
        self.board_blank: bool = True
        self.reset()

    @classmethod
    def from_layout(cls, rows: Sequence[str]) -> "Board":
        """
        Build a board with a fixed mine layout.

        Args:
            rows: One string per row (top row first), "*" for a mine and any
                other character for an empty cell. Must be square.

        Returns:
            A board whose mines are already placed, so no lazy placement
            happens on the first reveal.
        """
        size = len(rows)
        if size == 0 or any(len(row) != size for row in rows):
            raise ValueError("Layout must be a non-empty square.")

        mines = [(x, y) for y, row in enumerate(rows) for x, c in enumerate(row) if c == "*"]
        board = cls(size, len(mines), mines_generation_algorithm="safe_first_action_rule")
        for x, y in mines:
            board.place_mine(x, y)
        return board

    def reset(self) -> None:
        """Clear the board; mines are placed again on the next first reveal."""
        n = self.size
        self.mines = [[False for _ in range(n)] for _ in range(n)]
        self.flags = [[False for _ in range(n)] for _ in range(n)]
        self.revealed = [[False for _ in range(n)] for _ in range(n)]
        self.counts = [[0 for _ in range(n)] for _ in range(n)]
        self.board_blank = True

    def _check(self, x: int, y: int) -> None:
        if x < 0 or x >= self.size or y < 0 or y >= self.size:
            raise ValueError("Cell coordinates are outside the board.")

    def neighbors(self, x: int, y: int) -> Tuple[Coord, ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[Coord(x, y)]

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    def has_mine(self, x: int, y: int) -> bool:
        return self.mines[y][x]

    def has_flag(self, x: int, y: int) -> bool:
        return self.flags[y][x]

    def is_revealed(self, x: int, y: int) -> bool:
        return self.revealed[y][x]

    def neighbor_mine_count(self, x: int, y: int) -> int:
        return self.counts[y][x]

    def has_reveals(self) -> bool:
        return any(any(row) for row in self.revealed)

    def has_revealed_mines(self) -> bool:
        """Whether any mine has been revealed (game loss)."""
        return any(
            self.mines[y][x] and self.revealed[y][x]
            for y in range(self.size)
            for x in range(self.size)
        )

    def complete(self) -> bool:
        """Whether every non-mine cell has been revealed."""
        return not self.board_blank and all(
            self.mines[y][x] or self.revealed[y][x]
            for y in range(self.size)
            for x in range(self.size)
        )

    def flags_count(self) -> int:
        return sum(sum(row) for row in self.flags)

    def unflagged_mines(self) -> int:
        """Number of mines not covered by a flag."""
        return sum(
            1
            for y in range(self.size)
            for x in range(self.size)
            if self.mines[y][x] and not self.flags[y][x]
        )

    def unknown_cells(self) -> List[Coord]:
        """Return every cell that is neither revealed nor flagged, row by row."""
        return [
            Coord(x, y)
            for y in range(self.size)
            for x in range(self.size)
            if not self.revealed[y][x] and not self.flags[y][x]
        ]

    def visible_grid(self) -> List[List[Optional[str]]]:
        """
        Snapshot of what a player can see.

        grid[y][x]:
            None     -> not revealed / not flagged
            "M"      -> flagged
            "X"      -> revealed mine
            "0".."8" -> revealed number (string)
        """
        grid: List[List[Optional[str]]] = []
        for y in range(self.size):
            row: List[Optional[str]] = []
            for x in range(self.size):
                if self.revealed[y][x]:
                    row.append("X" if self.mines[y][x] else str(self.counts[y][x]))
                elif self.flags[y][x]:
                    row.append("M")
                else:
                    row.append(None)
            grid.append(row)
        return grid

    # -------------------------------------------------------------------------
    # Mine placement
    # -------------------------------------------------------------------------

    def place_mine(self, x: int, y: int) -> None:
        """Place one mine and bump the counts of its neighbors."""
        self._check(x, y)
        if self.mines[y][x]:
            raise ValueError(f"Cell ({x}, {y}) already holds a mine.")
        self.mines[y][x] = True
        for nx, ny in self.neighbors(x, y):
            self.counts[ny][nx] += 1
        self.board_blank = False

    def place_mines(self, first_x: int, first_y: int) -> None:
        """
        Place all mines (one-time), respecting the selected first-move safety rule.

        Args:
            first_x: X-coordinate of the first revealed cell.
            first_y: Y-coordinate of the first revealed cell.

        Raises:
            ValueError: If the board is not blank.
        """
        if not self.board_blank:
            raise ValueError("The board is not blank.")

        safe: Set[Coord] = {Coord(first_x, first_y)}
        if self.mines_generation_algorithm == "safe_neighborhood_rule":
            safe.update(self.neighbors(first_x, first_y))

        eligible: List[Coord] = [
            Coord(x, y)
            for y in range(self.size)
            for x in range(self.size)
            if Coord(x, y) not in safe
        ]
        if self.mines_count > len(eligible):
            raise ValueError(
                f"Cannot place enough safe cells to satisfy {self.mines_generation_algorithm}."
            )

        for mx, my in random.sample(eligible, self.mines_count):
            self.place_mine(mx, my)

        self.board_blank = False

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def flood_fill(self, x: int, y: int) -> List[Coord]:
        """
        Reveal a connected region starting at (x, y) using Minesweeper flood fill rules.

        Flagged cells are never revealed by the fill.

        Returns:
            The newly revealed cells.
        """
        frontier: Deque[Coord] = deque([Coord(x, y)])
        visited: Set[Coord] = {Coord(x, y)}
        revealed_cells: List[Coord] = []

        while frontier:
            cell = frontier.popleft()
            cx, cy = cell
            if self.revealed[cy][cx]:
                continue

            self.revealed[cy][cx] = True
            revealed_cells.append(cell)

            if not self.mines[cy][cx] and self.counts[cy][cx] == 0:
                for n in self.neighbors(cx, cy):
                    if n in visited or self.revealed[n.y][n.x] or self.flags[n.y][n.x]:
                        continue
                    visited.add(n)
                    frontier.append(n)

        return revealed_cells

    def reveal(self, x: int, y: int) -> bool:
        """
        Reveal a single cell, flood-filling zero regions.

        Args:
            x: X-coordinate of the cell to reveal.
            y: Y-coordinate of the cell to reveal.

        Returns:
            Whether the revealed cell held a mine.

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        self._check(x, y)

        if self.board_blank:
            self.place_mines(x, y)

        if self.revealed[y][x]:
            return self.mines[y][x]

        self.flags[y][x] = False
        if self.mines[y][x]:
            self.revealed[y][x] = True
            return True

        self.flood_fill(x, y)
        return False

    def set_flag(self, x: int, y: int, flag: bool) -> None:
        """Set or clear the flag on an unrevealed cell; revealed cells are left alone."""
        self._check(x, y)
        if not self.revealed[y][x]:
            self.flags[y][x] = flag

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"
    _ANSI_NUMBERS: Dict[int, str] = {
        1: "\033[94m",
        2: "\033[92m",
        3: "\033[31m",
        4: "\033[34m",
        5: "\033[31m",
        6: "\033[96m",
        7: "\033[90m",
        8: "\033[90m",
    }

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def _n(self, count: int) -> str:
        if count == 0:
            return " "
        return f"{self._ANSI_NUMBERS[count]}{count}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Unrevealed cells are ".", flags "F", mines "M" and empty cells blank.

        Args:
            reveal_all: If True, show mines and all underlying values.
            color: If False, emit plain text without ANSI escapes.

        Returns:
            A formatted multi-line string with coordinate labels and the board grid.
        """
        n = self.size
        c = self._c if color else str
        m = self._m if color else str

        def cell_str(x: int, y: int) -> str:
            if reveal_all or self.revealed[y][x]:
                if self.mines[y][x]:
                    return m("M")
                return self._n(self.counts[y][x]) if color else str(self.counts[y][x] or " ")
            if self.flags[y][x]:
                return m("F")
            return "."

        header_cells = " ".join(f"{x:2d}" for x in range(n))
        out = [c("   ") + c(header_cells)]
        out.append(c("   " + "-" * (3 * n - 1)))

        for y in range(n):
            row_cells = " ".join(f" {cell_str(x, y)}" for x in range(n))
            out.append(c(f"{y:2d} ") + c("|") + row_cells)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible board state to stdout."""
        print(self.format_board(reveal_all=False))

    def print_full_board(self) -> None:
        """Print the fully revealed underlying board to stdout (for debugging)."""
        print(self.format_board(reveal_all=True))


def _parse_cell(parts: List[str]) -> Optional[Tuple[int, int]]:
    if len(parts) != 3:
        print("Must provide x and y coordinates. Example: r 3 5")
        return None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        print("Invalid input. Coordinates must be integers.")
        return None


def play_cli(board: Board, solver: Optional["MinesweeperSolver"] = None) -> None:
    """
    Run a simple terminal UI for playing Minesweeper, optionally with solver help.

    Commands: "r x y" reveal, "f x y" toggle a flag, "s" let the solver take
    one turn, "reset" start over, "q" quit.

    Args:
        board: The board to play on.
        solver: Solver used by the "s" command; one is created on demand.
    """
    if solver is None:
        from .solver import MinesweeperSolver

        solver = MinesweeperSolver(board, record_steps=False)

    print("Minesweeper CLI. Coordinates are 0-based. Type 'q' to quit.")
    print("Commands: r x y | f x y | s | reset | q\n")
    board.print_board()

    while True:
        s = input("\n: ").strip()
        parts = s.replace(",", " ").split()
        if not parts:
            continue
        cmd = parts[0].lower()

        if cmd in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if cmd == "reset":
            board.reset()
            print("Board reset.")

        elif cmd in {"f", "flag"}:
            cell = _parse_cell(parts)
            if cell is None:
                continue
            x, y = cell
            try:
                flagged = board.has_flag(x, y)
                board.set_flag(x, y, not flagged)
            except (ValueError, IndexError):
                print("Cell coordinates are outside the board.")
                continue
            print(f"{'Removed flag from' if flagged else 'Added flag to'} ({x}, {y})")

        elif cmd in {"r", "reveal"}:
            cell = _parse_cell(parts)
            if cell is None:
                continue
            x, y = cell
            try:
                if board.has_flag(x, y):
                    print("Cannot reveal a flagged cell.")
                    continue
                is_mine = board.reveal(x, y)
            except (ValueError, IndexError):
                print("Cell coordinates are outside the board.")
                continue
            print(f"\nYou decided to reveal ({x}, {y}).")
            if is_mine:
                print("\nYou hit a mine. You lost.")
                board.print_full_board()
                board.reset()
                print("\nNew board.")

        elif cmd in {"s", "step"}:
            try:
                result = solver.step()
            except SolverError as e:
                print(f"\nSolver failed: {e}")
                board.print_full_board()
                board.reset()
                print("\nNew board.")
            else:
                print(f"\nSolver: {result.value}.")

        else:
            print(f"Unknown command: {cmd}")
            continue

        print()
        board.print_board()

        if board.complete():
            print("\nYou revealed all safe cells. You won!")
            return
