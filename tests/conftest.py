"""Shared fixtures for the solver tests."""

import random

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from minesweeper_deduce import Board  # noqa: E402

# Two mines on the top row of a 3x3 board; revealing (1, 2) opens the bottom
# two rows and leaves three unknown cells above numbers 1-2-1.
TOP_ROW_LAYOUT = [
    "*.*",
    "...",
    "...",
]

# A single mine in a 2x2 board; after revealing (1, 1) all three unknown
# cells are equally likely and nothing is certain.
COIN_FLIP_LAYOUT = [
    "*.",
    "..",
]


@pytest.fixture(autouse=True)
def _seed_random() -> None:
    """Keep lazy mine placement reproducible."""
    random.seed(1234)


@pytest.fixture()
def top_row_board() -> Board:
    """3x3 board with mines at (0, 0) and (2, 0), bottom rows opened."""
    board = Board.from_layout(TOP_ROW_LAYOUT)
    assert board.reveal(1, 2) is False
    return board


@pytest.fixture()
def coin_flip_board() -> Board:
    """2x2 board with one mine at (0, 0) and only (1, 1) revealed."""
    board = Board.from_layout(COIN_FLIP_LAYOUT)
    assert board.reveal(1, 1) is False
    return board
