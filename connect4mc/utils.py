"""
utils.py - Constants, enumerations and grid helpers for Connect Four

Board grids are numpy integer arrays of shape (ROWS, COLS) where row 0 is the
top row. Cells hold EMPTY or the value of a Token.
"""

from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

# Game constants
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of pieces in a row to win

EMPTY = 0


class Token(Enum):
    """A player's piece colour."""
    RED = 1
    YELLOW = 2

    def other(self) -> 'Token':
        """Get the opposing token."""
        return Token.YELLOW if self is Token.RED else Token.RED

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def symbol(self) -> str:
        return "R" if self is Token.RED else "Y"

    @classmethod
    def from_value(cls, value: int) -> Optional['Token']:
        """Map a grid cell value to a token (None for an empty cell)."""
        if value == EMPTY:
            return None
        return cls(int(value))

    @classmethod
    def parse(cls, text: str) -> 'Token':
        """Parse 'red', 'r', 'yellow' or 'y' (any case)."""
        lowered = text.strip().lower()
        for token in cls:
            if lowered in (token.name.lower(), token.symbol.lower()):
                return token
        raise ValueError(f"Unknown token: {text!r}")

    def __str__(self):
        return self.label


# Direction vectors (row, col): horizontal, vertical, down-right, up-right
DIRECTION_VECTORS: Tuple[Tuple[int, int], ...] = (
    (0, 1),
    (1, 0),
    (1, 1),
    (-1, 1),
)


def is_valid_position(row: int, col: int) -> bool:
    """Check if a position is within the board boundaries."""
    return 0 <= row < ROWS and 0 <= col < COLS


def line_from(grid: np.ndarray, row: int, col: int, dr: int, dc: int) -> Optional[List[Tuple[int, int]]]:
    """
    Return the CONNECT_N positions starting at (row, col) along (dr, dc) if
    they are all in bounds and hold the same non-empty value.
    """
    value = grid[row, col]
    if value == EMPTY:
        return None

    end_row = row + dr * (CONNECT_N - 1)
    end_col = col + dc * (CONNECT_N - 1)
    if not is_valid_position(end_row, end_col):
        return None

    positions = [(row, col)]
    for step in range(1, CONNECT_N):
        r, c = row + dr * step, col + dc * step
        if grid[r, c] != value:
            return None
        positions.append((r, c))
    return positions


def check_win_at_position(grid: np.ndarray, row: int, col: int) -> bool:
    """
    Check whether the piece at (row, col) is part of a line of CONNECT_N.

    Used after a drop: if the board had no winner before, the board has a
    winner afterwards exactly when this returns True for the dropped piece.
    """
    value = grid[row, col]
    if value == EMPTY:
        return False

    for dr, dc in DIRECTION_VECTORS:
        count = 1

        r, c = row + dr, col + dc
        while is_valid_position(r, c) and grid[r, c] == value:
            count += 1
            r += dr
            c += dc

        r, c = row - dr, col - dc
        while is_valid_position(r, c) and grid[r, c] == value:
            count += 1
            r -= dr
            c -= dc

        if count >= CONNECT_N:
            return True

    return False


def format_probabilities(probabilities) -> str:
    """Format a probability vector as 'column:percent' pairs."""
    return "  ".join(f"{col}:{p * 100:5.1f}%" for col, p in enumerate(probabilities))


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render a grid as ASCII art.

    Red pieces are drawn as R, yellow pieces as Y.
    """
    symbols = {EMPTY: " ", Token.RED.value: Token.RED.symbol, Token.YELLOW.value: Token.YELLOW.symbol}
    border = "|" + "-" * (COLS * 2 - 1) + "|"

    lines = [border]
    for row in range(ROWS):
        lines.append("|" + " ".join(symbols[int(cell)] for cell in grid[row]) + "|")
    lines.append(border)
    lines.append("|" + " ".join(str(col) for col in range(COLS)) + "|")

    return "\n".join(lines)
