"""
board.py - Board representation for Connect Four

This module implements the Board class: a 6x7 grid with the gravity rule for
drops, whole-board win detection and full-board detection. Boards are cheap to
copy so the evaluator can run every simulated trial on its own private copy.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from connect4mc.debug import debug
from connect4mc.utils import (ROWS, COLS, EMPTY, DIRECTION_VECTORS, Token,
                              line_from, render_board_ascii)


class Board:
    """
    A Connect Four board.

    Row 0 is the top row and row ROWS-1 the bottom row. The non-empty cells of
    every column always form a contiguous run starting at the bottom.
    """

    def __init__(self):
        self.grid = np.zeros((ROWS, COLS), dtype=np.int8)
        self.last_move: Optional[Tuple[int, int]] = None

    @classmethod
    def from_grid(cls, values: Iterable[Iterable[int]]) -> 'Board':
        """
        Build a board from ROWS rows of COLS cell values (0 empty, 1 red, 2 yellow).

        Raises:
            ValueError: if the shape or values are wrong, or a column has a
                gap below a filled cell
        """
        grid = np.array([list(row) for row in values], dtype=np.int64)
        if grid.shape != (ROWS, COLS):
            raise ValueError(f"Board must be {ROWS}x{COLS}, got shape {grid.shape}")

        allowed = {EMPTY, Token.RED.value, Token.YELLOW.value}
        bad = set(np.unique(grid).tolist()) - allowed
        if bad:
            raise ValueError(f"Invalid cell values: {sorted(bad)}")

        for col in range(COLS):
            filled = grid[:, col] != EMPTY
            # Once a filled cell is seen scanning downward, every cell below must be filled
            first = np.argmax(filled) if filled.any() else ROWS
            if not filled[first:].all():
                raise ValueError(f"Column {col} has a floating piece")

        board = cls()
        board.grid = grid.astype(np.int8)
        return board

    @classmethod
    def from_string(cls, text: str) -> 'Board':
        """
        Parse ROWS*COLS comma-separated cell values, top row first.

        This is the position format accepted by the CLI 'analyze' command.
        """
        try:
            values = [int(part) for part in text.replace(" ", "").split(",") if part != ""]
        except ValueError as exc:
            raise ValueError(f"Position contains a non-integer value: {exc}") from None

        if len(values) != ROWS * COLS:
            raise ValueError(f"Position must have {ROWS * COLS} values, got {len(values)}")

        return cls.from_grid(np.array(values).reshape(ROWS, COLS))

    def copy(self) -> 'Board':
        """Create an independent copy of this board."""
        new_board = Board.__new__(Board)
        new_board.grid = self.grid.copy()
        new_board.last_move = self.last_move
        return new_board

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    __hash__ = None

    def cell(self, row: int, col: int) -> Optional[Token]:
        """Get the token at a position, or None for an empty cell."""
        return Token.from_value(self.grid[row, col])

    def rows(self) -> List[List[Optional[Token]]]:
        """Get the grid as rows of optional tokens, top row first."""
        return [[Token.from_value(value) for value in row] for row in self.grid.tolist()]

    def move_count(self) -> int:
        """Number of pieces on the board."""
        return int(np.count_nonzero(self.grid))

    def is_column_full(self, column: int) -> bool:
        """
        Check if a column can take no more pieces.

        Columns outside [0, COLS) are reported as full.
        """
        if not (0 <= column < COLS):
            return True
        return bool(self.grid[0, column] != EMPTY)

    def is_full(self) -> bool:
        """True if every column's top cell is occupied."""
        return bool(np.all(self.grid[0] != EMPTY))

    def valid_columns(self) -> List[int]:
        """Columns that are not full, in ascending order."""
        return [int(col) for col in np.flatnonzero(self.grid[0] == EMPTY)]

    def drop(self, column: int, token: Token) -> bool:
        """
        Drop a token into a column.

        The token lands in the lowest empty cell, scanning from the bottom row
        upward.

        Args:
            column: The column to drop into (0-indexed)
            token: The token to place

        Returns:
            True if the token was placed, False if the column is out of range
            or full (the board is left unchanged)
        """
        if self.is_column_full(column):
            debug.trace(f"Rejected drop of {token} in column {column}", "board")
            return False

        for row in range(ROWS - 1, -1, -1):
            if self.grid[row, column] == EMPTY:
                self.grid[row, column] = token.value
                self.last_move = (row, column)
                debug.trace(f"Placed {token} at ({row}, {column})", "board")
                return True

        return False

    def winner(self) -> Optional[Token]:
        """
        Scan the whole board for a line of four.

        Every non-empty cell is checked rightward, downward and along both
        rightward diagonals.

        Returns:
            The first token found with a line of four, or None
        """
        line = self.winning_line()
        if not line:
            return None
        row, col = line[0]
        return Token.from_value(self.grid[row, col])

    def winning_line(self) -> List[Tuple[int, int]]:
        """
        Positions of the first line of four found, or an empty list.
        """
        for row in range(ROWS):
            for col in range(COLS):
                if self.grid[row, col] == EMPTY:
                    continue
                for dr, dc in DIRECTION_VECTORS:
                    line = line_from(self.grid, row, col, dr, dc)
                    if line:
                        return line
        return []

    def render(self, highlight: Sequence[Tuple[int, int]] = ()) -> str:
        """
        Render the board as ASCII art.

        Args:
            highlight: Positions drawn in lower case (e.g. a winning line)
        """
        text = render_board_ascii(self.grid)
        if not highlight:
            return text

        lines = text.split("\n")
        for row, col in highlight:
            line = lines[row + 1]
            index = 1 + col * 2
            lines[row + 1] = line[:index] + line[index].lower() + line[index + 1:]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Board(moves={self.move_count()}, last_move={self.last_move})"
