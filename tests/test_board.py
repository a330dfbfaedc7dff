"""Tests for Board."""

import numpy as np
import pytest

from connect4mc.game.board import Board
from connect4mc.utils import ROWS, COLS, Token

from conftest import board_from_moves, drawn_board, fill_column


def test_new_board_is_empty():
    board = Board()
    assert board.move_count() == 0
    assert board.valid_columns() == list(range(COLS))
    assert not board.is_full()
    assert board.winner() is None


def test_drop_lands_at_bottom_and_stacks():
    board = Board()
    assert board.drop(3, Token.RED)
    assert board.cell(ROWS - 1, 3) is Token.RED
    assert board.drop(3, Token.YELLOW)
    assert board.cell(ROWS - 2, 3) is Token.YELLOW
    assert board.last_move == (ROWS - 2, 3)


@pytest.mark.parametrize("column", [-1, COLS, 100])
def test_drop_out_of_range_fails(column):
    board = Board()
    assert not board.drop(column, Token.RED)
    assert board == Board()


def test_drop_into_full_column_does_not_mutate():
    board = Board()
    fill_column(board, 2)
    assert board.is_column_full(2)

    before = board.copy()
    assert not board.drop(2, Token.YELLOW)
    assert board == before
    assert 2 not in board.valid_columns()


def test_copy_is_independent():
    board = board_from_moves([(0, Token.RED)])
    clone = board.copy()
    clone.drop(1, Token.YELLOW)
    assert board.cell(ROWS - 1, 1) is None
    assert clone != board


def test_vertical_win():
    # Red drops in column 3 four times, Yellow never blocks
    board = Board()
    for i in range(3):
        board.drop(3, Token.RED)
        assert board.winner() is None
        board.drop(i, Token.YELLOW)
    board.drop(3, Token.RED)
    assert board.winner() is Token.RED


def test_horizontal_win():
    board = board_from_moves([(0, Token.YELLOW), (1, Token.YELLOW), (2, Token.YELLOW)])
    assert board.winner() is None
    board.drop(3, Token.YELLOW)
    assert board.winner() is Token.YELLOW
    assert board.winning_line() == [(5, 0), (5, 1), (5, 2), (5, 3)]


def test_diagonal_up_right_win():
    board = Board.from_grid([
        [0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 1, 0, 0, 0],
        [0, 0, 1, 2, 0, 0, 0],
        [0, 1, 2, 2, 0, 0, 0],
        [1, 2, 2, 1, 0, 0, 0],
    ])
    assert board.winner() is Token.RED


def test_diagonal_down_right_win():
    board = Board.from_grid([
        [0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 2, 0, 0, 0],
        [0, 0, 0, 1, 2, 0, 0],
        [0, 0, 0, 1, 1, 2, 0],
        [0, 0, 0, 1, 1, 2, 2],
    ])
    assert board.winner() is Token.YELLOW


def test_every_line_of_four_is_detected():
    for dr, dc in [(0, 1), (1, 0), (1, 1), (-1, 1)]:
        for row in range(ROWS):
            for col in range(COLS):
                end_row, end_col = row + 3 * dr, col + 3 * dc
                if not (0 <= end_row < ROWS and 0 <= end_col < COLS):
                    continue
                board = Board()
                for step in range(4):
                    board.grid[row + step * dr, col + step * dc] = Token.YELLOW.value
                assert board.winner() is Token.YELLOW, (row, col, dr, dc)


def test_three_in_a_row_is_not_a_win():
    board = board_from_moves([(0, Token.RED), (1, Token.RED), (2, Token.RED),
                              (4, Token.RED)])
    assert board.winner() is None


def test_full_board_without_winner():
    board = drawn_board()
    assert board.is_full()
    assert board.winner() is None
    assert board.valid_columns() == []
    assert board.move_count() == ROWS * COLS


def test_from_grid_rejects_floating_piece():
    grid = np.zeros((ROWS, COLS), dtype=int)
    grid[3, 0] = 1
    with pytest.raises(ValueError):
        Board.from_grid(grid)


def test_from_grid_rejects_bad_values_and_shape():
    with pytest.raises(ValueError):
        Board.from_grid([[0] * COLS] * (ROWS - 1))
    grid = np.zeros((ROWS, COLS), dtype=int)
    grid[ROWS - 1, 0] = 3
    with pytest.raises(ValueError):
        Board.from_grid(grid)


def test_from_string():
    values = [0] * (ROWS * COLS)
    values[-7:] = [2, 2, 2, 1, 1, 1, 0]
    board = Board.from_string(",".join(str(v) for v in values))
    assert board.cell(ROWS - 1, 0) is Token.YELLOW
    assert board.cell(ROWS - 1, 5) is Token.RED
    assert board.move_count() == 6

    with pytest.raises(ValueError):
        Board.from_string("0,1,2")
    with pytest.raises(ValueError):
        Board.from_string(",".join(["x"] * (ROWS * COLS)))


def test_rows_and_render():
    board = board_from_moves([(0, Token.RED), (6, Token.YELLOW)])
    rows = board.rows()
    assert rows[ROWS - 1][0] is Token.RED
    assert rows[ROWS - 1][6] is Token.YELLOW
    assert rows[0] == [None] * COLS

    text = board.render()
    assert text.splitlines()[ROWS] == "|R           Y|"
    assert text.splitlines()[-1] == "|0 1 2 3 4 5 6|"
