"""
playout.py - Random playout simulation for Connect Four

A playout plays uniformly random legal moves from a position until one side
completes a line of four or the board fills up. A trial is what the evaluator
scores: drop the evaluated player's token in a candidate column, then play
out the rest of the game with the opponent to move.
"""

from typing import Optional

import numpy as np

from connect4mc.game.board import Board
from connect4mc.utils import ROWS, COLS, EMPTY, Token, check_win_at_position

MAX_PLAYOUT_MOVES = ROWS * COLS


def simulate_random_playout(board: Board, starting_turn: Token,
                            rng: np.random.Generator) -> Optional[Token]:
    """
    Play random moves from a position until the game ends.

    The board passed in is not modified; the playout runs on a copy.

    Args:
        board: Position to play out from (assumed to have no winner yet)
        starting_turn: Token that moves first in the playout
        rng: Random source used to pick columns

    Returns:
        The winning token, or None if the board fills without a winner
    """
    sim = board.copy()
    grid = sim.grid
    turn = starting_turn

    for _ in range(MAX_PLAYOUT_MOVES):
        valid = np.flatnonzero(grid[0] == EMPTY)
        if valid.size == 0:
            return None

        column = int(valid[rng.integers(valid.size)])
        sim.drop(column, turn)

        row, col = sim.last_move
        if check_win_at_position(grid, row, col):
            return turn

        turn = turn.other()

    return None


def play_trial(board: Board, column: int, player: Token, rng: np.random.Generator) -> bool:
    """
    Run one evaluation trial for `player` playing `column`.

    If the drop itself makes four in a row the trial is an immediate win and
    no playout is run. Otherwise the game is played out randomly with the
    opponent to move.

    Returns:
        True if `player` wins the trial
    """
    sim = board.copy()
    if not sim.drop(column, player):
        return False

    row, col = sim.last_move
    if check_win_at_position(sim.grid, row, col):
        return True

    return simulate_random_playout(sim, player.other(), rng) == player
