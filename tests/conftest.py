"""Shared fixtures for the test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from connect4mc.ai.evaluator import MonteCarloEvaluator
from connect4mc.game.board import Board
from connect4mc.game.scheduling import PendingCall
from connect4mc.utils import Token


class ManualScheduler:
    """Scheduler that queues calls until the test runs them."""

    def __init__(self):
        self.queue = []

    def schedule(self, delay, callback):
        handle = PendingCall()
        self.queue.append((handle, callback, delay))
        return handle

    @property
    def live(self):
        return [item for item in self.queue if not item[0].cancelled and not item[0].done]

    def run_pending(self):
        """Run queued calls (including ones scheduled while running) until none remain."""
        ran = 0
        while self.queue:
            handle, callback, _ = self.queue.pop(0)
            if not handle.cancelled:
                handle.run(callback)
                ran += 1
        return ran


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def evaluator():
    return MonteCarloEvaluator(rng=42)


def board_from_moves(moves):
    """Build a board from (column, token) drops."""
    board = Board()
    for column, token in moves:
        assert board.drop(column, token)
    return board


# Column order for a full game with no line of four, Yellow moving first.
# Final grid rows alternate R/Y horizontally with row parities 0,1,1,0,0,1.
DRAW_COLUMNS = (
    [0, 1, 1, 0, 1, 0, 0, 1, 0, 1, 1, 0]
    + [2, 3, 3, 2, 3, 2, 2, 3, 2, 3, 3, 2]
    + [4, 5, 5, 4, 6, 4, 4, 6, 5, 6, 6, 5, 4, 5, 5, 4, 6, 6]
)


def alternating(columns, first=Token.YELLOW):
    """Pair each column with alternating tokens."""
    moves = []
    token = first
    for column in columns:
        moves.append((column, token))
        token = token.other()
    return moves


def drawn_board():
    """A full board with no line of four for either token."""
    return board_from_moves(alternating(DRAW_COLUMNS))


def fill_column(board, column, first=Token.RED):
    token = first
    for _ in range(6):
        assert board.drop(column, token)
        token = token.other()
