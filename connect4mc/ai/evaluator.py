"""
evaluator.py - Monte Carlo move evaluation for Connect Four

The evaluator scores every open column for a player by running many
independent trials (see connect4mc.ai.playout.play_trial) and counting wins.
The same counts drive two operations:

1. best_move: the column the computer plays
2. win_probabilities: per-column win rates shown to the players

There is no tree search here; the estimate trades depth for trial volume.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from connect4mc.ai.playout import play_trial
from connect4mc.debug import debug, DebugLevel
from connect4mc.game.board import Board
from connect4mc.utils import COLS, Token

ProbabilityVector = Tuple[float, ...]

# Probability display runs this fraction of the best-move trial budget
DISPLAY_TRIAL_DIVISOR = 5

_SEED_BOUND = 2 ** 63 - 1


def display_trials(trials: int) -> int:
    """Trials per column used for probability display."""
    return max(1, trials // DISPLAY_TRIAL_DIVISOR)


def _column_batch(board: Board, column: int, player: Token, trials: int, seed: int) -> int:
    """Run `trials` trials for one column and return the number of wins."""
    rng = np.random.default_rng(seed)
    return sum(1 for _ in range(trials) if play_trial(board, column, player, rng))


def select_best_column(wins: Sequence[int], valid_columns: Sequence[int]) -> Optional[int]:
    """
    Pick the column with the most wins.

    Only columns with at least one win qualify; ties go to the lowest index.
    With no wins anywhere the lowest valid column is returned, and None when
    there are no valid columns at all.
    """
    if not valid_columns:
        return None

    best_column = None
    best_wins = 0
    for column in sorted(valid_columns):
        if wins[column] > best_wins:
            best_wins = wins[column]
            best_column = column

    if best_column is None:
        return min(valid_columns)
    return best_column


class MonteCarloEvaluator:
    """
    Scores candidate columns with random playouts.

    Each call takes a snapshot of the board it is given and never touches the
    caller's board. Every column's batch of trials gets its own generator,
    seeded from the evaluator's random source before any work is dispatched,
    so a seeded evaluator gives the same answers whatever the worker count.
    """

    def __init__(self, rng: Union[np.random.Generator, int, None] = None, workers: int = 1):
        """
        Args:
            rng: A numpy Generator, an integer seed, or None for fresh entropy
            workers: Number of threads running column batches (1 runs inline)
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        if isinstance(rng, np.random.Generator):
            self._rng = rng
        else:
            self._rng = np.random.default_rng(rng)
        self._rng_lock = threading.Lock()
        # Guards the worker pool and the trial counter
        self._state_lock = threading.Lock()
        self.workers = workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self.trials_run = 0

    def reseed(self, seed: Optional[int]):
        """Replace the random source with a freshly seeded one."""
        with self._rng_lock:
            self._rng = np.random.default_rng(seed)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._state_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.workers,
                                                    thread_name_prefix="connect4mc-eval")
            return self._executor

    def close(self):
        """Shut down the worker pool, if one was started."""
        with self._state_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def column_wins(self, board: Board, player: Token, trials: int) -> List[int]:
        """
        Count wins per column for `player` over `trials` trials each.

        Full columns are skipped and report 0.

        Raises:
            ValueError: if trials is not positive
        """
        if trials < 1:
            raise ValueError(f"trials must be positive, got {trials}")

        snapshot = board.copy()
        columns = snapshot.valid_columns()
        wins = [0] * COLS
        if not columns:
            return wins

        with self._rng_lock:
            seeds = self._rng.integers(0, _SEED_BOUND, size=len(columns)).tolist()

        if self.workers > 1 and len(columns) > 1:
            executor = self._get_executor()
            futures = [executor.submit(_column_batch, snapshot, column, player, trials, seed)
                       for column, seed in zip(columns, seeds)]
            counts = [future.result() for future in futures]
        else:
            counts = [_column_batch(snapshot, column, player, trials, seed)
                      for column, seed in zip(columns, seeds)]

        for column, count in zip(columns, counts):
            wins[column] = count

        with self._state_lock:
            self.trials_run += trials * len(columns)
        if debug.is_enabled_for(DebugLevel.TRACE, "evaluator"):
            debug.trace(f"{player} wins per column over {trials} trials: {wins}", "evaluator")
        return wins

    def best_move(self, board: Board, player: Token, trials: int) -> Optional[int]:
        """
        Choose a column for `player`.

        Args:
            board: Current position
            player: Token to choose a move for
            trials: Trials per open column

        Returns:
            The column with the most winning trials (lowest index on ties),
            the lowest open column if no trial was won, or None when the
            board is full
        """
        valid = board.valid_columns()
        if not valid:
            return None

        timer = f"best_move-{threading.get_ident()}"
        debug.start_timer(timer)
        wins = self.column_wins(board, player, trials)
        column = select_best_column(wins, valid)
        debug.end_timer(timer, "evaluator")

        debug.info(f"{player} best move: column {column} (wins {wins}, {trials} trials each)",
                   "evaluator")
        return column

    def win_probabilities(self, board: Board, player: Token, trials: int) -> ProbabilityVector:
        """
        Estimate the chance `player` wins by playing each column next.

        Uses a fifth of `trials` per column (at least one). Full columns
        report 0.0, which is not a real estimate.

        Returns:
            A tuple of COLS floats in [0.0, 1.0]
        """
        per_column = display_trials(trials)
        valid = set(board.valid_columns())
        wins = self.column_wins(board, player, per_column)

        return tuple(wins[col] / per_column if col in valid else 0.0 for col in range(COLS))
