"""Tests for MonteCarloEvaluator."""

import threading
import time

import numpy as np
import pytest

import connect4mc.ai.evaluator as evaluator_module
from connect4mc.ai.evaluator import MonteCarloEvaluator, display_trials, select_best_column
from connect4mc.game.board import Board
from connect4mc.utils import COLS, Token

from conftest import DRAW_COLUMNS, alternating, board_from_moves, drawn_board, fill_column


def immediate_win_board():
    """Red wins by dropping in column 2; columns 0 and 1 are full."""
    board = Board()
    fill_column(board, 0, first=Token.RED)
    fill_column(board, 1, first=Token.YELLOW)
    for column in (3, 4, 5):
        board.drop(column, Token.RED)
    assert board.winner() is None
    return board


@pytest.mark.parametrize("trials", [1, 5, 40])
def test_best_move_takes_immediate_win(trials):
    evaluator = MonteCarloEvaluator(rng=trials)
    assert evaluator.best_move(immediate_win_board(), Token.RED, trials) == 2


def test_immediate_win_probability_is_one(evaluator):
    probabilities = evaluator.win_probabilities(immediate_win_board(), Token.RED, 50)
    assert probabilities[2] == 1.0
    assert probabilities[0] == 0.0
    assert probabilities[1] == 0.0


def test_best_move_never_picks_full_column(evaluator):
    board = Board()
    for column in (0, 3, 6):
        fill_column(board, column)
    for _ in range(5):
        column = evaluator.best_move(board, Token.YELLOW, 10)
        assert column in board.valid_columns()


def test_best_move_on_full_board_is_none(evaluator):
    assert evaluator.best_move(drawn_board(), Token.RED, 10) is None


def test_best_move_falls_back_to_lowest_open_column(evaluator):
    # One cell left and filling it draws, so no trial can be won
    board = board_from_moves(alternating(DRAW_COLUMNS[:-1]))
    assert evaluator.column_wins(board, Token.RED, 10) == [0] * COLS
    assert evaluator.best_move(board, Token.RED, 10) == DRAW_COLUMNS[-1]


def test_select_best_column_rules():
    valid = list(range(COLS))
    assert select_best_column([0, 3, 3, 1, 0, 0, 0], valid) == 1
    assert select_best_column([0, 0, 0, 0, 0, 0, 5], valid) == 6
    assert select_best_column([0] * COLS, [2, 4]) == 2
    assert select_best_column([0] * COLS, []) is None
    # Full columns never qualify, even with a stray count
    assert select_best_column([9, 0, 1, 0, 0, 0, 0], [1, 2]) == 2


def test_probability_vector_shape_and_range(evaluator):
    board = Board()
    fill_column(board, 4)
    probabilities = evaluator.win_probabilities(board, Token.YELLOW, 50)
    assert len(probabilities) == COLS
    assert all(0.0 <= p <= 1.0 for p in probabilities)
    assert probabilities[4] == 0.0


def test_probabilities_use_a_fifth_of_the_trials(evaluator):
    assert display_trials(400) == 80
    assert display_trials(4) == 1
    # One trial per column: every entry is exactly 0 or 1
    probabilities = evaluator.win_probabilities(Board(), Token.RED, 3)
    assert set(probabilities) <= {0.0, 1.0}


def test_probabilities_on_full_board_are_zero(evaluator):
    assert evaluator.win_probabilities(drawn_board(), Token.RED, 50) == (0.0,) * COLS


@pytest.mark.parametrize("trials", [0, -5])
def test_non_positive_trials_rejected(evaluator, trials):
    with pytest.raises(ValueError):
        evaluator.column_wins(Board(), Token.RED, trials)
    with pytest.raises(ValueError):
        evaluator.best_move(Board(), Token.RED, trials)


def test_seeded_evaluators_agree():
    board = board_from_moves([(3, Token.RED), (2, Token.YELLOW)])
    first = MonteCarloEvaluator(rng=99).win_probabilities(board, Token.RED, 50)
    second = MonteCarloEvaluator(rng=99).win_probabilities(board, Token.RED, 50)
    assert first == second


def test_reseed_reproduces_results(evaluator):
    board = Board()
    evaluator.reseed(5)
    first = evaluator.column_wins(board, Token.YELLOW, 8)
    evaluator.reseed(5)
    assert evaluator.column_wins(board, Token.YELLOW, 8) == first


def test_worker_count_does_not_change_results():
    board = board_from_moves([(3, Token.RED), (3, Token.YELLOW), (4, Token.RED)])
    single = MonteCarloEvaluator(rng=np.random.default_rng(21), workers=1)
    with MonteCarloEvaluator(rng=np.random.default_rng(21), workers=3) as threaded:
        assert threaded.column_wins(board, Token.YELLOW, 12) == \
            single.column_wins(board, Token.YELLOW, 12)


def test_evaluation_does_not_touch_board(evaluator):
    board = board_from_moves([(1, Token.RED), (5, Token.YELLOW)])
    before = board.copy()
    evaluator.best_move(board, Token.RED, 5)
    evaluator.win_probabilities(board, Token.YELLOW, 5)
    assert board == before


def test_trials_run_counter(evaluator):
    board = Board()
    fill_column(board, 0)
    evaluator.column_wins(board, Token.RED, 4)
    assert evaluator.trials_run == 4 * (COLS - 1)


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        MonteCarloEvaluator(workers=0)


def test_concurrent_callers_share_one_worker_pool(monkeypatch):
    created = []
    real_executor = evaluator_module.ThreadPoolExecutor

    class SlowStartExecutor(real_executor):
        def __init__(self, *args, **kwargs):
            created.append(self)
            time.sleep(0.05)
            super().__init__(*args, **kwargs)

    monkeypatch.setattr(evaluator_module, "ThreadPoolExecutor", SlowStartExecutor)

    callers = 3
    start = threading.Barrier(callers)
    evaluator = MonteCarloEvaluator(rng=6, workers=2)

    def evaluate():
        start.wait()
        evaluator.column_wins(Board(), Token.RED, 2)

    threads = [threading.Thread(target=evaluate) for _ in range(callers)]
    try:
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        assert len(created) == 1
        assert evaluator.trials_run == callers * 2 * COLS
    finally:
        evaluator.close()
