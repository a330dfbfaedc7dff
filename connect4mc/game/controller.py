"""
controller.py - Turn-taking state machine for a human vs. computer game

The GameController owns the one live Board and the GameStatus. It applies
human moves, schedules computer moves after a short think time, detects wins
and draws, and keeps both players' probability vectors up to date.

Every state change (reset, move, configuration change) advances a generation
counter. Deferred work (a computer move, a probability refresh) records the
generation it was started for and is dropped if the game has moved on by the
time the result is ready.
"""

import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from connect4mc.ai.evaluator import MonteCarloEvaluator, ProbabilityVector
from connect4mc.config import GameConfig
from connect4mc.debug import debug
from connect4mc.game.board import Board
from connect4mc.game.scheduling import PendingCall, TimerScheduler
from connect4mc.game.status import GameState, GameStatus
from connect4mc.utils import Token

Listener = Callable[['GameSnapshot'], None]


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the game handed to the presentation layer."""
    board: Tuple[Tuple[Optional[Token], ...], ...]
    status: GameStatus
    status_text: str
    red_probabilities: Optional[ProbabilityVector]
    yellow_probabilities: Optional[ProbabilityVector]
    show_probabilities: bool
    generation: int

    @property
    def is_game_over(self) -> bool:
        return self.status.is_game_over

    def probabilities_for(self, token: Token) -> Optional[ProbabilityVector]:
        return self.red_probabilities if token is Token.RED else self.yellow_probabilities


def describe_status(status: GameStatus, config: GameConfig) -> str:
    """
    Human-readable status line.

    In progress: "Yellow (You) to move" / "Red (AI) to move".
    Finished: "Red wins!" or "It's a draw!".
    """
    if status.state == GameState.IN_PROGRESS:
        actor = "AI" if config.is_ai(status.token) else "You"
        return f"{status.token} ({actor}) to move"
    return str(status)


class GameController:
    """
    Runs a game of Connect Four between human and computer players.

    Moves from the human side come in through submit_move(column). Computer
    moves are chosen by a MonteCarloEvaluator and played through the same
    path after the configured think time.
    """

    def __init__(self, config: Optional[GameConfig] = None,
                 evaluator: Optional[MonteCarloEvaluator] = None,
                 scheduler=None,
                 auto_reset: bool = True):
        """
        Args:
            config: Initial configuration (defaults to GameConfig())
            evaluator: Move evaluator; one is created from config.workers if omitted
            scheduler: Object with schedule(delay, callback) -> PendingCall
                (defaults to a TimerScheduler)
            auto_reset: Start a game immediately
        """
        self._config = config or GameConfig()
        self._owns_evaluator = evaluator is None
        self._evaluator = evaluator or MonteCarloEvaluator(workers=self._config.workers)
        self._scheduler = scheduler or TimerScheduler()

        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._pending: Optional[PendingCall] = None
        self._generation = 0

        self._board = Board()
        self._status = GameStatus.in_progress(self._config.first_mover)
        self._red_probabilities: Optional[ProbabilityVector] = None
        self._yellow_probabilities: Optional[ProbabilityVector] = None

        if auto_reset:
            self.reset()

    # ------------------------------------------------------------------
    # Read surface

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def evaluator(self) -> MonteCarloEvaluator:
        return self._evaluator

    @property
    def board(self) -> Board:
        """A copy of the current board."""
        with self._lock:
            return self._board.copy()

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def status_text(self) -> str:
        with self._lock:
            return describe_status(self._status, self._config)

    @property
    def is_game_over(self) -> bool:
        return self._status.is_game_over

    @property
    def current_turn(self) -> Optional[Token]:
        return self._status.turn

    @property
    def red_probabilities(self) -> Optional[ProbabilityVector]:
        return self._red_probabilities

    @property
    def yellow_probabilities(self) -> Optional[ProbabilityVector]:
        return self._yellow_probabilities

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def ai_move_pending(self) -> bool:
        pending = self._pending
        return pending is not None and not pending.done and not pending.cancelled

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return GameSnapshot(
                board=tuple(tuple(row) for row in self._board.rows()),
                status=self._status,
                status_text=describe_status(self._status, self._config),
                red_probabilities=self._red_probabilities,
                yellow_probabilities=self._yellow_probabilities,
                show_probabilities=self._config.show_probabilities,
                generation=self._generation,
            )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a GameSnapshot after every change.

        Returns:
            A function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Write surface

    def reset(self, config: Optional[GameConfig] = None) -> None:
        """
        Start a new game.

        The board is cleared, the configured first mover is to play and, if
        that side is computer-controlled, its move is scheduled.
        """
        with self._lock:
            if config is not None:
                self._set_config(config)
            self._cancel_pending()

            self._board = Board()
            self._status = GameStatus.in_progress(self._config.first_mover)
            generation = self._advance()
            debug.info(f"New game: {self._config.first_mover} moves first "
                       f"({self._config.simulation_count} simulations)", "controller")
            self._notify()

            if self._config.is_ai(self._config.first_mover):
                self._schedule_ai_move()

        self._refresh_probabilities(generation)

    def submit_move(self, column: int, token: Optional[Token] = None) -> bool:
        """
        Play a move.

        Args:
            column: Column to drop into
            token: Token making the move; None means the human player, which
                is only allowed while a human-controlled token is to move

        Returns:
            True if the move was played; False if it was rejected (game over,
            wrong turn, column out of range or full) and nothing changed
        """
        with self._lock:
            generation = self._apply_move(column, token)
        if generation is None:
            return False

        self._refresh_probabilities(generation)
        return True

    def apply_config(self, config: GameConfig) -> None:
        """
        Switch to a new configuration without replaying the game.

        The first-mover preference takes effect at the next reset. While the
        game is in progress the probability vectors are recomputed straight
        away and any pending computer move is restarted.
        """
        with self._lock:
            self._set_config(config)
            if self._status.is_game_over:
                self._notify()
                return

            self._cancel_pending()
            generation = self._advance()
            debug.info(f"Configuration applied: {self._config.simulation_count} simulations",
                       "controller")
            self._notify()

            if self._config.is_ai(self._status.turn):
                self._schedule_ai_move()

        self._refresh_probabilities(generation)

    def apply_settings(self, simulation_count: int, user_goes_first: bool,
                       show_probabilities: bool) -> None:
        """Apply values from the settings form (clamped to the form's range)."""
        config = GameConfig.from_settings(
            simulation_count=simulation_count,
            user_goes_first=user_goes_first,
            show_probabilities=show_probabilities,
            think_time=self._config.think_time,
            workers=self._config.workers,
        )
        self.apply_config(config)

    def close(self) -> None:
        """Cancel any pending computer move and release worker threads."""
        with self._lock:
            self._cancel_pending()
            self._advance()
        if self._owns_evaluator:
            self._evaluator.close()

    # ------------------------------------------------------------------
    # Internals (callers hold self._lock unless noted)

    def _set_config(self, config: GameConfig):
        if self._owns_evaluator and config.workers != self._config.workers:
            self._evaluator.close()
            self._evaluator.workers = config.workers
        self._config = config

    def _advance(self) -> int:
        self._generation += 1
        self._red_probabilities = None
        self._yellow_probabilities = None
        return self._generation

    def _cancel_pending(self):
        if self._pending is not None:
            if self._pending.cancel():
                debug.debug("Cancelled pending AI move", "controller")
            self._pending = None

    def _apply_move(self, column: int, token: Optional[Token]) -> Optional[int]:
        """Validate and play a move; return the new generation or None if rejected."""
        if self._status.is_game_over:
            debug.debug(f"Move in column {column} rejected: game is over", "controller")
            return None

        turn = self._status.turn
        if token is None:
            if self._config.is_ai(turn):
                debug.debug(f"Move in column {column} rejected: {turn} is computer-controlled",
                            "controller")
                return None
            token = turn
        elif token is not turn:
            debug.debug(f"Move by {token} rejected: {turn} to move", "controller")
            return None

        if not self._board.drop(column, token):
            debug.debug(f"Move by {token} rejected: column {column} is invalid or full",
                        "controller")
            return None

        debug.info(f"{token} plays column {column}", "controller")

        winner = self._board.winner()
        if winner is not None:
            self._status = GameStatus.won(winner)
            debug.info(f"{winner} wins after {self._board.move_count()} moves", "controller")
        elif self._board.is_full():
            self._status = GameStatus.drawn()
            debug.info("Game ends in a draw", "controller")
        else:
            self._status = GameStatus.in_progress(token.other())

        self._cancel_pending()
        generation = self._advance()
        self._notify()

        if not self._status.is_game_over and self._config.is_ai(self._status.turn):
            self._schedule_ai_move()

        return generation

    def _schedule_ai_move(self):
        self._cancel_pending()
        generation = self._generation
        self._pending = self._scheduler.schedule(
            self._config.think_time, lambda: self._run_ai_move(generation))

    def _run_ai_move(self, generation: int):
        # Runs on the scheduler's thread without the lock held
        with self._lock:
            if generation != self._generation:
                debug.debug("Skipping stale AI move", "controller")
                return
            turn = self._status.turn
            if turn is None or not self._config.is_ai(turn):
                return
            snapshot = self._board.copy()
            trials = self._config.simulation_count

        try:
            column = self._evaluator.best_move(snapshot, turn, trials)
        except Exception as e:
            debug.error(f"AI move for {turn} failed: {e}", "controller")
            return

        if column is None:
            return

        with self._lock:
            if generation != self._generation:
                debug.info(f"Discarding stale AI move (column {column})", "controller")
                return
            self._pending = None
            new_generation = self._apply_move(column, turn)

        if new_generation is not None:
            self._refresh_probabilities(new_generation)

    def _refresh_probabilities(self, generation: int) -> bool:
        """
        Recompute both probability vectors for the given generation.

        Called without the lock held by the current frame. Returns False if the
        result was discarded because the game moved on.
        """
        with self._lock:
            if generation != self._generation or self._status.is_game_over:
                return False
            snapshot = self._board.copy()
            trials = self._config.simulation_count

        try:
            red = self._evaluator.win_probabilities(snapshot, Token.RED, trials)
            yellow = self._evaluator.win_probabilities(snapshot, Token.YELLOW, trials)
        except Exception as e:
            debug.error(f"Probability refresh failed: {e}", "controller")
            return False

        with self._lock:
            if generation != self._generation:
                debug.debug("Discarding stale probabilities", "controller")
                return False
            self._red_probabilities = red
            self._yellow_probabilities = yellow
            self._notify()
        return True

    def _notify(self):
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                debug.error(f"Listener {listener!r} failed: {e}", "controller")
