"""
cli.py - Command-line interface for Monte Carlo Connect Four

Commands:
    play       Play against the computer in the terminal
    analyze    Show win probabilities and the best move for a position
    benchmark  Time playouts and evaluations
"""

import argparse
import sys
import threading
from typing import List, Optional

import numpy as np

from connect4mc.ai.evaluator import MonteCarloEvaluator
from connect4mc.ai.playout import simulate_random_playout
from connect4mc.config import (DEFAULT_SIMULATIONS, DEFAULT_THINK_TIME, GameConfig,
                               MAX_SIMULATIONS, MIN_SIMULATIONS, SIMULATION_STEP)
from connect4mc.debug import debug
from connect4mc.game.board import Board
from connect4mc.game.controller import GameController, GameSnapshot
from connect4mc.game.scheduling import TimerScheduler
from connect4mc.utils import ROWS, COLS, Token, format_probabilities


def render_snapshot(snapshot: GameSnapshot, board: Optional[Board] = None) -> str:
    """
    Render a snapshot for the terminal: board, status line and, when enabled,
    both probability vectors.
    """
    if board is None:
        board = Board.from_grid([[0 if cell is None else cell.value for cell in row]
                                 for row in snapshot.board])
    highlight = board.winning_line() if snapshot.status.winner else ()

    lines = [board.render(highlight), snapshot.status_text]
    if snapshot.show_probabilities and snapshot.red_probabilities is not None:
        lines.append(f"Red    {format_probabilities(snapshot.red_probabilities)}")
        lines.append(f"Yellow {format_probabilities(snapshot.yellow_probabilities)}")
    return "\n".join(lines)


class SimpleCLI:
    """Simple command-line interface for playing and analysing Connect Four."""

    def __init__(self, argv: Optional[List[str]] = None):
        self.argv = argv
        self.args = None

    def parse_args(self) -> None:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(description='Monte Carlo Connect Four')
        parser.add_argument('--debug_level',
                            choices=['none', 'error', 'warning', 'info', 'debug', 'trace'],
                            default='warning',
                            help='Logging verbosity (default: warning)')
        parser.add_argument('--log_file', type=str, default=None,
                            help='Also write log output to this file')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        play_parser = subparsers.add_parser('play', help='Play a game against the computer')
        self._add_engine_arguments(play_parser)
        play_parser.add_argument('--ai-first', action='store_true',
                                 help='Let the computer (Red) move first')
        play_parser.add_argument('--show-probabilities', action='store_true',
                                 help='Show per-column win probabilities for both players')
        play_parser.add_argument('--think-time', type=float, default=DEFAULT_THINK_TIME,
                                 help='Seconds the computer waits before moving')

        analyze_parser = subparsers.add_parser('analyze', help='Evaluate a board position')
        self._add_engine_arguments(analyze_parser)
        analyze_parser.add_argument('--position', type=str, required=True,
                                    help=f'{ROWS * COLS} comma-separated cells, top row first '
                                         '(0 empty, 1 red, 2 yellow)')
        analyze_parser.add_argument('--player', type=str, default='red',
                                    help='Token to find the best move for (red or yellow)')

        benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark performance')
        benchmark_parser.add_argument('--iterations', type=int, default=200,
                                      help='Number of playouts to time')
        self._add_engine_arguments(benchmark_parser)

        self.args = parser.parse_args(self.argv)

        debug.set_from_string(self.args.debug_level)
        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

    @staticmethod
    def _add_engine_arguments(parser: argparse.ArgumentParser):
        parser.add_argument('--simulations', type=int, default=DEFAULT_SIMULATIONS,
                            help=f'Trials per column ({MIN_SIMULATIONS}-{MAX_SIMULATIONS}, '
                                 f'step {SIMULATION_STEP}; default {DEFAULT_SIMULATIONS})')
        parser.add_argument('--workers', type=int, default=1,
                            help='Threads used to run trials')
        parser.add_argument('--seed', type=int, default=None,
                            help='Random seed for reproducible play')

    def run(self) -> int:
        """Run the command selected on the command line."""
        if not self.args:
            self.parse_args()

        if self.args.command == 'play':
            return self.play_game()
        elif self.args.command == 'analyze':
            return self.analyze_position()
        elif self.args.command == 'benchmark':
            return self.benchmark()

        print("Please specify a command. Use --help for options.")
        return 1

    def _make_evaluator(self) -> MonteCarloEvaluator:
        if self.args.workers < 1:
            print("--workers must be at least 1")
            sys.exit(2)
        return MonteCarloEvaluator(rng=self.args.seed, workers=self.args.workers)

    # ------------------------------------------------------------------
    # play

    def play_game(self) -> int:
        """Play Connect Four interactively."""
        config = GameConfig.from_settings(
            simulation_count=self.args.simulations,
            user_goes_first=not self.args.ai_first,
            show_probabilities=self.args.show_probabilities,
            think_time=max(0.0, self.args.think_time),
            workers=max(1, self.args.workers),
        )
        if config.simulation_count != self.args.simulations:
            print(f"Using {config.simulation_count} simulations "
                  f"(allowed range {MIN_SIMULATIONS}-{MAX_SIMULATIONS}, step {SIMULATION_STEP}).")

        changed = threading.Event()
        evaluator = self._make_evaluator()
        controller = GameController(config, evaluator=evaluator,
                                    scheduler=TimerScheduler(), auto_reset=False)
        controller.subscribe(lambda snapshot: changed.set())

        print("Starting a new Connect Four game! You are Yellow (Y), the computer is Red (R).")
        print("Enter a column number (0-6) to move.")
        print("Other commands: 'q' quit, 'r' restart (choose who starts), "
              "'p' toggle probabilities, 's N' set simulations.")

        controller.reset()
        try:
            while True:
                self._wait_for_human(controller, changed)
                snapshot = controller.snapshot()
                print()
                print(render_snapshot(snapshot))

                if snapshot.is_game_over:
                    answer = input("Play again? (y/n): ").strip().lower()
                    if answer != 'y':
                        break
                    self._restart(controller)
                    continue

                if not self._handle_human_input(controller):
                    break
        except (KeyboardInterrupt, EOFError):
            print("\nQuitting game.")
        finally:
            controller.close()
            evaluator.close()

        return 0

    @staticmethod
    def _wait_for_human(controller: GameController, changed: threading.Event):
        """Block while the computer is to move or probabilities are being computed."""
        announced = False
        while True:
            snapshot = controller.snapshot()
            if snapshot.is_game_over:
                return
            ai_turn = controller.config.is_ai(snapshot.status.turn)
            if not ai_turn and (snapshot.red_probabilities is not None
                                or not snapshot.show_probabilities):
                return
            if ai_turn and not announced:
                print("AI is thinking...")
                announced = True
            changed.wait(timeout=0.1)
            changed.clear()

    @staticmethod
    def _restart(controller: GameController):
        """Ask who moves first, then start a new game."""
        answer = input("Who goes first? (you/ai) [you]: ").strip().lower()
        user_goes_first = answer not in ('ai', 'a', 'computer')
        config = controller.config
        controller.apply_settings(config.simulation_count, user_goes_first,
                                  config.show_probabilities)
        controller.reset()

    def _handle_human_input(self, controller: GameController) -> bool:
        """
        Read one command from the player.

        Returns:
            False if the player asked to quit
        """
        user_input = input("Your move (0-6, q/r/p/s N): ").strip().lower()
        if user_input == 'q':
            print("Quitting game.")
            return False
        if user_input == 'r':
            self._restart(controller)
            print("Game restarted.")
            return True

        config = controller.config
        if user_input == 'p':
            controller.apply_config(config.with_changes(
                show_probabilities=not config.show_probabilities))
            return True
        if user_input.startswith('s'):
            try:
                count = int(user_input[1:].strip())
            except ValueError:
                print("Usage: s N (for example 's 800')")
                return True
            controller.apply_settings(count, config.first_mover is Token.YELLOW,
                                      config.show_probabilities)
            print(f"Simulations set to {controller.config.simulation_count}.")
            return True

        try:
            column = int(user_input)
        except ValueError:
            print("Invalid input. Please enter a column number or a command.")
            return True

        if not controller.submit_move(column):
            print(f"Invalid move: {column}")
        return True

    # ------------------------------------------------------------------
    # analyze

    def analyze_position(self) -> int:
        """Evaluate a position given on the command line."""
        try:
            board = Board.from_string(self.args.position)
            player = Token.parse(self.args.player)
        except ValueError as e:
            print(f"Error parsing position: {e}")
            return 1

        if self.args.simulations < 1:
            print("--simulations must be positive")
            return 1

        print("Loaded position:")
        print(board.render(board.winning_line()))

        winner = board.winner()
        if winner is not None:
            print(f"{winner} has already won.")
            return 0
        if board.is_full():
            print("Board is full: the game is a draw.")
            return 0

        trials = self.args.simulations
        with self._make_evaluator() as evaluator:
            red = evaluator.win_probabilities(board, Token.RED, trials)
            yellow = evaluator.win_probabilities(board, Token.YELLOW, trials)
            best = evaluator.best_move(board, player, trials)

        print(f"Valid moves: {board.valid_columns()}")
        print(f"Red    {format_probabilities(red)}")
        print(f"Yellow {format_probabilities(yellow)}")
        print(f"Best move for {player}: column {best}")
        return 0

    # ------------------------------------------------------------------
    # benchmark

    def benchmark(self) -> int:
        """Benchmark playouts and evaluations."""
        iterations = max(1, self.args.iterations)
        print(f"Running benchmark with {iterations} playouts...")

        rng = np.random.default_rng(self.args.seed)
        board = Board()

        debug.start_timer("playouts")
        results = {Token.RED: 0, Token.YELLOW: 0, None: 0}
        for _ in range(iterations):
            results[simulate_random_playout(board, Token.RED, rng)] += 1
        playout_time = debug.end_timer("playouts")
        print(f"Playouts: {playout_time:.4f} seconds total, "
              f"{playout_time / iterations * 1000:.3f} ms per playout")
        print(f"  Red wins {results[Token.RED]}, Yellow wins {results[Token.YELLOW]}, "
              f"draws {results[None]}")

        trials = max(1, self.args.simulations)
        with self._make_evaluator() as evaluator:
            debug.start_timer("best_move_benchmark")
            column = evaluator.best_move(board, Token.RED, trials)
            move_time = debug.end_timer("best_move_benchmark")
            print(f"best_move with {trials} trials per column: {move_time:.4f} seconds "
                  f"(chose column {column}, {evaluator.trials_run} trials)")

            debug.start_timer("probabilities_benchmark")
            evaluator.win_probabilities(board, Token.RED, trials)
            evaluator.win_probabilities(board, Token.YELLOW, trials)
            probability_time = debug.end_timer("probabilities_benchmark")
            print(f"Probability refresh (both tokens): {probability_time:.4f} seconds")

        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    cli = SimpleCLI(argv)
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
