"""
config.py - Game configuration for Monte Carlo Connect Four

GameConfig holds everything the front end can change: the simulation budget,
who moves first, which tokens the computer plays and whether probability
vectors are shown.
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet

from connect4mc.utils import Token

DEFAULT_SIMULATIONS = 400
MIN_SIMULATIONS = 50
MAX_SIMULATIONS = 2000
SIMULATION_STEP = 50

# Pause before the computer moves so the human's move is visible first
DEFAULT_THINK_TIME = 0.5

HUMAN_TOKEN = Token.YELLOW
AI_TOKEN = Token.RED


def clamp_simulations(count: int) -> int:
    """Snap a simulation count to the settings range (50-2000, step 50)."""
    count = max(MIN_SIMULATIONS, min(MAX_SIMULATIONS, int(count)))
    # Midpoints always round up
    return (count + SIMULATION_STEP // 2) // SIMULATION_STEP * SIMULATION_STEP


@dataclass(frozen=True)
class GameConfig:
    """
    Settings read by the GameController.

    Attributes:
        simulation_count: Trials per column for best-move search; probability
            display uses a fifth of this
        first_mover: Token that moves first after a reset
        ai_tokens: Tokens played by the computer
        show_probabilities: Whether the front end renders probability vectors
        think_time: Seconds to wait before the computer moves
        workers: Threads used to run evaluation trials
    """
    simulation_count: int = DEFAULT_SIMULATIONS
    first_mover: Token = HUMAN_TOKEN
    ai_tokens: FrozenSet[Token] = field(default_factory=lambda: frozenset({AI_TOKEN}))
    show_probabilities: bool = False
    think_time: float = DEFAULT_THINK_TIME
    workers: int = 1

    def __post_init__(self):
        if isinstance(self.simulation_count, bool) or not isinstance(self.simulation_count, int):
            raise ValueError(f"simulation_count must be an integer, got {self.simulation_count!r}")
        if self.simulation_count < 1:
            raise ValueError(f"simulation_count must be positive, got {self.simulation_count}")
        if not isinstance(self.first_mover, Token):
            raise ValueError(f"first_mover must be a Token, got {self.first_mover!r}")
        if self.think_time < 0:
            raise ValueError(f"think_time must not be negative, got {self.think_time}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        object.__setattr__(self, "ai_tokens", frozenset(self.ai_tokens))

    @classmethod
    def from_settings(cls, simulation_count: int = DEFAULT_SIMULATIONS,
                      user_goes_first: bool = True,
                      show_probabilities: bool = False,
                      **overrides) -> 'GameConfig':
        """
        Build a config from the settings form.

        The user always plays Yellow and the computer Red; user_goes_first
        picks which of them starts. The simulation count is clamped to the
        form's range.
        """
        return cls(
            simulation_count=clamp_simulations(simulation_count),
            first_mover=HUMAN_TOKEN if user_goes_first else AI_TOKEN,
            ai_tokens=frozenset({AI_TOKEN}),
            show_probabilities=show_probabilities,
            **overrides,
        )

    def is_ai(self, token: Token) -> bool:
        return token in self.ai_tokens

    def with_changes(self, **changes) -> 'GameConfig':
        return replace(self, **changes)
