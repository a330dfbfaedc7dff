"""
status.py - Game status values for Connect Four

GameStatus is one of IN_PROGRESS (with the token to move), WON (with the
winner) or DRAWN. WON and DRAWN are terminal.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from connect4mc.utils import Token


class GameState(Enum):
    """Enumeration of the game states."""
    IN_PROGRESS = auto()
    WON = auto()
    DRAWN = auto()

    def is_game_over(self) -> bool:
        return self != GameState.IN_PROGRESS


@dataclass(frozen=True)
class GameStatus:
    state: GameState
    token: Optional[Token] = None

    @classmethod
    def in_progress(cls, turn: Token) -> 'GameStatus':
        return cls(GameState.IN_PROGRESS, turn)

    @classmethod
    def won(cls, winner: Token) -> 'GameStatus':
        return cls(GameState.WON, winner)

    @classmethod
    def drawn(cls) -> 'GameStatus':
        return cls(GameState.DRAWN)

    @property
    def is_game_over(self) -> bool:
        return self.state.is_game_over()

    @property
    def turn(self) -> Optional[Token]:
        """Token to move, or None once the game has ended."""
        return self.token if self.state == GameState.IN_PROGRESS else None

    @property
    def winner(self) -> Optional[Token]:
        return self.token if self.state == GameState.WON else None

    def __str__(self) -> str:
        if self.state == GameState.IN_PROGRESS:
            return f"{self.token} to move"
        if self.state == GameState.WON:
            return f"{self.token} wins!"
        return "It's a draw!"
