"""
connect4mc.game - Board and game status

The controller lives in connect4mc.game.controller and is not imported here,
since it depends on connect4mc.ai which itself depends on the board.
"""

from connect4mc.game.board import Board
from connect4mc.game.status import GameState, GameStatus

__all__ = ['Board', 'GameState', 'GameStatus']
