"""
connect4mc - Connect Four against a Monte Carlo playout opponent

This package provides the board model, random-playout simulation, the
move evaluator that turns playout results into moves and win probabilities,
and a game controller that runs human vs. computer games.
"""

# Version number
__version__ = '0.1.0'
