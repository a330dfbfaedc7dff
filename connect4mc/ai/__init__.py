"""
connect4mc.ai - Random playouts and Monte Carlo move evaluation
"""

from connect4mc.ai.playout import simulate_random_playout, play_trial
from connect4mc.ai.evaluator import MonteCarloEvaluator

__all__ = ['simulate_random_playout', 'play_trial', 'MonteCarloEvaluator']
