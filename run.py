#!/usr/bin/env python3
"""
run.py - Main entry point for Monte Carlo Connect Four

Examples:

    # Play against the computer (you are Yellow and move first)
    python run.py play

    # Let the computer open, show probabilities, stronger play
    python run.py play --ai-first --show-probabilities --simulations 1000

    # Evaluate a position (42 cells, top row first: 0 empty, 1 red, 2 yellow)
    python run.py analyze --player yellow --position 0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,2,2,2,1,1,1,0

    # Time playouts and evaluations
    python run.py benchmark --iterations 500 --debug_level info
"""

import os
import sys

# Add the project root to the path so the package imports without installation
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from connect4mc.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
