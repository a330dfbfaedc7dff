"""
connect4mc.interfaces - User interfaces for the game

Don't import anything here to avoid circular imports.
"""

__all__ = []
