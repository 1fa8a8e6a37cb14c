"""
Decision engine for Connect Four with a partially hidden board.
"""

__version__ = "0.1"
