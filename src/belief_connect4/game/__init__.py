"""
Concrete game collaborators: positions, weighted selection and the opponent model.
"""

from belief_connect4.game.game_state import GameState
from belief_connect4.game.random_selector import RandomSelector
from belief_connect4.game.opponent import ProbabilisticOpponent

__all__ = [
    'GameState',
    'RandomSelector',
    'ProbabilisticOpponent',
]
