"""
AND/OR search engine over belief states for hidden Connect Four.

This module contains the engine components:
- Percept keys and visibility masks
- Belief states and their successor computation
- Explored set for caching search results across games
- Static evaluation of belief states
- AND/OR alpha-beta search with immediate win/threat shortcuts
"""

from belief_connect4.engine.percept import percept_key, decode_percept_key, observe
from belief_connect4.engine.results import Results
from belief_connect4.engine.belief_state import BeliefState
from belief_connect4.engine.explored_set import ExploredSet, SHARED_CACHE
from belief_connect4.engine.evaluation import (
    evaluate_terminal_state,
    evaluate_non_terminal_state,
    evaluate_line,
)
from belief_connect4.engine.search import AndOrSearchEngine, SearchResult

__all__ = [
    'percept_key',
    'decode_percept_key',
    'observe',
    'Results',
    'BeliefState',
    'ExploredSet',
    'SHARED_CACHE',
    'evaluate_terminal_state',
    'evaluate_non_terminal_state',
    'evaluate_line',
    'AndOrSearchEngine',
    'SearchResult',
]
