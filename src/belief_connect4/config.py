"""
Configuration for the belief-state Connect Four engine.
"""

# Search Configuration
SEARCH_CONFIG = {
    'depth': 6,                         # AND/OR plies below the root move
    'proba_threshold': 1e-5,            # Drop belief members below this normalized weight
    'threat_threshold': 0.30,           # Block when an opponent win is this likely
    'compare_tolerance': 1e-3,          # Normalized weights closer than this compare equal
    'canonical_digits': 6,              # Rounding of normalized weights in cache keys
    'score_digits': 4,                  # Rounding of cached scores
    'verbose': False,
}

# Match Configuration (host loop around the engine)
MATCH_CONFIG = {
    'num_games': 10,
    'engine_starts': True,
    'seed': None,
    'depth': 4,                         # Shallower than SEARCH_CONFIG for series runs
}
