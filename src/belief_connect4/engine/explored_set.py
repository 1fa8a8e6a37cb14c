"""
Explored set (transposition cache) for AND/OR search over belief states.

Belief states reached along different lines of play are frequently the same
set of positions with the same relative weights but a different overall
scale. Keys are therefore ordered with BeliefState.compare_to, which compares
normalized weights within a tolerance, and lookups rescale the stored score
by the ratio of probability sums.

Implementation:
- Sorted list of keys with a parallel list of scores (bisect for lookups)
- Ceiling lookup: the smallest stored key >= query, accepted if it compares equal
- Keys are never evicted; one process-wide instance persists across games
"""
from bisect import bisect_left


class ExploredSet:
    """
    Ordered map from canonical belief state to cached search score.

    Not thread-safe: callers that parallelize search must serialize access or
    give each worker its own instance.
    """

    def __init__(self):
        self.keys = []
        self.values = []

        # Statistics
        self.hits = 0
        self.misses = 0
        self.stores = 0

    def __len__(self):
        return len(self.keys)

    def __contains__(self, belief_state):
        return self._find(belief_state) is not None

    def _find(self, belief_state):
        index = bisect_left(self.keys, belief_state)
        if index < len(self.keys) and self.keys[index].compare_to(belief_state) == 0:
            return index
        return None

    def get(self, belief_state):
        """
        Cached score of a belief state, rescaled to its probability mass.

        Args:
            belief_state: Query state

        Returns:
            stored_score * query.proba_sum() / key.proba_sum(), or None if absent
        """
        index = self._find(belief_state)
        if index is None:
            self.misses += 1
            return None

        self.hits += 1
        key_sum = self.keys[index].proba_sum()
        if key_sum <= 0:
            return self.values[index]
        return self.values[index] * belief_state.proba_sum() / key_sum

    def put(self, belief_state, value):
        """Store a score; an equal key already present keeps its key and gets the new value."""
        index = bisect_left(self.keys, belief_state)
        if index < len(self.keys) and self.keys[index].compare_to(belief_state) == 0:
            self.values[index] = value
        else:
            self.keys.insert(index, belief_state)
            self.values.insert(index, value)
        self.stores += 1

    def clear(self):
        """Clear all entries."""
        self.keys = []
        self.values = []
        self._reset_stats()

    def _reset_stats(self):
        self.hits = 0
        self.misses = 0
        self.stores = 0

    def get_stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with hits, misses, hit rate, stores and size
        """
        total_queries = self.hits + self.misses
        hit_rate = self.hits / total_queries if total_queries > 0 else 0.0

        return {
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': hit_rate,
            'stores': self.stores,
            'size_entries': len(self.keys),
        }


# Shared across searches and games
SHARED_CACHE = ExploredSet()
