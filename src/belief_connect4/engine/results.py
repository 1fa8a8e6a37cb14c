"""
Outcome of expanding a belief state: one successor belief state per percept.
"""


class Results:
    """
    Mapping from percept key to the belief state of positions producing it.

    Iteration yields belief states in sorted percept-key order.
    """

    def __init__(self):
        self.results = {}

    def __len__(self):
        return len(self.results)

    def __contains__(self, percept):
        return percept in self.results

    def __iter__(self):
        for percept in sorted(self.results):
            yield self.results[percept]

    def get(self, percept):
        """Belief state for a percept, or None if that percept cannot occur."""
        return self.results.get(percept)

    def put(self, percept, belief_state):
        self.results[percept] = belief_state

    def keys(self):
        return sorted(self.results)

    def items(self):
        return [(percept, self.results[percept]) for percept in sorted(self.results)]

    def is_empty(self):
        return not self.results
