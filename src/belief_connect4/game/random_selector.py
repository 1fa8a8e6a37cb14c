"""
Weighted selection over a growing list of items.
"""
import numpy as np


class RandomSelector:
    """
    Accumulates nonnegative weights and exposes their normalized probabilities.

    When every weight is zero the items are treated as equally likely.
    """

    def __init__(self):
        self.weights = []
        self.total = 0.0

    def __len__(self):
        return len(self.weights)

    def add(self, weight):
        if weight < 0:
            raise ValueError(f"Weight must be nonnegative, got {weight}")
        self.weights.append(float(weight))
        self.total += weight

    def probability(self, index):
        if self.total <= 0:
            return 1.0 / len(self.weights)
        return self.weights[index] / self.total

    def probabilities(self):
        return np.array([self.probability(i) for i in range(len(self.weights))])

    def select(self, rng=None):
        """Draw an index according to the normalized weights."""
        if not self.weights:
            raise ValueError("Cannot select from an empty selector")
        rng = rng if rng is not None else np.random.default_rng()
        return int(rng.choice(len(self.weights), p=self.probabilities()))
