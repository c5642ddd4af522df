"""The single seeded random stream threaded through every component.

Simulation outcomes depend on the order in which draws are taken, so all
randomness goes through one RandomStream and every call site documents
which draw it consumes.
"""

import numpy as np


class RandomStream:
    def __init__(self, seed):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def fraction(self):
        """Uniform draw in [0, 1)."""
        return float(self.rng.random())

    def index(self, n):
        """Uniform integer in [0, n)."""
        return int(self.rng.integers(0, n))

    def weighted_index(self, weights):
        """Index drawn with probability proportional to ``weights``.

        Takes one ``fraction()`` draw; returns None without consuming a draw
        when the weights sum to zero.
        """
        cumulative = np.cumsum(np.asarray(weights, dtype=np.float64))
        if not cumulative.size or cumulative[-1] <= 0:
            return None
        u = self.fraction() * cumulative[-1]
        return min(int(np.searchsorted(cumulative, u, side="right")), cumulative.size - 1)

    def permutation(self, items):
        items = list(items)
        return [items[i] for i in self.rng.permutation(len(items))]
