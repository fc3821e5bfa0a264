"""
Seeded linear congruential generator used for every random draw in a maze.

The same seed string always yields the same stream of floats, so sites,
passage weights and therefore the whole maze are reproducible.
"""

from typing import Optional

from ..utils.random import entropy_seed, fold_seed, time_seed

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
TWO_POW_32 = 4294967296  # 2^32


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class SeededLCG:
    """
    32-bit LCG (Numerical Recipes constants) seeded from a string.

    An empty or missing seed draws the initial state from OS entropy, in which
    case the stream is not reproducible.
    """

    def __init__(self, seed: Optional[str] = None):
        """Initialize from a seed string."""
        self.call_count = 0
        self.seed = (seed or "").strip()

        if self.seed:
            state = fold_seed(self.seed)
            if state == 0:
                # Never start the stream from a zero fold
                state = time_seed()
            self.is_deterministic = True
        else:
            state = entropy_seed()
            self.is_deterministic = False

        self.state = _uint32(state)

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self.state = _uint32(LCG_MULTIPLIER * self.state + LCG_INCREMENT)
        return self.state / TWO_POW_32

    def uniform(self, high: float) -> float:
        """Draw a float in [0, high) using a single state transition."""
        return self.random() * high
