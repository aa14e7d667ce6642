"""
Counted, cloneable random number generation.

An experiment owns a single ExperimentRandom. Components that need their own
stream (the feature splitter, the genetic algorithm) receive a clone: a fresh
generator built from the same seed and fast-forwarded by replaying every draw
made so far. The clone therefore never consumes the master's entropy, and
results stay reproducible for a fixed seed and call sequence.

Usage:
    >>> rng = ExperimentRandom(seed=42)
    >>> seed = rng.next_seed()        # counted draw
    >>> gen = rng.clone()             # numpy Generator at the same position
"""

import numpy as np

_SEED_BOUND = 2 ** 31 - 1


class ExperimentRandom:
    """
    Seeded generator that tracks how many draws it has served.

    Parameters:
        seed: Seed of the experiment (default 42)
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.restart()

    def restart(self):
        """Reset the stream to its initial state."""
        self._generator = np.random.default_rng(self.seed)
        self.calls = 0

    def next_seed(self) -> int:
        """Draw the next integer, usable as a seed for a temporary generator."""
        value = int(self._generator.integers(0, _SEED_BOUND))
        self.calls += 1
        return value

    def clone(self) -> np.random.Generator:
        """
        Fresh generator fast-forwarded to the current position.

        Returns:
            numpy Generator that has replayed `calls` draws of next_seed()
        """
        generator = np.random.default_rng(self.seed)
        for _ in range(self.calls):
            generator.integers(0, _SEED_BOUND)
        return generator

    def restarted(self) -> np.random.Generator:
        """Generator at the very beginning of the stream."""
        return np.random.default_rng(self.seed)

    def __repr__(self) -> str:
        return f"ExperimentRandom(seed={self.seed}, calls={self.calls})"
