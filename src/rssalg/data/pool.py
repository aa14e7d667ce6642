"""
PoolSampler: the small working subset of unlabeled data used by co-training.

Instead of classifying the whole unlabeled set every iteration, co-training
may classify a pool u' drawn uniformly (without replacement) from it, which
bounds the per-iteration prediction cost (Blum & Mitchell, 1998).
"""

import numpy as np

from ..utils.rng import ExperimentRandom
from .partitions import DataPartitions, POOL, UNLABELED


class PoolSampler:
    """
    Maintains the pool partition of a DataPartitions instance.

    Parameters:
        data: Partitions owning the unlabeled and pool examples
        pool_size: Target pool size (0 disables the pool)
        rng: Experiment random stream; each refill seeds a temporary
             generator from rng.next_seed()

    Example:
        >>> sampler = PoolSampler(data, pool_size=75, rng=ExperimentRandom(42))
        >>> sampler.init()
        >>> data.size('pool')
        75
    """

    def __init__(self, data: DataPartitions, pool_size: int, rng: ExperimentRandom):
        if pool_size < 0:
            raise ValueError(f"pool_size must be non-negative, got {pool_size}")
        self.data = data
        self.pool_size = pool_size
        self.rng = rng
        # a copied dataset may already carry a populated pool
        self.initialized = data.size(POOL) > 0

    @property
    def enabled(self) -> bool:
        return self.pool_size > 0

    def init(self):
        """Fill the pool for the first time (no-op if disabled or already done)."""
        if not self.enabled or self.initialized:
            return
        self.initialized = True
        self.refill()

    def refill(self):
        """Top the pool up to `pool_size` from the unlabeled partition."""
        if not self.enabled:
            return
        n_missing = self.pool_size - self.data.size(POOL)
        if n_missing >= self.data.size(UNLABELED):
            # not enough left to sample from: move everything
            self.data.transfer_all(UNLABELED, POOL)
            return

        generator = np.random.default_rng(self.rng.next_seed())
        while self.data.size(POOL) < self.pool_size:
            unlabeled = self.data.ids(UNLABELED)
            index = int(generator.integers(len(unlabeled)))
            self.data.transfer(unlabeled[index], UNLABELED, POOL)

    def empty(self):
        """Return every pooled example to the unlabeled partition."""
        if not self.enabled:
            return
        self.data.transfer_all(POOL, UNLABELED)

    def resample(self):
        self.empty()
        self.refill()

    def __repr__(self) -> str:
        return f"PoolSampler(pool_size={self.pool_size}, current={self.data.size(POOL)})"
