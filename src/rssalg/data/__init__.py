"""
RSSalg Data Structures

This module contains the partitioned dataset, the unlabeled pool, feature
splitters and synthetic data generation.
"""

from .partitions import (
    Example,
    DataPartitions,
    LABELED,
    UNLABELED,
    POOL,
    TEST,
    PARTITIONS
)
from .pool import PoolSampler
from .splitters import (
    FeatureSplit,
    BaseSplitter,
    RandomSplitter,
    DifferentRandomSplitsSplitter,
    random_two_view_split
)
from .synthetic import generate_multiview_data

__all__ = [
    # Data structures
    "Example",
    "DataPartitions",
    "LABELED",
    "UNLABELED",
    "POOL",
    "TEST",
    "PARTITIONS",
    "PoolSampler",
    # Feature splits
    "FeatureSplit",
    "BaseSplitter",
    "RandomSplitter",
    "DifferentRandomSplitsSplitter",
    "random_two_view_split",
    # Synthetic data generation
    "generate_multiview_data"
]
