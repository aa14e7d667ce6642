"""
Feature splitters: partition the feature set into co-training views.

RSSalg runs co-training on many random two-view splits of the same data.
A splitter is asked for split `split_index` and redefines the views of the
dataset it receives; DifferentRandomSplitsSplitter guarantees that every
index maps to a distinct split and that the same index always returns the
same split (so all folds of an experiment share the splits).
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np

from .partitions import DataPartitions


class FeatureSplit:
    """
    Assignment of feature indices to views.

    Two splits are equal when every view holds the same feature set.
    """

    def __init__(self, views: Sequence[Sequence[int]]):
        self.views = [np.sort(np.asarray(v, dtype=int)) for v in views]

    def feature_indices(self, view: int) -> np.ndarray:
        return self.views[view]

    def __eq__(self, other) -> bool:
        if not isinstance(other, FeatureSplit) or len(self.views) != len(other.views):
            return False
        return all(np.array_equal(a, b) for a, b in zip(self.views, other.views))

    def __hash__(self) -> int:
        return hash(tuple(tuple(v.tolist()) for v in self.views))

    def __repr__(self) -> str:
        return f"FeatureSplit(views={[v.tolist() for v in self.views]})"


class BaseSplitter(ABC):
    """Base class for feature-split strategies."""

    name = 'base'

    @abstractmethod
    def split_datasets(
        self,
        data: DataPartitions,
        rng: np.random.Generator,
        split_index: int
    ) -> FeatureSplit:
        """
        Redefine the views of `data` for split `split_index`.

        Parameters:
            data: Dataset whose views are replaced (all views are merged first)
            rng: Generator used when a new split has to be drawn
            split_index: Index of the requested split

        Returns:
            split: The FeatureSplit applied to `data`
        """
        pass


def random_two_view_split(n_features: int, rng: np.random.Generator) -> FeatureSplit:
    """
    Randomly assign features to two views of (almost) equal size.

    Each feature picks a view by a fair coin flip; once a view is full the
    remaining features go to the other one.
    """
    if n_features < 2:
        raise ValueError(f"At least 2 features are needed for two views, got {n_features}")
    capacity = [n_features // 2, n_features - n_features // 2]
    views: List[List[int]] = [[], []]
    for feature in range(n_features):
        view = int(rng.integers(2))
        if len(views[view]) >= capacity[view]:
            view = 1 - view
        views[view].append(feature)
    return FeatureSplit(views)


class RandomSplitter(BaseSplitter):
    """One random split, drawn once and reused for every request."""

    name = 'Random'

    def __init__(self):
        self.feature_split = None

    def split_datasets(self, data, rng, split_index):
        data.merge_views()
        if self.feature_split is None:
            self.feature_split = random_two_view_split(len(data.views[0]), rng)
        _apply(data, self.feature_split)
        return self.feature_split


class DifferentRandomSplitsSplitter(BaseSplitter):
    """
    Up to `n_splits` pairwise different random splits.

    Parameters:
        n_splits: Number of distinct splits that will be requested
        max_attempts: Draws allowed per split before giving up (small feature
                      sets admit only a few distinct splits)
    """

    name = 'DifferentRandomSplits'

    def __init__(self, n_splits: int, max_attempts: int = 1000):
        if n_splits < 1:
            raise ValueError(f"n_splits must be positive, got {n_splits}")
        self.n_splits = n_splits
        self.max_attempts = max_attempts
        self.splits: List[FeatureSplit] = []

    def _new_split(self, n_features: int, rng: np.random.Generator) -> FeatureSplit:
        for _ in range(self.max_attempts):
            split = random_two_view_split(n_features, rng)
            if split not in self.splits:
                self.splits.append(split)
                return split
        raise ValueError(
            f"Could not draw a new distinct split of {n_features} features "
            f"after {self.max_attempts} attempts ({len(self.splits)} splits exist)"
        )

    def split_datasets(self, data, rng, split_index):
        data.merge_views()
        if split_index < len(self.splits):
            split = self.splits[split_index]
        elif len(self.splits) < self.n_splits:
            split = self._new_split(len(data.views[0]), rng)
        else:
            raise ValueError(
                f"Split index {split_index} out of range for {self.n_splits} splits"
            )
        _apply(data, split)
        return split


def _apply(data: DataPartitions, split: FeatureSplit):
    # split indices are positions inside the merged view
    merged = data.views[0]
    data.set_views([merged[v] for v in split.views])
