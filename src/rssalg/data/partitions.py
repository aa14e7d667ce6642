"""
DataPartitions: ownership-tracked container for a co-training experiment.

Every example lives in an arena keyed by its id and is owned by exactly one
of four named partitions:
- labeled:   training data (ground truth or self-assigned labels)
- unlabeled: data still waiting to be labeled
- pool:      small working subset of the unlabeled data (optional)
- test:      held-aside evaluation data

Moving an example between partitions is a transfer of ownership, never a
copy. Views are feature index arrays shared by all partitions, so every view
of a partition holds the same ids in the same order by construction.
"""

import numpy as np
from typing import Dict, Hashable, List, Mapping, Optional, Sequence

from ..exceptions import MissingInstanceError

LABELED = 'labeled'
UNLABELED = 'unlabeled'
POOL = 'pool'
TEST = 'test'
PARTITIONS = (LABELED, UNLABELED, POOL, TEST)

_KEEP = object()


class Example:
    """
    One logical example.

    Attributes:
        id: Identity, unique across all partitions of one experiment
        features: Full feature vector (views select columns of it)
        label: Current class value (None while unlabeled)
        true_label: Ground truth when known, kept for reference
    """

    __slots__ = ('id', 'features', 'label', 'true_label')

    def __init__(
        self,
        instance_id: Hashable,
        features: np.ndarray,
        label: Optional[str] = None,
        true_label: Optional[str] = None
    ):
        self.id = instance_id
        self.features = np.asarray(features, dtype=float)
        self.label = label
        self.true_label = label if true_label is None else true_label

    def copy(self) -> 'Example':
        # feature vectors are never modified in place, sharing them is safe
        return Example(self.id, self.features, self.label, self.true_label)

    def __repr__(self) -> str:
        return f"Example(id={self.id!r}, label={self.label!r})"


class DataPartitions:
    """
    Labeled / unlabeled / pool / test partitions over one example arena.

    Attributes:
        class_names (list): Canonical class ordering of the experiment
        views (list of np.ndarray): Feature indices of each view
        n_features (int): Length of the full feature vector
        n_views (int): Number of views

    Example:
        >>> data = DataPartitions.from_arrays(
        ...     X_labeled, y_labeled, X_unlabeled, X_test, y_test,
        ...     class_names=['A', 'B'])
        >>> data.size('labeled'), data.size('unlabeled')
        (4, 10)
        >>> data.transfer(7, 'unlabeled', 'labeled', label='A')
    """

    def __init__(
        self,
        class_names: Sequence[str],
        n_features: int,
        views: Optional[Sequence[Sequence[int]]] = None
    ):
        if len(class_names) == 0:
            raise ValueError("class_names must not be empty")
        if n_features < 1:
            raise ValueError(f"n_features must be positive, got {n_features}")

        self.class_names = list(class_names)
        self.n_features = n_features
        self._examples: Dict[Hashable, Example] = {}
        self._owner: Dict[Hashable, str] = {}
        # dicts double as insertion-ordered sets
        self._members: Dict[str, Dict[Hashable, None]] = {name: {} for name in PARTITIONS}

        if views is None:
            views = [np.arange(n_features)]
        self.set_views(views)

    @classmethod
    def from_arrays(
        cls,
        X_labeled: np.ndarray,
        y_labeled: Sequence[str],
        X_unlabeled: np.ndarray,
        X_test: np.ndarray,
        y_test: Sequence[str],
        class_names: Sequence[str],
        y_unlabeled: Optional[Sequence[str]] = None,
        views: Optional[Sequence[Sequence[int]]] = None,
        first_id: int = 0
    ) -> 'DataPartitions':
        """
        Build partitions from feature matrices.

        Ids are assigned consecutively from `first_id` in the order
        labeled, unlabeled, test. Ground truth for unlabeled rows
        (`y_unlabeled`) is kept as `true_label` only.
        """
        X_labeled = np.atleast_2d(np.asarray(X_labeled, dtype=float))
        n_features = X_labeled.shape[1]
        data = cls(class_names, n_features, views)

        next_id = first_id
        for x, y in zip(X_labeled, y_labeled):
            data.add(Example(next_id, x, label=y), LABELED)
            next_id += 1
        for i, x in enumerate(np.asarray(X_unlabeled, dtype=float).reshape(-1, n_features)):
            truth = None if y_unlabeled is None else y_unlabeled[i]
            data.add(Example(next_id, x, label=None, true_label=truth), UNLABELED)
            next_id += 1
        for x, y in zip(np.asarray(X_test, dtype=float).reshape(-1, n_features), y_test):
            data.add(Example(next_id, x, label=y), TEST)
            next_id += 1
        return data

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def n_views(self) -> int:
        return len(self.views)

    def set_views(self, views: Sequence[Sequence[int]]):
        """Replace the view definitions (feature index arrays)."""
        checked = []
        for view, indices in enumerate(views):
            indices = np.asarray(indices, dtype=int)
            if indices.ndim != 1 or len(indices) == 0:
                raise ValueError(f"View {view} must be a non-empty 1D index array")
            if indices.min() < 0 or indices.max() >= self.n_features:
                raise ValueError(
                    f"View {view} references features outside [0, {self.n_features})"
                )
            checked.append(indices)
        if len(checked) == 0:
            raise ValueError("At least one view is required")
        self.views = checked

    def merge_views(self):
        """Collapse all views into a single view holding their union."""
        self.views = [np.unique(np.concatenate(self.views))]

    def apply_split(self, feature_split):
        """Redefine views from a FeatureSplit produced by a splitter."""
        self.set_views(feature_split.views)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add(self, example: Example, partition: str):
        """Insert a new example into the arena, owned by `partition`."""
        self._check_partition(partition)
        if example.id in self._examples:
            raise ValueError(
                f"Instance {example.id} already owned by '{self._owner[example.id]}'"
            )
        if example.features.shape != (self.n_features,):
            raise ValueError(
                f"Instance {example.id} has {example.features.shape} features, "
                f"expected ({self.n_features},)"
            )
        self._examples[example.id] = example
        self._owner[example.id] = partition
        self._members[partition][example.id] = None

    def ids(self, partition: str) -> List[Hashable]:
        """Ids owned by `partition`, in partition order."""
        self._check_partition(partition)
        return list(self._members[partition])

    def size(self, partition: str) -> int:
        self._check_partition(partition)
        return len(self._members[partition])

    def contains(self, partition: str, instance_id: Hashable) -> bool:
        return instance_id in self._members[partition]

    def owner(self, instance_id: Hashable) -> str:
        try:
            return self._owner[instance_id]
        except KeyError:
            raise MissingInstanceError(instance_id) from None

    def example(self, instance_id: Hashable) -> Example:
        try:
            return self._examples[instance_id]
        except KeyError:
            raise MissingInstanceError(instance_id) from None

    def examples(self, partition: str) -> List[Example]:
        return [self._examples[i] for i in self.ids(partition)]

    def __len__(self) -> int:
        return len(self._examples)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def transfer(self, instance_id: Hashable, source: str, destination: str, label=_KEEP):
        """
        Move one example from `source` to the end of `destination`.

        Parameters:
            instance_id: Id of the example to move
            source: Partition that must currently own the example
            destination: Partition receiving the example
            label: New class value (unchanged when omitted)

        Raises:
            MissingInstanceError: If `source` does not own the example
        """
        self._check_partition(source)
        self._check_partition(destination)
        if instance_id not in self._members[source]:
            raise MissingInstanceError(
                instance_id,
                f"Instance {instance_id} not found in the '{source}' partition"
            )
        del self._members[source][instance_id]
        self._members[destination][instance_id] = None
        self._owner[instance_id] = destination
        if label is not _KEEP:
            self._examples[instance_id].label = label

    def transfer_all(self, source: str, destination: str):
        for instance_id in self.ids(source):
            self.transfer(instance_id, source, destination)

    def label_instance(self, instance_id: Hashable, label: str, source: str):
        """Relabel an example and move it from `source` into the labeled set."""
        self.transfer(instance_id, source, LABELED, label=label)

    def clear(self, partition: str):
        """Drop every example of `partition` from the arena."""
        for instance_id in self.ids(partition):
            del self._members[partition][instance_id]
            del self._owner[instance_id]
            del self._examples[instance_id]

    def no_more_data_to_label(self) -> bool:
        return self.size(POOL) == 0 and self.size(UNLABELED) == 0

    def set_training_set(self, labels_by_id: Mapping[Hashable, str]):
        """
        Make `labels_by_id` the exact training set.

        Labeled examples missing from the mapping go back to the unlabeled
        partition; the rest are taken from labeled, unlabeled or pool and
        relabeled.

        Raises:
            MissingInstanceError: If an id is not owned by any of those partitions
        """
        remaining = dict(labels_by_id)
        for instance_id in self.ids(LABELED):
            if instance_id in remaining:
                self._examples[instance_id].label = remaining.pop(instance_id)
            else:
                self.transfer(instance_id, LABELED, UNLABELED, label=None)
        for source in (UNLABELED, POOL):
            for instance_id in self.ids(source):
                if instance_id in remaining:
                    self.label_instance(instance_id, remaining.pop(instance_id), source)
        if remaining:
            missing = next(iter(remaining))
            raise MissingInstanceError(
                missing,
                f"Instance {missing} for the training set not found in the dataset"
            )

    def set_test_set(self, labels_by_id: Mapping[Hashable, str]):
        """
        Replace the test set by `labels_by_id`.

        The current test examples are dropped; the listed examples are moved
        from labeled, unlabeled or pool and take the given labels as their
        class value.

        Raises:
            MissingInstanceError: If an id is not owned by any of those partitions
        """
        self.clear(TEST)
        remaining = dict(labels_by_id)
        for source in (LABELED, UNLABELED, POOL):
            for instance_id in self.ids(source):
                if instance_id in remaining:
                    self.transfer(instance_id, source, TEST, label=remaining.pop(instance_id))
        if remaining:
            missing = next(iter(remaining))
            raise MissingInstanceError(
                missing,
                f"Instance {missing} for the test set not found in the dataset"
            )

    # ------------------------------------------------------------------
    # Matrices
    # ------------------------------------------------------------------

    def view_matrix(self, partition: str, view: int) -> np.ndarray:
        """Feature matrix (n_partition × |view|) of one view."""
        columns = self.views[view]
        ids = self.ids(partition)
        if len(ids) == 0:
            return np.empty((0, len(columns)))
        return np.vstack([self._examples[i].features[columns] for i in ids])

    def merged_matrix(self, partition: str) -> np.ndarray:
        """Feature matrix over the union of all views."""
        columns = np.unique(np.concatenate(self.views))
        ids = self.ids(partition)
        if len(ids) == 0:
            return np.empty((0, len(columns)))
        return np.vstack([self._examples[i].features[columns] for i in ids])

    def labels(self, partition: str) -> np.ndarray:
        """Current class values of `partition` (object array, None if unlabeled)."""
        return np.array([self._examples[i].label for i in self.ids(partition)], dtype=object)

    def true_labels(self, partition: str) -> np.ndarray:
        return np.array([self._examples[i].true_label for i in self.ids(partition)], dtype=object)

    # ------------------------------------------------------------------

    def copy(self) -> 'DataPartitions':
        """Independent copy: examples are copied, ownership is preserved."""
        other = DataPartitions(self.class_names, self.n_features, self.views)
        for partition in PARTITIONS:
            for instance_id in self._members[partition]:
                other.add(self._examples[instance_id].copy(), partition)
        return other

    def _check_partition(self, partition: str):
        if partition not in self._members:
            raise ValueError(f"Unknown partition '{partition}'. Available: {list(PARTITIONS)}")

    def __repr__(self) -> str:
        return (
            f"DataPartitions("
            f"n_views={self.n_views}, "
            f"n_labeled={self.size(LABELED)}, "
            f"n_unlabeled={self.size(UNLABELED)}, "
            f"n_pool={self.size(POOL)}, "
            f"n_test={self.size(TEST)})"
        )

    def summary(self) -> str:
        """Get detailed summary of the partitions."""
        labeled = self.labels(LABELED)
        lines = [
            "=" * 50,
            "DataPartitions Summary",
            "=" * 50,
            f"Number of views:          {self.n_views}",
            f"Features per view:        {[len(v) for v in self.views]}",
            f"Total instances:          {len(self)}",
            f"  - Labeled:              {self.size(LABELED)}",
            f"  - Unlabeled:            {self.size(UNLABELED)}",
            f"  - Pool:                 {self.size(POOL)}",
            f"  - Test:                 {self.size(TEST)}",
            "",
            "Labeled class distribution:",
        ]
        for name in self.class_names:
            lines.append(f"  - {name:<22}{np.sum(labeled == name)}")
        lines.append("=" * 50)
        return "\n".join(lines)

