"""
Synthetic Data Generation for RSSalg Testing
============================================

Utilities for generating small multi-class datasets, already partitioned
into labeled / unlabeled / test, for demos and tests.

Key Features:
- Gaussian class clusters with controllable separation
- Redundant features, so random two-view splits keep each view informative
- Optional label noise on the initially labeled examples
"""

import numpy as np
from typing import Optional, Sequence

from .partitions import DataPartitions


def generate_multiview_data(
    n_labeled: int = 20,
    n_unlabeled: int = 200,
    n_test: int = 100,
    n_features: int = 10,
    class_names: Sequence[str] = ('A', 'B'),
    separation: float = 2.0,
    label_noise: float = 0.0,
    random_state: Optional[int] = None
) -> DataPartitions:
    """
    Generate a partitioned dataset with one Gaussian cluster per class.

    Every feature carries signal: the class mean of feature j is drawn
    around `separation * class_index`, so any subset of features (any
    view) separates the classes.

    Parameters:
        n_labeled: Number of initially labeled examples (balanced over classes)
        n_unlabeled: Number of unlabeled examples (ground truth kept as true_label)
        n_test: Number of test examples
        n_features: Length of the feature vector
        class_names: Class names, in canonical order
        separation: Distance between neighbouring class means
        label_noise: Fraction of labeled examples given a wrong label
        random_state: Random seed for reproducibility

    Returns:
        data: DataPartitions with a single (merged) view

    Example:
        >>> data = generate_multiview_data(n_labeled=10, n_unlabeled=50,
        ...                                n_test=20, random_state=0)
        >>> data.size('labeled'), data.size('unlabeled'), data.size('test')
        (10, 50, 20)
    """
    if n_labeled < len(class_names):
        raise ValueError(
            f"n_labeled ({n_labeled}) must be at least the number of classes ({len(class_names)})"
        )
    if n_features < 1:
        raise ValueError(f"n_features must be positive, got {n_features}")
    if not 0 <= label_noise < 1:
        raise ValueError(f"label_noise must be in [0, 1), got {label_noise}")

    rng = np.random.default_rng(random_state)
    n_classes = len(class_names)
    means = (
        separation * np.arange(n_classes)[:, None]
        + rng.normal(0, 0.25 * separation, size=(n_classes, n_features))
    )

    def sample(n: int, balanced: bool):
        if balanced:
            y = np.arange(n) % n_classes
            rng.shuffle(y)
        else:
            y = rng.integers(n_classes, size=n)
        X = means[y] + rng.normal(0, 1.0, size=(n, n_features))
        return X, y

    X_labeled, y_labeled = sample(n_labeled, balanced=True)
    X_unlabeled, y_unlabeled = sample(n_unlabeled, balanced=False)
    X_test, y_test = sample(n_test, balanced=False)

    if label_noise > 0:
        n_noisy = int(round(label_noise * n_labeled))
        noisy = rng.choice(n_labeled, n_noisy, replace=False)
        shift = rng.integers(1, n_classes, size=n_noisy) if n_classes > 1 else 0
        y_labeled[noisy] = (y_labeled[noisy] + shift) % n_classes

    names = np.asarray(class_names, dtype=object)
    return DataPartitions.from_arrays(
        X_labeled, names[y_labeled],
        X_unlabeled, X_test, names[y_test],
        class_names=class_names,
        y_unlabeled=names[y_unlabeled]
    )
