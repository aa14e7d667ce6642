"""
Shared fixtures for the RSSalg test suite.

Datasets here are tiny and well separated so that the deterministic
nearest-centroid classifier ('centroid') gives predictable selections.
"""

import numpy as np
import pytest

from rssalg.data import DataPartitions, generate_multiview_data
from rssalg.ensemble import ConfidenceVector, EnsembleRecord, EnsembleRecordSet


CLASS_NAMES = ['A', 'B']


@pytest.fixture
def class_names():
    return list(CLASS_NAMES)


@pytest.fixture
def small_data():
    """
    4 labeled (2 A, 2 B), 10 unlabeled, 4 test examples in 2-D.

    Ids: labeled 0-3, unlabeled 4-13, test 14-17. Unlabeled examples 4-8
    lie near the A cluster at (0, 0), 9-13 near the B cluster at (10, 10).
    """
    X_labeled = np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]])
    y_labeled = ['A', 'A', 'B', 'B']
    X_unlabeled = np.array(
        [[0.5 * i, 0.3 * i] for i in range(1, 6)]
        + [[10.0 - 0.5 * i, 10.0 - 0.3 * i] for i in range(1, 6)]
    )
    y_unlabeled = ['A'] * 5 + ['B'] * 5
    X_test = np.array([[0.2, 0.2], [1.0, 0.0], [9.8, 10.2], [9.0, 9.5]])
    y_test = ['A', 'A', 'B', 'B']
    return DataPartitions.from_arrays(
        X_labeled, y_labeled, X_unlabeled, X_test, y_test,
        class_names=CLASS_NAMES, y_unlabeled=y_unlabeled
    )


@pytest.fixture
def synthetic_data():
    """Larger random dataset (6 features) for end-to-end runs."""
    return generate_multiview_data(
        n_labeled=10, n_unlabeled=60, n_test=30, n_features=6,
        separation=3.0, random_state=0
    )


def make_record(record_id, predictions, n_classes=2):
    """EnsembleRecord from {id: flat confidence list}."""
    record = EnsembleRecord(record_id)
    for instance_id, values in predictions.items():
        record.add_prediction(instance_id, ConfidenceVector(values, n_classes))
    return record


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def three_ensemble_statistics():
    """
    Statistics of 3 ensembles:
    - id 1: predicted 'A' by all 3 (agreement 1.0, occurrence 1.0)
    - id 2: predicted 'A', 'A', 'B' (agreement 2/3, occurrence 1.0)
    - id 3: predicted 'A' by 1 ensemble (agreement 1.0, occurrence 1/3)
    """
    statistics = EnsembleRecordSet(CLASS_NAMES)
    statistics.add_record(make_record(0, {1: [0.9, 0.1], 2: [0.8, 0.2], 3: [0.7, 0.3]}))
    statistics.add_record(make_record(1, {1: [0.95, 0.05], 2: [0.6, 0.4]}))
    statistics.add_record(make_record(2, {1: [0.85, 0.15], 2: [0.3, 0.7]}))
    return statistics
