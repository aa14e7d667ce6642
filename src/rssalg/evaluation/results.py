"""
Classification results and the train-then-test helpers that produce them.

A ClassificationResult keeps, for every evaluated example, its id, its
ground-truth label and the predicted label, and optionally the confidence
vector behind the prediction (needed when test-set predictions are recorded
as ensemble statistics).
"""

from typing import Dict, Hashable, List, Optional, Sequence

import numpy as np

from ..data.partitions import DataPartitions, LABELED, TEST
from ..ensemble.confidence import ConfidenceVector
from ..models.classifiers import ClassifierFactory, predict_distribution, train_classifier


class ClassificationResult:
    """
    Predicted vs. actual labels of one evaluation.

    Attributes:
        class_names (list): Canonical class ordering
        ids (list): Evaluated example ids
        y_true (np.ndarray): Actual labels (object array, None if unknown)
        y_pred (np.ndarray): Predicted labels (object array)
        predictions (dict or None): id → ConfidenceVector, when recorded
    """

    def __init__(
        self,
        class_names: Sequence[str],
        ids: Sequence[Hashable] = (),
        y_true: Sequence[Optional[str]] = (),
        y_pred: Sequence[str] = (),
        predictions: Optional[Dict[Hashable, ConfidenceVector]] = None
    ):
        if not len(ids) == len(y_true) == len(y_pred):
            raise ValueError(
                f"Length mismatch: {len(ids)} ids, {len(y_true)} actual labels, "
                f"{len(y_pred)} predictions"
            )
        self.class_names = list(class_names)
        self.ids = list(ids)
        self.y_true = np.array(list(y_true), dtype=object)
        self.y_pred = np.array(list(y_pred), dtype=object)
        self.predictions = predictions

    @classmethod
    def from_confidences(
        cls,
        class_names: Sequence[str],
        ids: Sequence[Hashable],
        y_true: Sequence[Optional[str]],
        confidences: Sequence[ConfidenceVector],
        record_predictions: bool = False
    ) -> 'ClassificationResult':
        """Result whose predictions are the combined predictions of `confidences`."""
        y_pred = [vector.prediction(class_names) for vector in confidences]
        predictions = dict(zip(ids, confidences)) if record_predictions else None
        return cls(class_names, ids, y_true, y_pred, predictions)

    @property
    def evaluated_mask(self) -> np.ndarray:
        """Examples with a known actual label."""
        return np.array([label is not None for label in self.y_true], dtype=bool)

    def true_for_class(self, class_name: str) -> int:
        """Correct predictions of `class_name`."""
        mask = self.evaluated_mask
        return int(np.sum((self.y_pred[mask] == class_name) & (self.y_true[mask] == class_name)))

    def false_for_class(self, class_name: str) -> int:
        """Wrong predictions of `class_name`."""
        mask = self.evaluated_mask
        return int(np.sum((self.y_pred[mask] == class_name) & (self.y_true[mask] != class_name)))

    def n_correct(self) -> int:
        mask = self.evaluated_mask
        return int(np.sum(self.y_pred[mask] == self.y_true[mask]))

    def n_wrong(self) -> int:
        return int(np.sum(self.evaluated_mask)) - self.n_correct()

    def extend(self, other: 'ClassificationResult'):
        """Append the examples of another result (e.g. another fold)."""
        self.ids += other.ids
        self.y_true = np.concatenate([self.y_true, other.y_true])
        self.y_pred = np.concatenate([self.y_pred, other.y_pred])
        if self.predictions is not None and other.predictions is not None:
            self.predictions.update(other.predictions)

    def __len__(self) -> int:
        return len(self.ids)

    def __repr__(self) -> str:
        return (
            f"ClassificationResult(n={len(self)}, correct={self.n_correct()}, "
            f"wrong={self.n_wrong()})"
        )


def perform_test(
    factory: ClassifierFactory,
    X_train: np.ndarray,
    y_train: Sequence[str],
    X_test: np.ndarray,
    y_test: Sequence[Optional[str]],
    ids: Sequence[Hashable],
    class_names: Sequence[str],
    record_predictions: bool = False,
    **context
) -> ClassificationResult:
    """
    Train a fresh classifier and evaluate it on a test set.

    Parameters:
        factory: Source of the unfitted classifier
        X_train, y_train: Training set
        X_test, y_test: Test set (labels may be None where unknown)
        ids: Test example ids
        class_names: Canonical class ordering
        record_predictions: Keep the confidence vector of every test example
        **context: view / iteration / fold, attached to a TrainingError

    Returns:
        result: ClassificationResult on the test set
    """
    model = train_classifier(factory, X_train, y_train, **context)
    P = predict_distribution(model, X_test, class_names)
    confidences = [ConfidenceVector(row, len(class_names)) for row in P]
    return ClassificationResult.from_confidences(
        class_names, ids, y_test, confidences, record_predictions
    )


def evaluate_merged_views(
    data: DataPartitions,
    factory: ClassifierFactory,
    record_predictions: bool = False,
    **context
) -> ClassificationResult:
    """
    Train one classifier on the labeled set using the features of all views
    and evaluate it on the test partition. `data` is not modified.
    """
    return perform_test(
        factory,
        data.merged_matrix(LABELED), data.labels(LABELED),
        data.merged_matrix(TEST), data.labels(TEST),
        data.ids(TEST), data.class_names,
        record_predictions=record_predictions,
        **context
    )


def evaluate_combined_views(
    data: DataPartitions,
    factories: Sequence[ClassifierFactory],
    record_predictions: bool = False,
    **context
) -> ClassificationResult:
    """
    Co-training style evaluation: one classifier per view, combined by
    multiplying their class distributions.

    The recorded confidence vector of a test example holds the distribution
    of every view classifier (views × classes values), so its combined
    prediction is the one evaluated here. `data` is not modified.
    """
    if len(factories) != data.n_views:
        raise ValueError(
            f"Need one classifier per view: {len(factories)} classifiers, {data.n_views} views"
        )
    distributions: List[np.ndarray] = []
    for view, factory in enumerate(factories):
        model = train_classifier(
            factory, data.view_matrix(LABELED, view), data.labels(LABELED),
            view=view, **context
        )
        distributions.append(predict_distribution(model, data.view_matrix(TEST, view), data.class_names))

    n_classes = len(data.class_names)
    stacked = np.stack(distributions, axis=1)
    confidences = [ConfidenceVector(row.ravel(), n_classes) for row in stacked]
    return ClassificationResult.from_confidences(
        data.class_names, data.ids(TEST), data.labels(TEST), confidences, record_predictions
    )
