"""
ConfidenceVector: per-class probabilities produced by an ensemble for one example.

The vector holds one group of |classes| values per classifier, grouped by
classifier, in the canonical class-name order:

    [p(c_0|h_0), ..., p(c_k|h_0), p(c_0|h_1), ..., p(c_k|h_1), ...]

The ensemble's prediction is the argmax of the product of the classifiers'
confidences ("co-training style" combination). Ties go to the first class in
class-name order.

Usage:
    >>> v = ConfidenceVector([0.9, 0.1, 0.6, 0.4], n_classes=2)
    >>> v.n_classifiers
    2
    >>> v.prediction_index()
    0
"""

import numpy as np
from typing import Sequence


class ConfidenceVector:
    """
    Immutable confidence values of one example.

    Parameters:
        values: Flat confidences, |classes| × n_classifiers, grouped by classifier
        n_classes: Number of classes of the experiment

    Raises:
        ValueError: If the length is not a positive multiple of n_classes
    """

    __slots__ = ('values', 'n_classes')

    def __init__(self, values: Sequence[float], n_classes: int):
        values = np.array(values, dtype=float)
        if values.ndim != 1:
            raise ValueError(f"values must be 1D, got shape {values.shape}")
        if n_classes < 1 or len(values) == 0 or len(values) % n_classes != 0:
            raise ValueError(
                f"Confidence vector of length {len(values)} is not a positive "
                f"multiple of {n_classes} classes"
            )
        values.setflags(write=False)
        self.values = values
        self.n_classes = n_classes

    @classmethod
    def from_distributions(cls, distributions: Sequence[Sequence[float]]) -> 'ConfidenceVector':
        """Build from one distribution per classifier (each of length |classes|)."""
        distributions = np.atleast_2d(np.asarray(distributions, dtype=float))
        return cls(distributions.ravel(), distributions.shape[1])

    @classmethod
    def one_hot(cls, class_index: int, n_classes: int) -> 'ConfidenceVector':
        """Confidence 1.0 for `class_index` and 0.0 for the others."""
        values = np.zeros(n_classes)
        values[class_index] = 1.0
        return cls(values, n_classes)

    @property
    def n_classifiers(self) -> int:
        return len(self.values) // self.n_classes

    def confidence(self, class_index: int, classifier: int = 0) -> float:
        """Confidence of one classifier for one class."""
        return float(self.values[classifier * self.n_classes + class_index])

    def by_classifier(self) -> np.ndarray:
        """Confidences as a matrix (n_classifiers × n_classes)."""
        return self.values.reshape(self.n_classifiers, self.n_classes)

    def combined(self) -> np.ndarray:
        """Product of the classifiers' confidences, per class."""
        return np.prod(self.by_classifier(), axis=0)

    def prediction_index(self) -> int:
        # np.argmax returns the first maximum, i.e. the first class on ties
        return int(np.argmax(self.combined()))

    def prediction(self, class_names: Sequence[str]) -> str:
        return class_names[self.prediction_index()]

    def combined_confidence(self) -> float:
        """Combined confidence of the predicted class."""
        return float(self.combined()[self.prediction_index()])

    def tolist(self) -> list:
        return self.values.tolist()

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConfidenceVector):
            return NotImplemented
        return self.n_classes == other.n_classes and np.array_equal(self.values, other.values)

    def __hash__(self) -> int:
        return hash((self.n_classes, self.values.tobytes()))

    def __repr__(self) -> str:
        return f"ConfidenceVector({self.values.tolist()}, n_classes={self.n_classes})"
