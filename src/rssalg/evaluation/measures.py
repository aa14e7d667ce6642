"""
Performance measures over ClassificationResults.

All measures are reported in percent (0-100). Class-dependent measures
(precision, recall, F1) are computed for one target class, or averaged
over all classes when no class is given.
"""

import warnings
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
from sklearn.metrics import accuracy_score, f1_score, precision_score, recall_score

from ..exceptions import ConfigurationError
from .results import ClassificationResult


class Measure(ABC):
    """
    Base class for performance measures.

    Parameters:
        class_name: Target class (class-dependent measures only); None
                    averages over all classes
    """

    name = 'measure'
    class_dependent = False

    def __init__(self, class_name: Optional[str] = None):
        if class_name is not None and not self.class_dependent:
            raise ConfigurationError(f"{self.name} does not take a target class")
        self.class_name = class_name

    def evaluate(self, result: ClassificationResult) -> float:
        """
        Compute the measure in percent.

        Examples without an actual label are ignored. An empty evaluation
        scores 0 (with a RuntimeWarning).
        """
        if self.class_name is not None and self.class_name not in result.class_names:
            raise ConfigurationError(
                f"Unknown class '{self.class_name}' for {self.name}. "
                f"Available: {result.class_names}"
            )
        mask = result.evaluated_mask
        if not np.any(mask):
            warnings.warn(
                f"{self.display_name}: no labeled examples to evaluate, returning 0",
                RuntimeWarning
            )
            return 0.0
        y_true = result.y_true[mask].astype(str)
        y_pred = result.y_pred[mask].astype(str)
        return 100.0 * float(self._score(y_true, y_pred, [str(c) for c in result.class_names]))

    @abstractmethod
    def _score(self, y_true: np.ndarray, y_pred: np.ndarray, labels: list) -> float:
        pass

    @property
    def display_name(self) -> str:
        if self.class_name is None:
            return self.name
        return f"{self.name}({self.class_name})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(class_name={self.class_name!r})"


class Accuracy(Measure):
    name = 'accuracy'

    def _score(self, y_true, y_pred, labels):
        return accuracy_score(y_true, y_pred)


class _PerClassMeasure(Measure):
    class_dependent = True
    _metric = None

    def _score(self, y_true, y_pred, labels):
        metric = type(self)._metric
        if self.class_name is None:
            return metric(y_true, y_pred, labels=labels, average='macro', zero_division=0)
        return metric(
            y_true, y_pred, labels=[str(self.class_name)], average='macro', zero_division=0
        )


class Precision(_PerClassMeasure):
    name = 'precision'
    _metric = precision_score


class Recall(_PerClassMeasure):
    name = 'recall'
    _metric = recall_score


class F1(_PerClassMeasure):
    name = 'f1'
    _metric = f1_score


MEASURES = {
    'accuracy': Accuracy,
    'precision': Precision,
    'recall': Recall,
    'f1': F1,
}


def get_measure(name, class_name: Optional[str] = None) -> Measure:
    """
    Factory function to get a measure by name.

    Parameters:
        name: One of 'accuracy', 'precision', 'recall', 'f1' (or a Measure,
              returned unchanged)
        class_name: Target class for class-dependent measures

    Raises:
        ConfigurationError: If the name is unknown

    Example:
        >>> get_measure('f1', class_name='B').evaluate(result)
        87.5
    """
    if isinstance(name, Measure):
        return name
    if name not in MEASURES:
        raise ConfigurationError(
            f"Unknown measure '{name}'. Available: {list(MEASURES.keys())}"
        )
    return MEASURES[name](class_name)
