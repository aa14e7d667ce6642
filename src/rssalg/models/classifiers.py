"""
Classifier capability for RSSalg.

The algorithms only need two things from a classifier: train it on a
labeled partition and obtain a per-class probability distribution for new
examples. Any scikit-learn estimator with `predict_proba` provides both;
this module adds a typed name → factory registry and the adapters that map
the estimator's `classes_` onto the experiment's canonical class ordering.

Usage:
    >>> factory = get_classifier_factory('naive_bayes')
    >>> model = train_classifier(factory, X, y, class_names=['A', 'B'])
    >>> P = predict_distribution(model, X_new, class_names=['A', 'B'])
    >>> P.shape
    (n_new, 2)
"""

from typing import Callable, Dict, Optional, Sequence

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, clone
from sklearn.linear_model import LogisticRegression
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier
from sklearn.ensemble import RandomForestClassifier

from ..exceptions import ConfigurationError, TrainingError


class CentroidClassifier(BaseEstimator, ClassifierMixin):
    """
    Nearest-centroid classifier with softmax confidences.

    Deterministic and fast; the probability of class c is proportional to
    exp(-||x - mu_c||^2 / temperature).

    Parameters
    ----------
    temperature : float
        Softness of the distribution (larger = flatter)
    """

    def __init__(self, temperature=1.0):
        self.temperature = temperature

    def fit(self, X, y):
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        self.classes_ = np.unique(y)
        self.centroids_ = np.array([X[y == c].mean(axis=0) for c in self.classes_])
        return self

    def predict_proba(self, X):
        X = np.asarray(X, dtype=float)
        distances = ((X[:, None, :] - self.centroids_[None, :, :]) ** 2).sum(axis=2)
        logits = -distances / self.temperature
        logits -= logits.max(axis=1, keepdims=True)
        result = np.exp(logits)
        return result / result.sum(axis=1, keepdims=True)

    def predict(self, X):
        return self.classes_[np.argmax(self.predict_proba(X), axis=1)]


_CLASSIFIERS: Dict[str, Callable[..., BaseEstimator]] = {
    'naive_bayes': GaussianNB,
    'decision_tree': DecisionTreeClassifier,
    'random_forest': RandomForestClassifier,
    'logistic_regression': lambda **kwargs: LogisticRegression(**{'max_iter': 1000, **kwargs}),
    'knn': KNeighborsClassifier,
    'svm': lambda **kwargs: SVC(**{'probability': True, **kwargs}),
    'centroid': CentroidClassifier,
}


class ClassifierFactory:
    """
    Produces fresh, unfitted estimators from one prototype.

    Parameters:
        estimator: Unfitted scikit-learn estimator with predict_proba
        name: Display name
    """

    def __init__(self, estimator: BaseEstimator, name: Optional[str] = None):
        if not hasattr(estimator, 'predict_proba'):
            raise ConfigurationError(
                f"{type(estimator).__name__} does not provide predict_proba"
            )
        self.estimator = estimator
        self.name = name or type(estimator).__name__

    def __call__(self) -> BaseEstimator:
        return clone(self.estimator)

    def __repr__(self) -> str:
        return f"ClassifierFactory(name='{self.name}', estimator={self.estimator!r})"


def available_classifiers():
    return list(_CLASSIFIERS)


def get_classifier_factory(name, **kwargs) -> ClassifierFactory:
    """
    Factory function to get a classifier factory by name.

    Parameters:
        name: Registered name, or an unfitted scikit-learn estimator
              (used as the prototype)
        **kwargs: Estimator parameters (registered names only)

    Returns:
        factory: ClassifierFactory producing fresh estimators

    Raises:
        ConfigurationError: If the name is unknown

    Example:
        >>> factory = get_classifier_factory('random_forest', n_estimators=50)
        >>> model = factory()
    """
    if isinstance(name, ClassifierFactory):
        return name
    if isinstance(name, BaseEstimator):
        return ClassifierFactory(name)
    if name not in _CLASSIFIERS:
        raise ConfigurationError(
            f"Unknown classifier '{name}'. Available: {available_classifiers()}"
        )
    return ClassifierFactory(_CLASSIFIERS[name](**kwargs), name=name)


def train_classifier(
    factory: ClassifierFactory,
    X: np.ndarray,
    y: Sequence[str],
    **context
) -> BaseEstimator:
    """
    Fit a fresh estimator.

    Parameters:
        factory: Source of the unfitted estimator
        X: Training features (n × d)
        y: Training labels (n,)
        **context: view / iteration / fold, attached to a TrainingError

    Raises:
        TrainingError: If the training set is empty or the estimator fails
    """
    y = np.asarray(y, dtype=object)
    if len(y) == 0:
        raise TrainingError(f"Cannot train {factory.name} on an empty training set", **context)
    if any(label is None for label in y):
        raise TrainingError(f"Cannot train {factory.name}: training set has unlabeled examples", **context)

    model = factory()
    try:
        model.fit(X, y.astype(str))
    except (ValueError, TypeError, np.linalg.LinAlgError) as exc:
        raise TrainingError(f"Could not build {factory.name} ({exc})", **context) from exc
    return model


def predict_distribution(
    model: BaseEstimator,
    X: np.ndarray,
    class_names: Sequence[str]
) -> np.ndarray:
    """
    Class probabilities in canonical class order.

    Classes the model never saw during training get probability 0.

    Returns:
        P: Probability matrix (n × |class_names|)
    """
    X = np.asarray(X, dtype=float)
    P = np.zeros((X.shape[0], len(class_names)))
    if X.shape[0] == 0:
        return P
    proba = model.predict_proba(X)
    columns = {str(c): j for j, c in enumerate(model.classes_)}
    for k, name in enumerate(class_names):
        j = columns.get(str(name))
        if j is not None:
            P[:, k] = proba[:, j]
    return P
