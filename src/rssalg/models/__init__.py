"""
RSSalg Models

Classifier capability over scikit-learn estimators.
"""

from .classifiers import (
    CentroidClassifier,
    ClassifierFactory,
    available_classifiers,
    get_classifier_factory,
    train_classifier,
    predict_distribution
)

__all__ = [
    "CentroidClassifier",
    "ClassifierFactory",
    "available_classifiers",
    "get_classifier_factory",
    "train_classifier",
    "predict_distribution"
]
