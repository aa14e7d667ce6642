"""
RSSalg Evaluation

Classification results, train-then-test helpers and performance measures.
"""

from .results import (
    ClassificationResult,
    perform_test,
    evaluate_merged_views,
    evaluate_combined_views
)
from .measures import Measure, Accuracy, Precision, Recall, F1, get_measure

__all__ = [
    "ClassificationResult",
    "perform_test",
    "evaluate_merged_views",
    "evaluate_combined_views",
    "Measure",
    "Accuracy",
    "Precision",
    "Recall",
    "F1",
    "get_measure"
]
