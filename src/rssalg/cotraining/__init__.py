"""
RSSalg Co-training

The co-training loop and its most-confident selection.
"""

from .queue import Prediction, TopKByConfidence, MostConfidentPredictions
from .trainer import CoTrainingTrainer

__all__ = [
    "Prediction",
    "TopKByConfidence",
    "MostConfidentPredictions",
    "CoTrainingTrainer"
]
