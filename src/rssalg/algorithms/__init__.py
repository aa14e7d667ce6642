"""
RSSalg Algorithms

RSSalg itself and the reference algorithms it is compared against.
"""

from .base import Algorithm
from .rssalg import RSSalg, check_leakage
from .baselines import (
    CoTrainingAlgorithm,
    MajorityVoteBaseline,
    SupervisedLabeledBaseline,
    SupervisedAllBaseline
)

__all__ = [
    "Algorithm",
    "RSSalg",
    "check_leakage",
    "CoTrainingAlgorithm",
    "MajorityVoteBaseline",
    "SupervisedLabeledBaseline",
    "SupervisedAllBaseline"
]
