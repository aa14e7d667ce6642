"""
RSSalg Ensemble Statistics

This module contains the confidence vectors, voting rules and the
multi-run statistics that RSSalg thresholds, plus their persistence.
"""

from .confidence import ConfidenceVector
from .voters import BaseVoter, MajorityVoter
from .statistics import EnsembleRecord, LabelVotes, Votes, EnsembleRecordSet
from .persistence import (
    save_statistics,
    load_statistics,
    statistics_to_dict,
    statistics_from_dict
)

__all__ = [
    "ConfidenceVector",
    # Voting
    "BaseVoter",
    "MajorityVoter",
    # Statistics
    "EnsembleRecord",
    "LabelVotes",
    "Votes",
    "EnsembleRecordSet",
    # Persistence
    "save_statistics",
    "load_statistics",
    "statistics_to_dict",
    "statistics_from_dict"
]
