"""
RSSalg: Reducing the Set of Self-labeled examples by a Genetic algorithm

A framework for semi-supervised ensemble classification research that
improves co-training by repeating it over many random feature splits and
pruning unreliable self-labeled examples:

- Pool-based co-training over multiple feature views
- Ensemble statistics: label agreement / occurrence / entropy per example
- Genetic-algorithm search over the (agreement, occurrence) thresholds
- Final training-set selection and evaluation
"""

__version__ = "0.1.0"

# Errors
from .exceptions import (
    RSSalgError,
    ConfigurationError,
    TrainingError,
    MissingInstanceError,
    DataLeakageError,
    PersistenceError
)

# Configuration
from .config import CoTrainingSettings, GASettings, ExperimentSettings

# Data
from .data import DataPartitions, Example, PoolSampler, generate_multiview_data

# Ensemble statistics
from .ensemble import (
    ConfidenceVector,
    EnsembleRecord,
    EnsembleRecordSet,
    MajorityVoter,
    save_statistics,
    load_statistics
)

# Co-training
from .cotraining import TopKByConfidence, CoTrainingTrainer

# Optimization
from .optimization import Candidate, GAThresholdOptimizer, get_candidate_evaluator

# Algorithms
from .algorithms import (
    RSSalg,
    CoTrainingAlgorithm,
    MajorityVoteBaseline,
    SupervisedLabeledBaseline,
    SupervisedAllBaseline
)

# Utilities
from .utils import ExperimentRandom

__all__ = [
    # Errors
    "RSSalgError",
    "ConfigurationError",
    "TrainingError",
    "MissingInstanceError",
    "DataLeakageError",
    "PersistenceError",

    # Configuration
    "CoTrainingSettings",
    "GASettings",
    "ExperimentSettings",

    # Data
    "DataPartitions",
    "Example",
    "PoolSampler",
    "generate_multiview_data",

    # Ensemble statistics
    "ConfidenceVector",
    "EnsembleRecord",
    "EnsembleRecordSet",
    "MajorityVoter",
    "save_statistics",
    "load_statistics",

    # Co-training
    "TopKByConfidence",
    "CoTrainingTrainer",

    # Optimization
    "Candidate",
    "GAThresholdOptimizer",
    "get_candidate_evaluator",

    # Algorithms
    "RSSalg",
    "CoTrainingAlgorithm",
    "MajorityVoteBaseline",
    "SupervisedLabeledBaseline",
    "SupervisedAllBaseline",

    # Utilities
    "ExperimentRandom",
]
