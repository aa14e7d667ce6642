"""
Candidate evaluators: the fitness functions of the threshold search.

Training a classifier per candidate is the expensive step of RSSalg, so
evaluators memoize fitness by the candidate's kept id set: a candidate that
keeps exactly the same examples as one evaluated before receives the stored
fitness without training anything.

Two evaluators are available:

- HeldOutCandidateEvaluator ('rssalg'): trains on the kept examples and
  measures the classifier on the left-out examples, using their voted labels
  as ground truth. Needs no access to the real test labels.
- OracleCandidateEvaluator ('best'): trains on the kept examples and
  measures on the real test set. An upper bound for analysis, not a
  deployable method.
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, Hashable, Tuple

from ..data.partitions import DataPartitions
from ..ensemble.statistics import EnsembleRecordSet
from ..evaluation.measures import Measure
from ..exceptions import ConfigurationError
from ..evaluation.results import evaluate_merged_views
from ..models.classifiers import ClassifierFactory
from .candidate import Candidate, UNEVALUATED


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upwards."""
    return int(math.floor(value + 0.5))


class CandidateEvaluator(ABC):
    """
    Base class for candidate evaluators.

    Parameters:
        classifier: Factory of the classifier trained on the kept examples
                    (the experiment's combined classifier)
        measure: Measure used as fitness

    Attributes:
        uses_test_set: Whether evaluation needs the real test partition
        n_evaluations: Candidates actually trained and evaluated
        n_reused: Candidates whose fitness came from the memo
    """

    name = 'base'
    uses_test_set = False

    def __init__(self, classifier: ClassifierFactory, measure: Measure):
        self.classifier = classifier
        self.measure = measure
        self._memo: Dict[FrozenSet[Hashable], Tuple[float, float]] = {}
        self.n_evaluations = 0
        self.n_reused = 0

    def evaluate(self, data: DataPartitions, statistics: EnsembleRecordSet, candidate: Candidate) -> float:
        """
        Compute (or reuse) the fitness of a candidate and store it on the candidate.

        Parameters:
            data: Working dataset (merged views); never modified
            statistics: Ensemble statistics the candidate was built from
            candidate: Candidate to evaluate

        Returns:
            fitness: The candidate's fitness

        Raises:
            TrainingError: If no classifier can be trained on the kept examples
        """
        self.prepare(statistics, candidate)

        key = candidate.kept_ids
        if key in self._memo:
            candidate.set_evaluation(*self._memo[key])
            self.n_reused += 1
            return candidate.fitness

        fitness, true_fitness = self._compute(data, candidate)
        self._memo[key] = (fitness, true_fitness)
        self.n_evaluations += 1
        candidate.set_evaluation(fitness, true_fitness)
        return fitness

    def prepare(self, statistics: EnsembleRecordSet, candidate: Candidate):
        """Adjust the candidate before evaluation (no-op by default)."""

    @abstractmethod
    def _compute(self, data: DataPartitions, candidate: Candidate) -> Tuple[float, float]:
        """
        Train on the kept examples and compute the fitness.

        Returns:
            (fitness, true_fitness): true_fitness is UNEVALUATED when not computed
        """
        pass

    def reset(self):
        """Forget every memoized fitness."""
        self._memo.clear()
        self.n_evaluations = 0
        self.n_reused = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(measure={self.measure.display_name}, "
            f"evaluated={self.n_evaluations}, reused={self.n_reused})"
        )


class HeldOutCandidateEvaluator(CandidateEvaluator):
    """
    Fitness measured on the candidate's own left-out examples.

    When fewer than `held_out_fraction` of the statistics are left out, the
    least confident kept examples are moved to the left-out set until the
    minimum is met, and the candidate's thresholds are widened to the lowest
    agreement / occurrence remaining in the kept set (the requested values
    stay in `candidate.requested_thresholds`).

    Parameters:
        classifier: Factory of the classifier trained on the kept examples
        measure: Measure used as fitness
        held_out_fraction: Minimum share of the statistics used for testing
        compute_true_fitness: Also measure on the real test set (reporting only)
    """

    name = 'rssalg'

    def __init__(
        self,
        classifier: ClassifierFactory,
        measure: Measure,
        held_out_fraction: float = 0.0,
        compute_true_fitness: bool = False
    ):
        if not 0 <= held_out_fraction <= 1:
            raise ValueError(f"held_out_fraction must be in [0, 1], got {held_out_fraction}")
        super().__init__(classifier, measure)
        self.held_out_fraction = held_out_fraction
        self.compute_true_fitness = compute_true_fitness

    @property
    def uses_test_set(self) -> bool:
        return self.compute_true_fitness

    def prepare(self, statistics, candidate):
        min_test = round_half_up(self.held_out_fraction * statistics.statistic_size)
        if len(candidate.left_out) >= min_test:
            return
        to_move = statistics.least_confident(min_test - len(candidate.left_out), list(candidate.kept))
        candidate.move_to_left_out(to_move)
        kept = list(candidate.kept)
        candidate.widen_thresholds(
            statistics.min_agreement_percent(kept),
            statistics.min_occurrence_percent(kept)
        )

    def _compute(self, data, candidate):
        working = data.copy()
        working.set_training_set(candidate.kept)

        true_fitness = UNEVALUATED
        if self.compute_true_fitness:
            true_fitness = self.measure.evaluate(evaluate_merged_views(working, self.classifier))

        working.set_test_set(candidate.left_out)
        fitness = self.measure.evaluate(evaluate_merged_views(working, self.classifier))
        return fitness, true_fitness


class OracleCandidateEvaluator(CandidateEvaluator):
    """Fitness measured on the real test set (fitness == true fitness)."""

    name = 'best'
    uses_test_set = True

    def _compute(self, data, candidate):
        working = data.copy()
        working.set_training_set(candidate.kept)
        fitness = self.measure.evaluate(evaluate_merged_views(working, self.classifier))
        return fitness, fitness


EVALUATORS = {
    'rssalg': HeldOutCandidateEvaluator,
    'best': OracleCandidateEvaluator,
}


def get_candidate_evaluator(name: str, classifier: ClassifierFactory, measure: Measure, **kwargs) -> CandidateEvaluator:
    """
    Factory function to get a candidate evaluator by name.

    Parameters:
        name: 'rssalg' (held-out) or 'best' (oracle)
        classifier: Factory of the classifier trained on the kept examples
        measure: Measure used as fitness
        **kwargs: Evaluator-specific parameters (held_out_fraction,
                  compute_true_fitness for 'rssalg')

    Raises:
        ConfigurationError: If the name is unknown
    """
    if name not in EVALUATORS:
        raise ConfigurationError(
            f"Unknown candidate evaluator '{name}'. Available: {list(EVALUATORS.keys())}"
        )
    return EVALUATORS[name](classifier, measure, **kwargs)
