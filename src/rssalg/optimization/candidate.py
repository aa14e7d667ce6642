"""
Candidate: one (label agreement, example occurrence) threshold pair.

A candidate splits the examples of the ensemble statistics into the ones it
keeps for the final training set and the ones it leaves out:

    kept     = {id : occurrence(id) >= example_threshold
                     and agreement(id) >= label_threshold}
    left_out = every other id in the statistics

Both sets carry the majority-vote label of each example. Two candidates are
equal when they keep the same ids, whatever thresholds produced them, which
lets evaluators reuse the fitness of an equal candidate.
"""

from typing import Dict, FrozenSet, Hashable, Iterable, Optional, Tuple

from ..ensemble.statistics import EnsembleRecordSet

UNEVALUATED = -1.0


class Candidate:
    """
    Threshold pair with its kept / left-out partition.

    Parameters:
        label_threshold: Minimum agreement percentage, in [0, 1]
        example_threshold: Minimum occurrence percentage, in [0, 1]
        statistics: Ensemble statistics the thresholds are applied to

    Attributes:
        kept (dict): id → voted label of the kept examples
        left_out (dict): id → voted label of the other examples
        fitness (float): Optimized measure, UNEVALUATED (-1) until evaluated
        true_fitness (float): Measure on the real test set, if computed
        requested_thresholds (tuple): Thresholds the candidate was built with

    Example:
        >>> candidate = Candidate(0.7, 0.5, statistics)
        >>> sorted(candidate.kept)
        [1, 2]
    """

    def __init__(self, label_threshold: float, example_threshold: float, statistics: EnsembleRecordSet):
        if not 0 <= label_threshold <= 1:
            raise ValueError(f"label_threshold must be in [0, 1], got {label_threshold}")
        if not 0 <= example_threshold <= 1:
            raise ValueError(f"example_threshold must be in [0, 1], got {example_threshold}")

        self.label_threshold = label_threshold
        self.example_threshold = example_threshold
        self.requested_thresholds: Tuple[float, float] = (label_threshold, example_threshold)
        self.fitness = UNEVALUATED
        self.true_fitness = UNEVALUATED

        self.kept: Dict[Hashable, str] = {}
        self.left_out: Dict[Hashable, str] = {}
        for instance_id in statistics.ids():
            label = statistics.label(instance_id)
            if (statistics.occurrence_percent(instance_id) >= example_threshold
                    and statistics.agreement_percent(instance_id) >= label_threshold):
                self.kept[instance_id] = label
            else:
                self.left_out[instance_id] = label
        self._kept_ids: Optional[FrozenSet[Hashable]] = None

    @property
    def kept_ids(self) -> FrozenSet[Hashable]:
        if self._kept_ids is None:
            self._kept_ids = frozenset(self.kept)
        return self._kept_ids

    @property
    def is_evaluated(self) -> bool:
        return self.fitness != UNEVALUATED

    @property
    def thresholds_widened(self) -> bool:
        return (self.label_threshold, self.example_threshold) != self.requested_thresholds

    def set_evaluation(self, fitness: float, true_fitness: float = UNEVALUATED):
        self.fitness = fitness
        self.true_fitness = true_fitness

    def move_to_left_out(self, ids: Iterable[Hashable]):
        """Move kept examples to the left-out set (labels unchanged)."""
        for instance_id in ids:
            self.left_out[instance_id] = self.kept.pop(instance_id)
        self._kept_ids = None

    def widen_thresholds(self, label_threshold: float, example_threshold: float):
        """Record the thresholds that actually describe the (reduced) kept set."""
        self.label_threshold = label_threshold
        self.example_threshold = example_threshold

    def __eq__(self, other) -> bool:
        if not isinstance(other, Candidate):
            return NotImplemented
        return self.kept_ids == other.kept_ids

    def __hash__(self) -> int:
        return hash(self.kept_ids)

    def __lt__(self, other: 'Candidate') -> bool:
        # sorted() puts the fittest candidate first
        return self.fitness > other.fitness

    def __repr__(self) -> str:
        return (
            f"Candidate(label_threshold={self.label_threshold:.2f}, "
            f"example_threshold={self.example_threshold:.2f}, "
            f"kept={len(self.kept)}, fitness={self.fitness:.2f})"
        )

    def describe(self) -> str:
        """One-line human readable description."""
        text = (
            f"Thresholds: label {100 * self.label_threshold:.2f}% of classifiers, "
            f"example {100 * self.example_threshold:.2f}% of the ensembles."
        )
        if self.is_evaluated:
            text += f" Fitness: {self.fitness:.2f};"
            if self.true_fitness != UNEVALUATED:
                text += f" true fitness: {self.true_fitness:.2f};"
            else:
                text += " true fitness not evaluated;"
        else:
            text += " Candidate not evaluated."
        text += f" Instances in the final training set: {len(self.kept)}."
        return text
