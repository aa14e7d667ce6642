"""
Ensemble Statistics: what many co-training runs said about each example.

Every completed co-training run contributes one EnsembleRecord (id →
ConfidenceVector for every example the run's ensemble labeled). An
EnsembleRecordSet accumulates the records of all runs and aggregates them,
per example, into Votes:

- vote counts:  for each class, how many records' combined prediction was
                that class
- entropies:    for each class, the sum of -p·ln(p) over every confidence
                p > 0 of every classifier in every record that predicted the
                example

From the votes follow the two reliability statistics thresholded by RSSalg:

    occurrence(id) = |records that predicted id| / |records|
    agreement(id)  = |votes for the majority label| / |records that predicted id|

Usage:
    >>> stats = EnsembleRecordSet(['A', 'B'])
    >>> record = EnsembleRecord(record_id=0)
    >>> record.add_prediction(1, ConfidenceVector([0.9, 0.1], n_classes=2))
    >>> stats.add_record(record)
    >>> stats.occurrence_percent(1), stats.agreement_percent(1)
    (1.0, 1.0)
"""

import numpy as np
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import MissingInstanceError
from .confidence import ConfidenceVector
from .voters import BaseVoter, MajorityVoter


class EnsembleRecord:
    """
    Predictions of one trained ensemble, in insertion order.

    Parameters:
        record_id: Identifying index (the feature split the run used)
    """

    def __init__(self, record_id: int = 0):
        self.record_id = record_id
        self._predictions: Dict[Hashable, ConfidenceVector] = {}

    def add_prediction(self, instance_id: Hashable, confidences: ConfidenceVector):
        """Record (or overwrite) the confidences for one example."""
        if not isinstance(confidences, ConfidenceVector):
            raise TypeError(
                f"Expected a ConfidenceVector for instance {instance_id}, "
                f"got {type(confidences).__name__}"
            )
        self._predictions[instance_id] = confidences

    def add_predictions(self, predictions: Mapping[Hashable, ConfidenceVector]):
        for instance_id, confidences in predictions.items():
            self.add_prediction(instance_id, confidences)

    def ids(self) -> List[Hashable]:
        return list(self._predictions)

    def contains(self, instance_id: Hashable) -> bool:
        return instance_id in self._predictions

    def prediction(self, instance_id: Hashable) -> ConfidenceVector:
        try:
            return self._predictions[instance_id]
        except KeyError:
            raise MissingInstanceError(
                instance_id,
                f"Instance {instance_id} not predicted by ensemble {self.record_id}"
            ) from None

    def items(self) -> Iterator[Tuple[Hashable, ConfidenceVector]]:
        return iter(self._predictions.items())

    def __len__(self) -> int:
        return len(self._predictions)

    def __repr__(self) -> str:
        return f"EnsembleRecord(record_id={self.record_id}, n_predictions={len(self)})"


class LabelVotes:
    """Vote count and accumulated entropy of one class for one example."""

    __slots__ = ('count', 'entropy')

    def __init__(self):
        self.count = 0
        self.entropy = 0.0

    def __repr__(self) -> str:
        return f"LabelVotes(count={self.count}, entropy={self.entropy:.4f})"


class Votes:
    """
    Aggregated votes of one example, one LabelVotes per class.

    Attributes:
        class_names: Canonical class ordering
        number_of_votes: Number of records that predicted the example
    """

    def __init__(self, class_names: Sequence[str]):
        self.class_names = list(class_names)
        self._labels: Dict[str, LabelVotes] = {name: LabelVotes() for name in self.class_names}

    def add_vote(self, class_name: str):
        self._labels[class_name].count += 1

    def add_entropy(self, class_name: str, value: float):
        self._labels[class_name].entropy += value

    def count(self, class_name: str) -> int:
        return self._labels[class_name].count

    def entropy(self, class_name: str) -> float:
        return self._labels[class_name].entropy

    @property
    def number_of_votes(self) -> int:
        return sum(label.count for label in self._labels.values())

    def counts(self) -> np.ndarray:
        """Vote counts in class order."""
        return np.array([self._labels[name].count for name in self.class_names])

    def entropies(self) -> np.ndarray:
        """Accumulated entropies in class order."""
        return np.array([self._labels[name].entropy for name in self.class_names])

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={self._labels[name].count}" for name in self.class_names)
        return f"Votes({parts})"


class EnsembleRecordSet:
    """
    All ensemble records of an experiment plus their per-example aggregation.

    The aggregation (id → Votes) is cached and dropped whenever a record is
    added; it is rebuilt lazily on the next query.

    Parameters:
        class_names: Canonical class ordering
        voter: Rule deciding the label of an example (default: MajorityVoter)

    Example:
        >>> stats = EnsembleRecordSet(['A', 'B'])
        >>> for record in records:
        ...     stats.add_record(record)
        >>> stats.statistic_size
        120
        >>> stats.least_confident(5, stats.ids())
    """

    def __init__(self, class_names: Sequence[str], voter: Optional[BaseVoter] = None):
        if len(class_names) == 0:
            raise ValueError("class_names must not be empty")
        self.class_names = list(class_names)
        self.voter = voter if voter is not None else MajorityVoter()
        self.records: List[EnsembleRecord] = []
        self._votes: Optional[Dict[Hashable, Votes]] = None

    def add_record(self, record: EnsembleRecord):
        self.records.append(record)
        self._votes = None

    def add_records(self, records: Iterable[EnsembleRecord]):
        for record in records:
            self.add_record(record)

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def aggregate(self) -> Dict[Hashable, Votes]:
        """
        Aggregate every record into per-example votes (cached).

        Returns:
            votes: Mapping id → Votes, ids in order of first appearance
        """
        if self._votes is not None:
            return self._votes

        votes: Dict[Hashable, Votes] = {}
        for record in self.records:
            for instance_id, confidences in record.items():
                if confidences.n_classes != len(self.class_names):
                    raise ValueError(
                        f"Instance {instance_id} in ensemble {record.record_id} has "
                        f"{confidences.n_classes} classes, expected {len(self.class_names)}"
                    )
                example_votes = votes.get(instance_id)
                if example_votes is None:
                    example_votes = votes[instance_id] = Votes(self.class_names)

                example_votes.add_vote(confidences.prediction(self.class_names))
                for class_index, name in enumerate(self.class_names):
                    for classifier in range(confidences.n_classifiers):
                        p = confidences.confidence(class_index, classifier)
                        if p != 0:
                            example_votes.add_entropy(name, -p * np.log(p))

        self._votes = votes
        return votes

    def ids(self) -> List[Hashable]:
        """Every id predicted by any record."""
        return list(self.aggregate())

    @property
    def statistic_size(self) -> int:
        return len(self.aggregate())

    def contains(self, instance_id: Hashable) -> bool:
        return instance_id in self.aggregate()

    def votes(self, instance_id: Hashable) -> Votes:
        try:
            return self.aggregate()[instance_id]
        except KeyError:
            raise MissingInstanceError(
                instance_id,
                f"Instance {instance_id} not present in the ensemble statistics"
            ) from None

    def label(self, instance_id: Hashable) -> str:
        """Label of an example decided by the voter."""
        return self.voter.vote(self.votes(instance_id), self.class_names)

    def occurrence_percent(self, instance_id: Hashable) -> float:
        """Fraction of records that predicted the example."""
        return self.votes(instance_id).number_of_votes / len(self.records)

    def agreement_percent(self, instance_id: Hashable) -> float:
        """Fraction of the example's votes that went to its majority label."""
        votes = self.votes(instance_id)
        majority = self.voter.vote(votes, self.class_names)
        return votes.count(majority) / votes.number_of_votes

    def min_occurrence_percent(self, ids: Optional[Iterable[Hashable]] = None) -> float:
        ids = self.ids() if ids is None else ids
        return min((self.occurrence_percent(i) for i in ids), default=1.0)

    def min_agreement_percent(self, ids: Optional[Iterable[Hashable]] = None) -> float:
        ids = self.ids() if ids is None else ids
        return min((self.agreement_percent(i) for i in ids), default=1.0)

    def least_confident(self, n: int, ids: Sequence[Hashable]) -> List[Hashable]:
        """
        The `n` ids of `ids` with the smallest occurrence + agreement.

        Ascending order; ids with equal scores keep their order in `ids`.
        """
        if n <= 0:
            return []
        scored = [
            (self.occurrence_percent(i) + self.agreement_percent(i), position, i)
            for position, i in enumerate(ids)
        ]
        scored.sort(key=lambda item: (item[0], item[1]))
        return [i for _, _, i in scored[:n]]

    def labels(self, ids: Optional[Iterable[Hashable]] = None) -> Dict[Hashable, str]:
        """Voted label of each id (all known ids by default)."""
        ids = self.ids() if ids is None else ids
        return {i: self.label(i) for i in ids}

    def entropy_confidences(self, instance_id: Hashable) -> ConfidenceVector:
        """Per-class accumulated entropies of an example as a ConfidenceVector."""
        return ConfidenceVector(self.votes(instance_id).entropies(), len(self.class_names))

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return (
            f"EnsembleRecordSet(n_records={len(self.records)}, "
            f"n_classes={len(self.class_names)})"
        )

    def summary(self) -> str:
        """Get detailed summary of the statistics."""
        lines = [
            "=" * 50,
            "EnsembleRecordSet Summary",
            "=" * 50,
            f"Number of ensembles:      {len(self.records)}",
            f"Statistic size:           {self.statistic_size}",
        ]
        if self.statistic_size > 0:
            lines += [
                f"Min occurrence:           {self.min_occurrence_percent():.3f}",
                f"Min agreement:            {self.min_agreement_percent():.3f}",
            ]
        lines.append("=" * 50)
        return "\n".join(lines)
