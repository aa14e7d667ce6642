"""
Voting Rules for Ensemble Statistics

A voter turns the votes an example collected across many recorded
ensembles into a single label.
"""

from abc import ABC, abstractmethod
from typing import Sequence


class BaseVoter(ABC):
    """
    Base class for voting rules.

    A voter takes the aggregated Votes of one example and the canonical
    class ordering and returns the winning class name.
    """

    @abstractmethod
    def vote(self, votes, class_names: Sequence[str]) -> str:
        """
        Decide the label of one example.

        Parameters:
            votes: Votes aggregated over all records that predicted the example
            class_names: Canonical class ordering

        Returns:
            label: Winning class name
        """
        pass


class MajorityVoter(BaseVoter):
    """
    Plain majority vote.

    The class with the most votes wins; on equal counts the class that comes
    first in `class_names` is kept.

    Example:
        >>> voter = MajorityVoter()
        >>> voter.vote(votes, ['A', 'B'])   # votes: A=2, B=2
        'A'
    """

    def vote(self, votes, class_names):
        best_name = class_names[0]
        best_count = votes.count(best_name)
        for name in class_names[1:]:
            count = votes.count(name)
            if count > best_count:
                best_name, best_count = name, count
        return best_name

    def __repr__(self) -> str:
        return "MajorityVoter()"
