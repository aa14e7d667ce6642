"""
Base class for the experiment algorithms.

An algorithm takes one fold's dataset, trains whatever it trains and
returns the ClassificationResult of its final classifier on the fold's test
partition. Algorithms that build on recorded ensemble statistics accept
them through `run(..., statistics=...)`.
"""

import time
import warnings
from abc import ABC, abstractmethod
from typing import Optional

from ..config import ExperimentSettings
from ..data.partitions import DataPartitions
from ..ensemble.statistics import EnsembleRecord, EnsembleRecordSet
from ..evaluation.results import ClassificationResult


class Algorithm(ABC):
    """
    Base class for algorithms evaluated in an experiment.

    Parameters:
        settings: Experiment settings
        record_test_predictions: Keep the final classifier's test-set
                                 confidences in `test_record`
        verbose: Whether to print progress

    Attributes:
        test_record: EnsembleRecord of test-set predictions (when recorded)
        running_time: Seconds spent in the last run()
    """

    name = 'algorithm'
    uses_statistics = False

    def __init__(
        self,
        settings: ExperimentSettings,
        record_test_predictions: bool = False,
        verbose: bool = False
    ):
        self.settings = settings
        self.record_test_predictions = record_test_predictions
        self.verbose = verbose
        self.test_record: Optional[EnsembleRecord] = None
        self.running_time = 0.0

    def run(
        self,
        data: DataPartitions,
        fold: int = 0,
        statistics: Optional[EnsembleRecordSet] = None
    ) -> ClassificationResult:
        """
        Run the algorithm on one fold.

        Parameters:
            data: The fold's dataset (not modified)
            fold: Fold number, used in progress output and errors
            statistics: Previously recorded ensemble statistics, for
                        algorithms that use them

        Returns:
            result: ClassificationResult on the fold's test partition
        """
        if statistics is not None and not self.uses_statistics:
            warnings.warn(
                f"{self.name} does not use recorded ensemble statistics; ignoring them",
                RuntimeWarning
            )
            statistics = None

        start = time.perf_counter()
        result = self._run(data, fold, statistics)
        self.running_time = time.perf_counter() - start

        if self.record_test_predictions:
            self.test_record = EnsembleRecord(record_id=fold)
            if result.predictions is not None:
                self.test_record.add_predictions(result.predictions)
        return result

    @abstractmethod
    def _run(
        self,
        data: DataPartitions,
        fold: int,
        statistics: Optional[EnsembleRecordSet]
    ) -> ClassificationResult:
        pass

    def report(self, result: ClassificationResult) -> str:
        """Measures of the experiment for one result, formatted on one line."""
        return ", ".join(
            f"{m.display_name}: {m.evaluate(result):.2f}" for m in self.settings.measures
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}')"
