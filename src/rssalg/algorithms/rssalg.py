"""
RSSalg: Reducing the Set of Self-labeled examples by a Genetic algorithm.

Co-training adds many wrongly labeled examples when its views are weak.
RSSalg runs co-training many times, each time on a different random
two-view feature split, and records every label decision of every run.
An example that many runs labeled, and labeled the same way, is likely
labeled correctly. A genetic algorithm searches the pair of thresholds on
(agreement, occurrence) that selects the best final training set; a
classifier trained on the merged views of that set is the final model.

Workflow:
    for split in range(n_splits):
        copy the data, redefine its views by the split
        run co-training to completion, recording its EnsembleRecord
    check that no test example appears in the statistics
    best = GA over the thresholds
    train the combined classifier on best.kept, evaluate on the test set
"""

from typing import List, Optional

from ..data.partitions import DataPartitions, TEST
from ..data.splitters import BaseSplitter, DifferentRandomSplitsSplitter, RandomSplitter
from ..ensemble.statistics import EnsembleRecordSet
from ..evaluation.results import ClassificationResult, evaluate_merged_views
from ..exceptions import DataLeakageError
from ..cotraining.trainer import CoTrainingTrainer
from ..optimization.candidate import Candidate
from ..optimization.evaluators import get_candidate_evaluator
from ..optimization.genetic import GAThresholdOptimizer
from .base import Algorithm


def check_leakage(data: DataPartitions, statistics: EnsembleRecordSet):
    """
    Fail if any test example appears in the ensemble statistics.

    Raises:
        DataLeakageError: For the first leaked test id
    """
    for instance_id in data.ids(TEST):
        if statistics.contains(instance_id):
            raise DataLeakageError(instance_id)


class RSSalg(Algorithm):
    """
    Repeated co-training + GA threshold optimization.

    The splitter is kept across runs, so every fold of an experiment uses
    the same feature splits.

    Attributes:
        statistics: Ensemble statistics of the last run (created or given)
        cotraining_test_statistics: Test-set predictions of every co-training
                                    run (input of MajorityVoteBaseline)
        split_results: ClassificationResult of every co-training run
        optimizer: GAThresholdOptimizer of the last run
        best: Winning candidate of the last run

    Example:
        >>> algorithm = RSSalg(settings, verbose=True)
        >>> result = algorithm.run(data, fold=0)
        >>> algorithm.best.describe()
        >>> save_statistics(algorithm.statistics, 'fold_0/statistics.json')
    """

    uses_statistics = True

    def __init__(self, settings, record_test_predictions=False, verbose=False):
        super().__init__(settings, record_test_predictions, verbose)
        if settings.splitter == 'random':
            self.splitter: BaseSplitter = RandomSplitter()
        else:
            self.splitter = DifferentRandomSplitsSplitter(settings.n_splits)
        self.statistics: Optional[EnsembleRecordSet] = None
        self.cotraining_test_statistics: Optional[EnsembleRecordSet] = None
        self.split_results: List[ClassificationResult] = []
        self.optimizer: Optional[GAThresholdOptimizer] = None
        self.best: Optional[Candidate] = None

    @property
    def name(self) -> str:
        return f"RSSalg_{self.settings.evaluator}"

    def create_statistics(self, data: DataPartitions, fold: int = 0) -> EnsembleRecordSet:
        """
        Run co-training once per feature split and collect the records.

        Parameters:
            data: The fold's dataset (not modified)
            fold: Fold number

        Returns:
            statistics: One EnsembleRecord per split
        """
        settings = self.settings
        statistics = EnsembleRecordSet(settings.class_names)
        self.cotraining_test_statistics = EnsembleRecordSet(settings.class_names)
        self.split_results = []

        for split in range(settings.n_splits):
            split_data = data.copy()
            self.splitter.split_datasets(split_data, settings.random.clone(), split)

            trainer = CoTrainingTrainer(
                split_data,
                settings.co_training,
                settings.view_classifier_factories(split_data.n_views),
                rng=settings.random,
                record=True,
                record_id=split,
                fold=fold,
                measures=settings.measures
            )
            result = trainer.run()
            statistics.add_record(trainer.record)
            self.cotraining_test_statistics.add_record(trainer.test_record)
            self.split_results.append(result)

            if self.verbose:
                print(f"Split {split}: {self.report(result)}")
        return statistics

    def _run(self, data, fold, statistics):
        settings = self.settings
        if statistics is None:
            if self.verbose:
                print(f"RSSalg fold {fold}: recording {settings.n_splits} co-training runs")
            statistics = self.create_statistics(data, fold)
        self.statistics = statistics

        check_leakage(data, statistics)

        ga = settings.ga
        if settings.evaluator == 'rssalg':
            evaluator = get_candidate_evaluator(
                'rssalg', settings.combined_classifier, ga.measure,
                held_out_fraction=ga.held_out_fraction,
                compute_true_fitness=ga.compute_true_fitness
            )
        else:
            evaluator = get_candidate_evaluator(
                settings.evaluator, settings.combined_classifier, ga.measure
            )
        self.optimizer = GAThresholdOptimizer(
            ga, evaluator, rng=settings.random.clone(), verbose=self.verbose
        )
        self.best = self.optimizer.optimize(data, statistics)

        final = data.copy()
        final.merge_views()
        final.set_training_set(self.best.kept)
        result = evaluate_merged_views(
            final, settings.combined_classifier,
            record_predictions=self.record_test_predictions, fold=fold
        )
        if self.verbose:
            print(f"{self.name} fold {fold}: {self.report(result)}")
        return result
