"""
Reference algorithms RSSalg is compared against.

- CoTrainingAlgorithm: a single co-training run on one random feature split
- MajorityVoteBaseline: majority vote of many recorded co-training runs on
  the test set
- SupervisedLabeledBaseline: supervised classifier on the labeled data only
  (lower bound)
- SupervisedAllBaseline: supervised classifier on all training data with
  its true labels (upper bound)
"""

import warnings

from ..data.partitions import LABELED, POOL, TEST, UNLABELED
from ..data.splitters import RandomSplitter
from ..cotraining.trainer import CoTrainingTrainer
from ..ensemble.statistics import EnsembleRecordSet
from ..evaluation.results import ClassificationResult, evaluate_merged_views
from ..exceptions import MissingInstanceError
from .base import Algorithm


class CoTrainingAlgorithm(Algorithm):
    """
    Plain co-training on one random two-view split.

    The split is drawn once and reused for every fold.
    """

    name = 'Co-training'

    def __init__(self, settings, record_test_predictions=False, verbose=False):
        super().__init__(settings, record_test_predictions, verbose)
        self.splitter = RandomSplitter()
        self.trainer = None

    def _run(self, data, fold, statistics):
        split_data = data.copy()
        self.splitter.split_datasets(split_data, self.settings.random.clone(), 0)
        self.trainer = CoTrainingTrainer(
            split_data,
            self.settings.co_training,
            self.settings.view_classifier_factories(split_data.n_views),
            rng=self.settings.random,
            record=self.record_test_predictions,
            fold=fold,
            measures=self.settings.measures,
            verbose=self.verbose
        )
        return self.trainer.run()


class MajorityVoteBaseline(Algorithm):
    """
    Labels every test example by the majority vote of recorded ensembles.

    `statistics` must hold test-set predictions (e.g.
    RSSalg.cotraining_test_statistics). The recorded confidences of a
    prediction are the per-class accumulated entropies.

    Raises:
        ValueError: If no statistics are given
        MissingInstanceError: If a test example is missing from the statistics
    """

    name = 'MajorityVote_of_Co-training_classifiers_on_test_set'
    uses_statistics = True

    def _run(self, data, fold, statistics: EnsembleRecordSet):
        if statistics is None:
            raise ValueError(f"{self.name} needs recorded test-set statistics")

        test_ids = data.ids(TEST)
        missing = [i for i in test_ids if not statistics.contains(i)]
        if missing:
            raise MissingInstanceError(
                missing[0],
                f"Instance {missing[0]} from the test set is missing in the recorded statistics "
                f"({len(missing)} missing)"
            )
        if statistics.statistic_size != len(test_ids):
            warnings.warn(
                f"Recorded statistics cover {statistics.statistic_size} instances, "
                f"test set has {len(test_ids)}",
                RuntimeWarning
            )

        y_pred = [statistics.label(i) for i in test_ids]
        predictions = None
        if self.record_test_predictions:
            predictions = {i: statistics.entropy_confidences(i) for i in test_ids}
        return ClassificationResult(
            data.class_names, test_ids, data.labels(TEST), y_pred, predictions
        )


class SupervisedLabeledBaseline(Algorithm):
    """Combined classifier trained on the initially labeled data only."""

    name = 'Supervised_experiment_L'

    def _run(self, data, fold, statistics):
        working = data.copy()
        working.merge_views()
        return evaluate_merged_views(
            working, self.settings.combined_classifier,
            record_predictions=self.record_test_predictions, fold=fold
        )


class SupervisedAllBaseline(Algorithm):
    """
    Combined classifier trained on labeled + unlabeled + pool data using the
    true labels of the unlabeled data.
    """

    name = 'Supervised_experiment_All'

    def _run(self, data, fold, statistics):
        working = data.copy()
        working.merge_views()

        n_missing = 0
        for source in (UNLABELED, POOL):
            for instance_id in working.ids(source):
                truth = working.example(instance_id).true_label
                if truth is None:
                    n_missing += 1
                    continue
                working.label_instance(instance_id, truth, source)
        if n_missing > 0:
            warnings.warn(
                f"{n_missing} unlabeled instances have no true label and are left out "
                f"of the training set",
                RuntimeWarning
            )

        if self.verbose:
            print(f"{self.name}: training on {working.size(LABELED)} instances")
        return evaluate_merged_views(
            working, self.settings.combined_classifier,
            record_predictions=self.record_test_predictions, fold=fold
        )
