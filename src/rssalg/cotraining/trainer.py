"""
Co-training Trainer

Implements the pool-based co-training loop of Blum & Mitchell (1998):

    repeat until finished():
        1. train one classifier per view on the labeled data
        2. for each view:
             classify the pool (or the whole unlabeled set when the pool
             is disabled) and keep, per class, the growth_size(class)
             most confident predictions
             label the kept examples and move them to the labeled set
        3. refill the pool

The loop stops when there is nothing left to label or, unless the
label-all mode is configured, when the iteration budget is spent.

When recording is enabled, the trainer also builds the EnsembleRecord of
the run: the originally labeled examples (confidence 1 for their class)
plus every prediction the views committed to as a label. These records are
what RSSalg aggregates over many runs.
"""

from typing import Dict, List, Optional, Sequence

from ..config import CoTrainingSettings
from ..data.partitions import DataPartitions, LABELED, POOL, TEST, UNLABELED
from ..data.pool import PoolSampler
from ..ensemble.confidence import ConfidenceVector
from ..ensemble.statistics import EnsembleRecord
from ..evaluation.measures import Accuracy, Measure
from ..evaluation.results import ClassificationResult, evaluate_combined_views, perform_test
from ..exceptions import TrainingError
from ..models.classifiers import ClassifierFactory, predict_distribution, train_classifier
from ..utils.rng import ExperimentRandom
from .queue import MostConfidentPredictions, Prediction


class CoTrainingTrainer:
    """
    One co-training run on one dataset (one fold, one feature split).

    The trainer owns `data` for the duration of the run and mutates it:
    examples move from the unlabeled set (through the pool) into the
    labeled set.

    Attributes:
        data: Partitions being grown
        settings: Co-training parameters
        classifiers: One classifier factory per view
        pool: PoolSampler over `data`
        current_iteration: Completed iterations
        record: EnsembleRecord of the run (None unless recording)
        test_record: Recorded test-set predictions of the final classifier
        history: Per-iteration labeled-set size, number of newly labeled
                 examples and (optionally) test measures

    Example:
        >>> settings = CoTrainingSettings(['A', 'B'], growth_size=[1, 1],
        ...                               pool_size=50, iterations=30)
        >>> trainer = CoTrainingTrainer(data, settings, [nb_factory, nb_factory],
        ...                             rng=ExperimentRandom(42), record=True)
        >>> result = trainer.run()
        >>> len(trainer.record)
        84
    """

    def __init__(
        self,
        data: DataPartitions,
        settings: CoTrainingSettings,
        classifiers: Sequence[ClassifierFactory],
        rng: ExperimentRandom,
        record: bool = False,
        record_id: int = 0,
        fold: Optional[int] = None,
        measures: Optional[Sequence[Measure]] = None,
        verbose: bool = False
    ):
        """
        Initialize a co-training run.

        Parameters:
            data: Dataset with one view per classifier
            settings: Co-training parameters
            classifiers: One classifier factory per view
            rng: Experiment random stream (drives the pool)
            record: Whether to build the run's EnsembleRecord
            record_id: Identifier of the record (the feature split index)
            fold: Fold number, reported in errors and progress output
            measures: Measures reported by test_each_iteration (default: accuracy)
            verbose: Whether to print progress

        Raises:
            ValueError: If the classes or the number of views do not match
        """
        if list(data.class_names) != settings.class_names:
            raise ValueError(
                f"Dataset classes {data.class_names} differ from co-training "
                f"classes {settings.class_names}"
            )
        if len(classifiers) != data.n_views:
            raise ValueError(
                f"Need one classifier per view: {len(classifiers)} classifiers, "
                f"{data.n_views} views"
            )

        self.data = data
        self.settings = settings
        self.classifiers = list(classifiers)
        self.fold = fold
        self.measures = list(measures) if measures is not None else [Accuracy()]
        self.verbose = verbose

        self.pool = PoolSampler(data, settings.pool_size, rng)
        self.pool.init()
        self.current_iteration = 0

        self.record: Optional[EnsembleRecord] = None
        self.test_record: Optional[EnsembleRecord] = None
        if record:
            self._init_record(record_id)

        self.history: Dict[str, list] = {
            'labeled_size': [],
            'n_labeled_in_iteration': [],
            'test_measures': []
        }

    def _init_record(self, record_id: int):
        # originally labeled examples are agreed upon by construction
        self.record = EnsembleRecord(record_id)
        self.test_record = EnsembleRecord(record_id)
        class_names = self.data.class_names
        for example in self.data.examples(LABELED):
            try:
                class_index = class_names.index(example.label)
            except ValueError:
                raise ValueError(
                    f"Labeled instance {example.id} has unknown class {example.label!r}"
                ) from None
            self.record.add_prediction(
                example.id, ConfidenceVector.one_hot(class_index, len(class_names))
            )

    @property
    def source(self) -> str:
        """Partition classified each iteration: the pool, or all unlabeled data."""
        return POOL if self.pool.enabled else UNLABELED

    def _train_view_classifiers(self) -> list:
        labels = self.data.labels(LABELED)
        models = []
        for view, factory in enumerate(self.classifiers):
            try:
                model = train_classifier(factory, self.data.view_matrix(LABELED, view), labels)
            except TrainingError as exc:
                raise TrainingError(
                    "Could not build a view classifier",
                    view=view, iteration=self.current_iteration, fold=self.fold
                ) from exc
            models.append(model)
        return models

    def most_confident(self, model, view: int) -> MostConfidentPredictions:
        """Classify the source partition with one view classifier and keep the top predictions."""
        class_names = self.data.class_names
        source = self.source
        ids = self.data.ids(source)
        selected = MostConfidentPredictions(class_names, self.settings.growth_size)
        if len(ids) == 0:
            return selected

        P = predict_distribution(model, self.data.view_matrix(source, view), class_names)
        for instance_id, row in zip(ids, P):
            selected.add(Prediction(instance_id, ConfidenceVector(row, len(class_names)), class_names))
        return selected

    def run_one_iteration(self) -> int:
        """
        Run one co-training iteration.

        Returns:
            n_labeled: Number of examples moved into the labeled set

        Raises:
            TrainingError: If a view classifier cannot be trained
            MissingInstanceError: If a selected example is not in the source partition
        """
        models = self._train_view_classifiers()

        n_labeled = 0
        for view, model in enumerate(models):
            selected = self.most_confident(model, view)
            for prediction in selected.selected():
                self.data.label_instance(prediction.instance_id, prediction.label, self.source)
                if self.record is not None:
                    self.record.add_prediction(prediction.instance_id, prediction.confidences)
                n_labeled += 1

        self.pool.refill()
        self.current_iteration += 1

        self.history['labeled_size'].append(self.data.size(LABELED))
        self.history['n_labeled_in_iteration'].append(n_labeled)
        return n_labeled

    def finished(self) -> bool:
        """Whether the run is over (nothing left to label, or budget spent)."""
        if self.data.no_more_data_to_label():
            return True
        if not self.settings.label_all_unlabeled:
            return self.current_iteration >= self.settings.iterations
        return False

    def evaluate(self, record_predictions: bool = False) -> ClassificationResult:
        """Co-training style combined classifier on the test partition."""
        return evaluate_combined_views(
            self.data, self.classifiers, record_predictions=record_predictions, fold=self.fold
        )

    def evaluate_views(self) -> List[ClassificationResult]:
        """Each view classifier alone, on its own features of the test partition."""
        return [
            perform_test(
                factory,
                self.data.view_matrix(LABELED, view), self.data.labels(LABELED),
                self.data.view_matrix(TEST, view), self.data.labels(TEST),
                self.data.ids(TEST), self.data.class_names,
                view=view, iteration=self.current_iteration, fold=self.fold
            )
            for view, factory in enumerate(self.classifiers)
        ]

    def _measure_string(self, result: ClassificationResult) -> str:
        return ", ".join(f"{m.display_name}={m.evaluate(result):.2f}" for m in self.measures)

    def _test_iteration(self):
        result = self.evaluate()
        view_results = self.evaluate_views()
        scores = {m.display_name: m.evaluate(result) for m in self.measures}
        scores['views'] = [
            {m.display_name: m.evaluate(r) for m in self.measures} for r in view_results
        ]
        self.history['test_measures'].append(scores)
        if self.verbose:
            print(f"  Iteration {self.current_iteration}: combined {self._measure_string(result)}")
            for view, view_result in enumerate(view_results):
                print(f"    view {view}: {self._measure_string(view_result)}")

    def run(self) -> ClassificationResult:
        """
        Iterate until finished and evaluate the final combined classifier.

        Returns:
            result: ClassificationResult of the combined classifier on the
                    test partition (predictions recorded when recording)
        """
        if self.verbose:
            print(
                f"Co-training (fold={self.fold}, split={self.record_id}): "
                f"labeled={self.data.size(LABELED)}, unlabeled={self.data.size(UNLABELED)}, "
                f"pool={self.data.size(POOL)}"
            )
        if self.settings.test_each_iteration:
            self._test_iteration()

        while not self.finished():
            n_labeled = self.run_one_iteration()
            if self.verbose:
                print(
                    f"  Iteration {self.current_iteration}: labeled {n_labeled} "
                    f"(labeled set: {self.data.size(LABELED)})"
                )
            if self.settings.test_each_iteration:
                self._test_iteration()

        result = self.evaluate(record_predictions=self.record is not None)
        if self.record is not None:
            self.test_record.add_predictions(result.predictions)

        if self.verbose:
            print(
                f"Co-training finished after {self.current_iteration} iterations: "
                f"{self._measure_string(result)}"
            )
        return result

    @property
    def record_id(self) -> Optional[int]:
        return self.record.record_id if self.record is not None else None

    def __repr__(self) -> str:
        return (
            f"CoTrainingTrainer(n_views={self.data.n_views}, "
            f"iteration={self.current_iteration}, finished={self.finished()})"
        )
