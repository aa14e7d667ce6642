"""
Tests for RSSalg and the reference algorithms.

Run with: pytest tests/test_algorithms.py -v
"""

import pytest

from rssalg.algorithms import (
    CoTrainingAlgorithm,
    MajorityVoteBaseline,
    RSSalg,
    SupervisedAllBaseline,
    SupervisedLabeledBaseline,
    check_leakage
)
from rssalg.config import CoTrainingSettings, ExperimentSettings, GASettings
from rssalg.data import LABELED, TEST
from rssalg.ensemble import EnsembleRecordSet, load_statistics, save_statistics
from rssalg.exceptions import DataLeakageError, MissingInstanceError


def make_settings(evaluator='rssalg', n_splits=3, **kwargs):
    co_training = CoTrainingSettings(['A', 'B'], growth_size=[2, 2], pool_size=20, iterations=5)
    ga = GASettings(
        population_size=6, max_generations=4, crossover_rate=0.9, mutation_rate=0.05,
        held_out_fraction=0.2
    )
    return ExperimentSettings(
        ['A', 'B'], co_training, ga, n_splits=n_splits, seed=0, evaluator=evaluator, **kwargs
    )


@pytest.fixture
def settings():
    return make_settings()


class TestRSSalg:
    """Test the full RSSalg pipeline."""

    def test_run(self, synthetic_data, settings):
        """Test statistics are recorded and the best candidate is evaluated."""
        algorithm = RSSalg(settings)
        result = algorithm.run(synthetic_data, fold=0)

        assert len(result) == synthetic_data.size(TEST)
        assert result.ids == synthetic_data.ids(TEST)
        assert len(algorithm.statistics) == 3
        assert len(algorithm.split_results) == 3
        assert algorithm.best.is_evaluated
        assert 0 < len(algorithm.best.kept) <= algorithm.statistics.statistic_size
        assert algorithm.running_time > 0
        # the input dataset is not modified
        assert synthetic_data.size(LABELED) == 10
        assert synthetic_data.n_views == 1

    def test_statistics_exclude_test_set(self, synthetic_data, settings):
        algorithm = RSSalg(settings)
        statistics = algorithm.create_statistics(synthetic_data)
        check_leakage(synthetic_data, statistics)
        for instance_id in synthetic_data.ids(TEST):
            assert not statistics.contains(instance_id)

    def test_labeled_examples_fully_agreed(self, synthetic_data, settings):
        """Test originally labeled examples appear in every record with one label."""
        statistics = RSSalg(settings).create_statistics(synthetic_data)
        for instance_id in synthetic_data.ids(LABELED):
            assert statistics.occurrence_percent(instance_id) == 1.0
            assert statistics.agreement_percent(instance_id) == 1.0
            assert statistics.label(instance_id) == synthetic_data.example(instance_id).label

    def test_leakage_detected(self, synthetic_data, settings, record_factory):
        """Test statistics containing a test example are rejected."""
        statistics = RSSalg(settings).create_statistics(synthetic_data)
        leaked = synthetic_data.ids(TEST)[0]
        statistics.add_record(record_factory(99, {leaked: [0.9, 0.1]}))

        with pytest.raises(DataLeakageError, match=f"instance {leaked}"):
            RSSalg(settings).run(synthetic_data, statistics=statistics)

    def test_reuse_saved_statistics(self, synthetic_data, settings, tmp_path):
        """Test the search can rerun on statistics loaded from disk."""
        first = RSSalg(settings)
        first.run(synthetic_data)
        path = tmp_path / 'statistics.json'
        save_statistics(first.statistics, path)

        second = RSSalg(make_settings())
        result = second.run(synthetic_data, statistics=load_statistics(path))

        assert second.statistics.statistic_size == first.statistics.statistic_size
        assert second.split_results == []
        assert len(result) == synthetic_data.size(TEST)

    def test_oracle_evaluator(self, synthetic_data):
        algorithm = RSSalg(make_settings(evaluator='best', n_splits=2))
        algorithm.run(synthetic_data)

        assert algorithm.name == 'RSSalg_best'
        assert algorithm.best.fitness == algorithm.best.true_fitness

    def test_reproducible(self, synthetic_data):
        """Test a fixed seed gives the same statistics and result."""
        first = RSSalg(make_settings())
        second = RSSalg(make_settings())
        result_a = first.run(synthetic_data)
        result_b = second.run(synthetic_data)

        assert first.statistics.ids() == second.statistics.ids()
        assert list(result_a.y_pred) == list(result_b.y_pred)

    def test_record_test_predictions(self, synthetic_data, settings):
        algorithm = RSSalg(settings, record_test_predictions=True)
        algorithm.run(synthetic_data, fold=2)
        assert algorithm.test_record.record_id == 2
        assert len(algorithm.test_record) == synthetic_data.size(TEST)


class TestBaselines:
    """Test the reference algorithms."""

    def test_majority_vote(self, synthetic_data, settings):
        """Test the majority vote of the recorded co-training test predictions."""
        rssalg = RSSalg(settings)
        rssalg.create_statistics(synthetic_data)
        test_statistics = rssalg.cotraining_test_statistics

        baseline = MajorityVoteBaseline(settings, record_test_predictions=True)
        result = baseline.run(synthetic_data, statistics=test_statistics)

        assert len(result) == synthetic_data.size(TEST)
        for instance_id, predicted in zip(result.ids, result.y_pred):
            assert predicted == test_statistics.label(instance_id)
        assert len(baseline.test_record) == synthetic_data.size(TEST)

    def test_majority_vote_needs_statistics(self, synthetic_data, settings):
        with pytest.raises(ValueError, match="recorded test-set statistics"):
            MajorityVoteBaseline(settings).run(synthetic_data)

    def test_majority_vote_missing_instance(self, synthetic_data, settings, record_factory):
        statistics = EnsembleRecordSet(['A', 'B'])
        statistics.add_record(record_factory(0, {synthetic_data.ids(TEST)[0]: [0.9, 0.1]}))
        with pytest.raises(MissingInstanceError, match="missing in the recorded statistics"):
            MajorityVoteBaseline(settings).run(synthetic_data, statistics=statistics)

    def test_co_training(self, synthetic_data, settings):
        algorithm = CoTrainingAlgorithm(settings)
        result = algorithm.run(synthetic_data, fold=1)

        assert len(result) == synthetic_data.size(TEST)
        assert algorithm.trainer.current_iteration == 5
        assert algorithm.trainer.data.n_views == 2

    def test_supervised_baselines(self, synthetic_data, settings):
        labeled = SupervisedLabeledBaseline(settings).run(synthetic_data)
        everything = SupervisedAllBaseline(settings).run(synthetic_data)

        assert len(labeled) == len(everything) == synthetic_data.size(TEST)
        assert synthetic_data.size(LABELED) == 10

    def test_unused_statistics_warn(self, synthetic_data, settings, three_ensemble_statistics):
        with pytest.warns(RuntimeWarning, match="does not use"):
            SupervisedLabeledBaseline(settings).run(
                synthetic_data, statistics=three_ensemble_statistics
            )

    def test_report(self, synthetic_data):
        settings = make_settings(measures=('accuracy', ('f1', 'B')))
        algorithm = SupervisedLabeledBaseline(settings)
        text = algorithm.report(algorithm.run(synthetic_data))
        assert text.startswith("accuracy: ")
        assert "f1(B): " in text
