"""
Tests for candidates, candidate evaluators and the GA threshold optimizer.

Run with: pytest tests/test_optimization.py -v
"""

import numpy as np
import pytest

from rssalg.algorithms import RSSalg
from rssalg.config import CoTrainingSettings, ExperimentSettings, GASettings
from rssalg.data import DataPartitions, Example, LABELED, UNLABELED, TEST
from rssalg.evaluation import Accuracy
from rssalg.exceptions import ConfigurationError, TrainingError
from rssalg.models import get_classifier_factory
from rssalg.optimization import (
    Candidate,
    GAThresholdOptimizer,
    HeldOutCandidateEvaluator,
    OracleCandidateEvaluator,
    UNEVALUATED,
    decode_percent,
    encode_percent,
    from_bits,
    get_candidate_evaluator,
    to_bits
)
from rssalg.ensemble import EnsembleRecordSet


@pytest.fixture
def statistics_data():
    """
    Unlabeled examples 1, 2, 3 (the ids of three_ensemble_statistics) near
    the A cluster, plus two A test examples.
    """
    data = DataPartitions(['A', 'B'], n_features=2)
    data.add(Example(1, [0.0, 0.0], true_label='A'), UNLABELED)
    data.add(Example(2, [0.5, 0.0], true_label='A'), UNLABELED)
    data.add(Example(3, [0.0, 0.5], true_label='A'), UNLABELED)
    data.add(Example(10, [0.2, 0.2], label='A'), TEST)
    data.add(Example(11, [0.3, 0.1], label='A'), TEST)
    return data


@pytest.fixture
def centroid():
    return get_classifier_factory('centroid')


class TestCandidate:
    """Test threshold candidates."""

    def test_kept_and_left_out(self, three_ensemble_statistics):
        """Test thresholds 0.6 / 0.5 keep ids 1 and 2."""
        candidate = Candidate(0.6, 0.5, three_ensemble_statistics)
        assert sorted(candidate.kept) == [1, 2]
        assert candidate.left_out == {3: 'A'}
        assert candidate.fitness == UNEVALUATED
        assert not candidate.is_evaluated

    def test_thresholds_compare_inclusively(self, three_ensemble_statistics):
        """Test id 2 (agreement 2/3) is kept at 0.6 and left out at 0.7."""
        candidate = Candidate(0.7, 0.5, three_ensemble_statistics)
        assert sorted(candidate.kept) == [1]
        assert candidate.left_out == {2: 'A', 3: 'A'}

        candidate = Candidate(2 / 3, 1 / 3, three_ensemble_statistics)
        assert sorted(candidate.kept) == [1, 2, 3]

    def test_zero_thresholds_keep_everything(self, three_ensemble_statistics):
        candidate = Candidate(0.0, 0.0, three_ensemble_statistics)
        assert sorted(candidate.kept) == [1, 2, 3]
        assert candidate.left_out == {}

    def test_kept_and_left_out_partition_statistics(self, three_ensemble_statistics):
        for label, example in [(0.5, 0.5), (0.9, 0.1), (1.0, 1.0)]:
            candidate = Candidate(label, example, three_ensemble_statistics)
            assert set(candidate.kept).isdisjoint(candidate.left_out)
            assert set(candidate.kept) | set(candidate.left_out) == {1, 2, 3}

    def test_equality_by_kept_ids(self, three_ensemble_statistics):
        """Test different thresholds keeping the same examples are equal."""
        a = Candidate(0.6, 0.5, three_ensemble_statistics)
        b = Candidate(0.55, 0.4, three_ensemble_statistics)
        c = Candidate(1.0, 1.0, three_ensemble_statistics)
        assert a == b
        assert hash(a) == hash(b)
        assert a != c

    def test_sorting_puts_fittest_first(self, three_ensemble_statistics):
        candidates = [Candidate(0.7, 0.5, three_ensemble_statistics) for _ in range(3)]
        for candidate, fitness in zip(candidates, [50.0, 90.0, 70.0]):
            candidate.set_evaluation(fitness)
        assert [c.fitness for c in sorted(candidates)] == [90.0, 70.0, 50.0]

    def test_threshold_range(self, three_ensemble_statistics):
        with pytest.raises(ValueError, match="label_threshold"):
            Candidate(1.2, 0.5, three_ensemble_statistics)
        with pytest.raises(ValueError, match="example_threshold"):
            Candidate(0.5, -0.1, three_ensemble_statistics)

    def test_describe(self, three_ensemble_statistics):
        candidate = Candidate(0.6, 0.5, three_ensemble_statistics)
        assert "not evaluated" in candidate.describe()
        candidate.set_evaluation(80.0)
        assert "Fitness: 80.00" in candidate.describe()
        assert "final training set: 2" in candidate.describe()


class TestEvaluators:
    """Test candidate fitness evaluation."""

    def test_held_out_fitness(self, statistics_data, three_ensemble_statistics, centroid):
        """Test training on the kept examples and testing on the left-out ones."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy())
        candidate = Candidate(0.7, 0.5, three_ensemble_statistics)
        fitness = evaluator.evaluate(statistics_data, three_ensemble_statistics, candidate)

        assert fitness == pytest.approx(100.0)
        assert candidate.fitness == fitness
        assert candidate.true_fitness == UNEVALUATED
        # the working dataset is untouched
        assert statistics_data.size(UNLABELED) == 3
        assert statistics_data.size(LABELED) == 0

    def test_memoization(self, statistics_data, three_ensemble_statistics, centroid):
        """Test an equal candidate reuses the stored fitness without training."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy())
        first = Candidate(0.6, 0.5, three_ensemble_statistics)
        second = Candidate(0.55, 0.4, three_ensemble_statistics)

        evaluator.evaluate(statistics_data, three_ensemble_statistics, first)
        evaluator.evaluate(statistics_data, three_ensemble_statistics, second)

        assert evaluator.n_evaluations == 1
        assert evaluator.n_reused == 1
        assert second.fitness == first.fitness

        evaluator.reset()
        assert evaluator.n_evaluations == 0

    def test_held_out_minimum(self, statistics_data, three_ensemble_statistics, centroid):
        """Test least confident kept examples are held out and thresholds widened."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy(), held_out_fraction=0.67)
        candidate = Candidate(0.0, 0.0, three_ensemble_statistics)
        evaluator.evaluate(statistics_data, three_ensemble_statistics, candidate)

        assert sorted(candidate.kept) == [1]
        assert sorted(candidate.left_out) == [2, 3]
        assert candidate.requested_thresholds == (0.0, 0.0)
        assert candidate.label_threshold == pytest.approx(1.0)
        assert candidate.example_threshold == pytest.approx(1.0)
        assert candidate.thresholds_widened

    def test_true_fitness(self, statistics_data, three_ensemble_statistics, centroid):
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy(), compute_true_fitness=True)
        candidate = Candidate(0.7, 0.5, three_ensemble_statistics)
        evaluator.evaluate(statistics_data, three_ensemble_statistics, candidate)

        assert evaluator.uses_test_set
        assert candidate.true_fitness == pytest.approx(100.0)

    def test_oracle(self, statistics_data, three_ensemble_statistics, centroid):
        """Test the oracle measures on the real test set."""
        evaluator = OracleCandidateEvaluator(centroid, Accuracy())
        candidate = Candidate(0.0, 0.0, three_ensemble_statistics)
        evaluator.evaluate(statistics_data, three_ensemble_statistics, candidate)

        assert evaluator.uses_test_set
        assert candidate.fitness == candidate.true_fitness == pytest.approx(100.0)

    def test_registry(self, centroid):
        assert isinstance(get_candidate_evaluator('best', centroid, Accuracy()), OracleCandidateEvaluator)
        evaluator = get_candidate_evaluator('rssalg', centroid, Accuracy(), held_out_fraction=0.3)
        assert evaluator.held_out_fraction == 0.3
        with pytest.raises(ConfigurationError, match="Unknown candidate evaluator"):
            get_candidate_evaluator('worst', centroid, Accuracy())


class TestEncoding:
    """Test the 8-bit threshold chromosomes."""

    def test_decode_encode_within_one_percent(self):
        for min_bound in range(0, 100):
            for value in range(min_bound, 101):
                decoded = decode_percent(encode_percent(value, min_bound), min_bound)
                assert abs(decoded - value) <= 1

    def test_decode_range(self):
        for min_bound in (0, 33, 66, 99):
            codes = np.arange(256)
            decoded = [decode_percent(code, min_bound) for code in codes]
            assert min(decoded) == min_bound
            assert max(decoded) == 100

    def test_degenerate_range(self):
        assert encode_percent(100, 100) == 0
        assert decode_percent(200, 100) == 100

    def test_bits(self):
        np.testing.assert_array_equal(to_bits(5), [0, 0, 0, 0, 0, 1, 0, 1])
        for code in (0, 1, 128, 200, 255):
            assert from_bits(to_bits(code)) == code


def ga_settings(**kwargs):
    params = dict(population_size=4, max_generations=5, crossover_rate=0.9, mutation_rate=0.1)
    params.update(kwargs)
    return GASettings(**params)


class TestGAThresholdOptimizer:
    """Test the genetic algorithm."""

    def test_operators(self, centroid):
        """Test full-rate crossover swaps and full-rate mutation flips every bit."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy())
        optimizer = GAThresholdOptimizer(
            ga_settings(crossover_rate=1.0, mutation_rate=1.0), evaluator, np.random.default_rng(0)
        )
        assert optimizer.crossover((1, 2), (3, 4)) == ((3, 4), (1, 2))
        assert optimizer.mutate((0, 255)) == (255, 0)

    def test_select_without_fitness(self, three_ensemble_statistics, centroid):
        optimizer = GAThresholdOptimizer(
            ga_settings(), HeldOutCandidateEvaluator(centroid, Accuracy()), np.random.default_rng(0)
        )
        population = [Candidate(0.5, 0.5, three_ensemble_statistics) for _ in range(3)]
        for candidate in population:
            candidate.set_evaluation(0.0)
        assert optimizer.select(population) is population[0]

    def test_optimize(self, statistics_data, three_ensemble_statistics, centroid):
        """Test the search returns an evaluated candidate and records history."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy(), held_out_fraction=0.34)
        optimizer = GAThresholdOptimizer(ga_settings(), evaluator, np.random.default_rng(1))
        best = optimizer.optimize(statistics_data, three_ensemble_statistics)

        assert best.is_evaluated
        assert optimizer.label_min_bound == 66
        assert optimizer.example_min_bound == 33
        assert len(optimizer.history['best_fitness']) == 5
        assert optimizer.generation == 5

        snapshot = optimizer.history['population'][-1].splitlines()
        assert len(snapshot) == 4
        assert snapshot[0].startswith("  0. label")

    def test_elitism_never_loses_best(self, synthetic_run):
        """Test with elitism the generation best never drops."""
        data, statistics = synthetic_run
        evaluator = HeldOutCandidateEvaluator(
            get_classifier_factory('naive_bayes'), Accuracy(), held_out_fraction=0.2
        )
        optimizer = GAThresholdOptimizer(
            ga_settings(population_size=6, max_generations=6), evaluator, np.random.default_rng(3)
        )
        best = optimizer.optimize(data, statistics)

        best_fitness = optimizer.history['best_fitness']
        assert all(b >= a for a, b in zip(best_fitness, best_fitness[1:]))
        so_far = optimizer.history['best_so_far_fitness']
        assert all(b >= a for a, b in zip(so_far, so_far[1:]))
        assert best.fitness == max(best_fitness)

    def test_stops_without_improvement(self, statistics_data, three_ensemble_statistics, centroid):
        """Test the no-improvement window ends the search early."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy(), held_out_fraction=0.34)
        optimizer = GAThresholdOptimizer(
            ga_settings(max_generations=50, no_improvement_generations=2),
            evaluator, np.random.default_rng(0)
        )
        optimizer.optimize(statistics_data, three_ensemble_statistics)

        # every candidate scores 100: generations 1 and 2 bring no improvement
        assert optimizer.generation == 3
        assert optimizer.no_improvement == 2

    def test_test_set_hidden_from_held_out_search(self, statistics_data, centroid):
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy())
        optimizer = GAThresholdOptimizer(ga_settings(), evaluator, np.random.default_rng(0))
        working = optimizer.working_data(statistics_data)
        assert working.size(TEST) == 0
        assert statistics_data.size(TEST) == 2

    def test_training_failure_stops_search(self, statistics_data, three_ensemble_statistics, centroid):
        """Test a candidate whose training set is empty aborts the search."""
        evaluator = HeldOutCandidateEvaluator(centroid, Accuracy(), held_out_fraction=1.0)
        optimizer = GAThresholdOptimizer(ga_settings(), evaluator, np.random.default_rng(0))
        with pytest.raises(TrainingError, match="empty training set"):
            optimizer.optimize(statistics_data, three_ensemble_statistics)
        assert optimizer.history['best_fitness'] == []

    def test_empty_statistics(self, statistics_data, centroid):
        optimizer = GAThresholdOptimizer(
            ga_settings(), HeldOutCandidateEvaluator(centroid, Accuracy()), np.random.default_rng(0)
        )
        with pytest.raises(ValueError, match="empty ensemble statistics"):
            optimizer.optimize(statistics_data, EnsembleRecordSet(['A', 'B']))


@pytest.fixture
def synthetic_run(synthetic_data):
    """Dataset plus statistics recorded by three co-training runs."""
    co_training = CoTrainingSettings(['A', 'B'], growth_size=[2, 2], pool_size=20, iterations=5)
    settings = ExperimentSettings(['A', 'B'], co_training, ga_settings(), n_splits=3, seed=0)
    statistics = RSSalg(settings).create_statistics(synthetic_data)
    return synthetic_data, statistics
