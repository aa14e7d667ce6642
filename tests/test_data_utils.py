"""
Tests for the unlabeled pool, feature splitters, random streams and
synthetic data generation.

Run with: pytest tests/test_data_utils.py -v
"""

import numpy as np
import pytest

from rssalg.data import (
    PoolSampler,
    FeatureSplit,
    RandomSplitter,
    DifferentRandomSplitsSplitter,
    random_two_view_split,
    generate_multiview_data,
    LABELED,
    UNLABELED,
    POOL,
    TEST
)
from rssalg.utils import ExperimentRandom


class TestPoolSampler:
    """Test pool initialization and refilling."""

    def test_init_fills_pool(self, small_data):
        """Test the pool reaches its target size from the unlabeled set."""
        sampler = PoolSampler(small_data, pool_size=4, rng=ExperimentRandom(0))
        sampler.init()

        assert small_data.size(POOL) == 4
        assert small_data.size(UNLABELED) == 6
        assert sampler.initialized

    def test_init_only_once(self, small_data):
        sampler = PoolSampler(small_data, pool_size=4, rng=ExperimentRandom(0))
        sampler.init()
        small_data.label_instance(small_data.ids(POOL)[0], 'A', POOL)
        sampler.init()
        assert small_data.size(POOL) == 3

    def test_refill_tops_up(self, small_data):
        """Test a refill replaces labeled pool examples."""
        sampler = PoolSampler(small_data, pool_size=4, rng=ExperimentRandom(0))
        sampler.init()
        for instance_id in small_data.ids(POOL)[:2]:
            small_data.label_instance(instance_id, 'A', POOL)
        sampler.refill()

        assert small_data.size(POOL) == 4
        assert small_data.size(UNLABELED) == 4

    def test_refill_takes_everything_left(self, small_data):
        """Test a pool larger than the unlabeled set takes all of it."""
        sampler = PoolSampler(small_data, pool_size=50, rng=ExperimentRandom(0))
        sampler.init()
        assert small_data.size(POOL) == 10
        assert small_data.size(UNLABELED) == 0

    def test_disabled_pool(self, small_data):
        sampler = PoolSampler(small_data, pool_size=0, rng=ExperimentRandom(0))
        sampler.init()
        assert not sampler.enabled
        assert small_data.size(POOL) == 0

    def test_same_seed_same_pool(self, small_data):
        """Test the pool is reproducible for a fixed seed."""
        other = small_data.copy()
        PoolSampler(small_data, 3, ExperimentRandom(7)).init()
        PoolSampler(other, 3, ExperimentRandom(7)).init()
        assert small_data.ids(POOL) == other.ids(POOL)

    def test_empty_returns_examples(self, small_data):
        sampler = PoolSampler(small_data, pool_size=4, rng=ExperimentRandom(0))
        sampler.init()
        sampler.empty()
        assert small_data.size(POOL) == 0
        assert small_data.size(UNLABELED) == 10

    def test_resample_redraws_full_pool(self, small_data):
        """Test resampling returns the pool and draws a full one again."""
        sampler = PoolSampler(small_data, pool_size=4, rng=ExperimentRandom(0))
        sampler.init()
        small_data.label_instance(small_data.ids(POOL)[0], 'A', POOL)
        sampler.resample()

        assert small_data.size(POOL) == 4
        assert small_data.size(UNLABELED) == 9 - 4
        assert set(small_data.ids(POOL)).isdisjoint(small_data.ids(UNLABELED))
        assert small_data.size(LABELED) == 5

    def test_negative_pool_size(self, small_data):
        with pytest.raises(ValueError, match="non-negative"):
            PoolSampler(small_data, pool_size=-1, rng=ExperimentRandom(0))


class TestFeatureSplits:
    """Test random two-view feature splits."""

    def test_split_covers_features(self):
        """Test both views are disjoint, balanced and cover all features."""
        split = random_two_view_split(7, np.random.default_rng(0))
        first, second = split.views

        assert len(first) == 3
        assert len(second) == 4
        assert sorted(np.concatenate([first, second]).tolist()) == list(range(7))

    def test_too_few_features(self):
        with pytest.raises(ValueError, match="At least 2 features"):
            random_two_view_split(1, np.random.default_rng(0))

    def test_split_equality(self):
        assert FeatureSplit([[1, 0], [2]]) == FeatureSplit([[0, 1], [2]])
        assert FeatureSplit([[0], [1, 2]]) != FeatureSplit([[0, 1], [2]])

    def test_random_splitter_reuses_split(self, synthetic_data):
        """Test the plain random splitter always returns its first split."""
        splitter = RandomSplitter()
        rng = np.random.default_rng(0)
        first = splitter.split_datasets(synthetic_data.copy(), rng, 0)
        second = splitter.split_datasets(synthetic_data.copy(), rng, 1)
        assert first == second

    def test_different_splits(self, synthetic_data):
        """Test every split index maps to a distinct, stable split."""
        splitter = DifferentRandomSplitsSplitter(n_splits=5)
        rng = np.random.default_rng(0)
        splits = [splitter.split_datasets(synthetic_data.copy(), rng, i) for i in range(5)]

        assert len(set(splits)) == 5
        again = splitter.split_datasets(synthetic_data.copy(), rng, 3)
        assert again == splits[3]

    def test_split_index_out_of_range(self, synthetic_data):
        splitter = DifferentRandomSplitsSplitter(n_splits=1)
        rng = np.random.default_rng(0)
        splitter.split_datasets(synthetic_data.copy(), rng, 0)
        with pytest.raises(ValueError, match="out of range"):
            splitter.split_datasets(synthetic_data.copy(), rng, 1)

    def test_split_redefines_views(self, synthetic_data):
        """Test the dataset gets two views over the merged feature set."""
        data = synthetic_data.copy()
        DifferentRandomSplitsSplitter(n_splits=1).split_datasets(data, np.random.default_rng(0), 0)

        assert data.n_views == 2
        assert data.view_matrix(LABELED, 0).shape[0] == data.size(LABELED)
        np.testing.assert_array_equal(
            np.sort(np.concatenate(data.views)), np.arange(6)
        )


class TestExperimentRandom:
    """Test the counted, cloneable random stream."""

    def test_reproducible(self):
        a, b = ExperimentRandom(3), ExperimentRandom(3)
        assert [a.next_seed() for _ in range(5)] == [b.next_seed() for _ in range(5)]

    def test_clone_does_not_advance(self):
        """Test a clone leaves the master's stream where it was."""
        rng = ExperimentRandom(3)
        rng.next_seed()
        reference = ExperimentRandom(3)
        reference.next_seed()

        rng.clone().integers(0, 100, size=10)
        assert rng.calls == 1
        assert rng.next_seed() == reference.next_seed()

    def test_clone_is_fast_forwarded(self):
        """Test a clone continues exactly where the master is."""
        rng = ExperimentRandom(11)
        rng.next_seed()
        rng.next_seed()
        clone = rng.clone()
        assert int(clone.integers(0, 2 ** 31 - 1)) == rng.next_seed()

    def test_restart(self):
        rng = ExperimentRandom(5)
        first = rng.next_seed()
        rng.restart()
        assert rng.calls == 0
        assert rng.next_seed() == first


class TestSyntheticData:
    """Test synthetic dataset generation."""

    def test_sizes(self):
        data = generate_multiview_data(n_labeled=10, n_unlabeled=50, n_test=20, random_state=0)
        assert data.size(LABELED) == 10
        assert data.size(UNLABELED) == 50
        assert data.size(TEST) == 20
        assert data.n_features == 10

    def test_labeled_is_balanced(self):
        data = generate_multiview_data(n_labeled=10, class_names=('A', 'B'), random_state=1)
        labels = data.labels(LABELED)
        assert np.sum(labels == 'A') == 5
        assert np.sum(labels == 'B') == 5

    def test_reproducible(self):
        a = generate_multiview_data(random_state=4)
        b = generate_multiview_data(random_state=4)
        np.testing.assert_array_equal(a.merged_matrix(TEST), b.merged_matrix(TEST))

    def test_invalid_parameters(self):
        with pytest.raises(ValueError, match="n_labeled"):
            generate_multiview_data(n_labeled=1)
        with pytest.raises(ValueError, match="label_noise"):
            generate_multiview_data(label_noise=1.0)
