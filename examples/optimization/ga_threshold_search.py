"""
GA Threshold Search on Recorded Ensemble Statistics

Records the statistics of many co-training runs once, then reruns only the
genetic threshold search with different settings (held-out fraction,
elitism) and compares the winning candidates.

Usage:
    python ga_threshold_search.py
    python ga_threshold_search.py --statistics results/statistics.json --plot
"""

import argparse
import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from rssalg import (
    CoTrainingSettings,
    GASettings,
    ExperimentSettings,
    RSSalg,
    generate_multiview_data,
    load_statistics,
    save_statistics
)
from rssalg.models import get_classifier_factory
from rssalg.optimization import GAThresholdOptimizer, get_candidate_evaluator


def record_statistics(data, seed: int, n_splits: int, path: Path):
    """Run RSSalg's co-training phase and save its statistics."""
    co_training = CoTrainingSettings(['A', 'B'], growth_size=[1, 1], pool_size=50, iterations=20)
    settings = ExperimentSettings(['A', 'B'], co_training, GASettings(2, 1, 0.9, 0.02), n_splits=n_splits, seed=seed)

    print(f"Recording {n_splits} co-training runs...")
    statistics = RSSalg(settings, verbose=True).create_statistics(data)
    save_statistics(statistics, path)
    print(f"✓ Statistics saved to: {path}")
    return statistics


def main():
    parser = argparse.ArgumentParser(description="GA threshold search on recorded statistics")
    parser.add_argument('--statistics', type=str, default='results/ga_threshold_search/statistics.json',
                        help='Statistics file (recorded when missing)')
    parser.add_argument('--splits', type=int, default=20, help='Co-training runs to record')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--plot', action='store_true', help='Plot the fitness curves')
    args = parser.parse_args()

    data = generate_multiview_data(
        n_labeled=10, n_unlabeled=400, n_test=200, separation=1.5, random_state=args.seed
    )
    path = Path(args.statistics)
    if path.exists():
        statistics = load_statistics(path)
        print(f"✓ Loaded statistics of {len(statistics)} ensembles from: {path}")
    else:
        statistics = record_statistics(data, args.seed, args.splits, path)

    print()
    print(statistics.summary())

    configurations = [
        ('no held-out minimum', dict(held_out_fraction=0.0)),
        ('20% held out', dict(held_out_fraction=0.2)),
        ('20% held out, no elitism', dict(held_out_fraction=0.2, elitism=False)),
    ]
    classifier = get_classifier_factory('naive_bayes')
    for title, kwargs in configurations:
        ga = GASettings(
            population_size=20, max_generations=30, crossover_rate=0.9, mutation_rate=0.02,
            compute_true_fitness=True, **kwargs
        )
        evaluator = get_candidate_evaluator(
            'rssalg',
            classifier,
            ga.measure,
            held_out_fraction=ga.held_out_fraction,
            compute_true_fitness=True
        )
        optimizer = GAThresholdOptimizer(ga, evaluator, rng=np.random.default_rng(args.seed))
        best = optimizer.optimize(data, statistics)

        print("\n" + "="*70)
        print(title)
        print("="*70)
        print(best.describe())
        print(f"Evaluations: {evaluator.n_evaluations} trained, {evaluator.n_reused} reused")
        print("Final generation:")
        print(optimizer.history['population'][-1])

        if args.plot:
            optimizer.plot_fitness_curves()


if __name__ == '__main__':
    main()
