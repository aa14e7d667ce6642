"""
Benchmark RSSalg vs. Co-training and Supervised Baselines

Tests the key hypothesis: does pruning the self-labeled examples of many
co-training runs (RSSalg) beat a single co-training run, especially when the
views are weak (low class separation)?

Comparison methods:
1. Supervised on the labeled data only (lower bound)
2. Co-training on one random feature split
3. Majority vote of the co-training runs on the test set
4. RSSalg (held-out fitness) and RSSalg_best (oracle fitness)
5. Supervised on all training data with true labels (upper bound)

Metrics: accuracy (primary), macro F1
"""

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from rssalg import (
    CoTrainingSettings,
    GASettings,
    ExperimentSettings,
    RSSalg,
    CoTrainingAlgorithm,
    MajorityVoteBaseline,
    SupervisedLabeledBaseline,
    SupervisedAllBaseline,
    generate_multiview_data,
    save_statistics
)


def make_settings(seed: int, n_splits: int, evaluator: str = 'rssalg') -> ExperimentSettings:
    """Experiment settings shared by every method of one trial."""
    co_training = CoTrainingSettings(
        ['A', 'B'], growth_size={'A': 1, 'B': 1}, pool_size=50, iterations=20
    )
    ga = GASettings(
        population_size=20,
        max_generations=20,
        crossover_rate=0.9,
        mutation_rate=0.02,
        held_out_fraction=0.2,
        no_improvement_generations=5,
        compute_true_fitness=True
    )
    return ExperimentSettings(
        ['A', 'B'], co_training, ga,
        n_splits=n_splits,
        seed=seed,
        view_classifiers=('naive_bayes',),
        combined_classifier='naive_bayes',
        evaluator=evaluator,
        measures=('accuracy', 'f1')
    )


def run_single_experiment(
    separation: float,
    seed: int,
    n_splits: int = 20,
    statistics_dir: Path = None
) -> pd.DataFrame:
    """
    Run every method on one synthetic dataset.

    Parameters:
    -----------
    separation : float
        Distance between the class means (lower = weaker views)
    seed : int
        Seed of the dataset and of the experiment
    n_splits : int
        Co-training runs recorded by RSSalg
    statistics_dir : Path or None
        Where to save the recorded ensemble statistics

    Returns:
    --------
    results_df : DataFrame
        One row per method
    """
    data = generate_multiview_data(
        n_labeled=10, n_unlabeled=400, n_test=200, n_features=10,
        separation=separation, random_state=seed
    )
    settings = make_settings(seed, n_splits)
    rows = []

    def record(algorithm, result):
        row = {'separation': separation, 'seed': seed, 'method': algorithm.name,
               'time': algorithm.running_time}
        for measure in settings.measures:
            row[measure.display_name] = measure.evaluate(result)
        rows.append(row)
        print(f"  {algorithm.name:<55} {algorithm.report(result)}")

    rssalg = RSSalg(settings)
    record(rssalg, rssalg.run(data))
    if statistics_dir is not None:
        save_statistics(rssalg.statistics, statistics_dir / f"sep_{separation}_seed_{seed}.json")

    # the oracle search reuses the recorded statistics
    oracle = RSSalg(make_settings(seed, n_splits, evaluator='best'))
    record(oracle, oracle.run(data, statistics=rssalg.statistics))

    majority = MajorityVoteBaseline(settings)
    record(majority, majority.run(data, statistics=rssalg.cotraining_test_statistics))

    for baseline in (CoTrainingAlgorithm(settings),
                     SupervisedLabeledBaseline(settings),
                     SupervisedAllBaseline(settings)):
        record(baseline, baseline.run(data))

    return pd.DataFrame(rows)


def run_separation_sweep(
    separations: list = [1.0, 1.5, 2.0],
    n_trials: int = 3,
    n_splits: int = 20,
    output_dir: str = 'results/rssalg_benchmark'
) -> pd.DataFrame:
    """Run the benchmark across view strengths and save raw and summary tables."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    statistics_dir = output_path / 'statistics'

    all_results = []
    for separation in separations:
        for trial in range(n_trials):
            seed = 42 + trial
            print(f"\n{'#'*70}")
            print(f"# Separation: {separation:.1f}, Trial: {trial+1}/{n_trials}")
            print(f"{'#'*70}")
            all_results.append(
                run_single_experiment(separation, seed, n_splits, statistics_dir)
            )

    combined_df = pd.concat(all_results, ignore_index=True)
    combined_df.to_csv(output_path / 'raw_results.csv', index=False)
    print(f"\n✓ Raw results saved to: {output_path / 'raw_results.csv'}")

    summary_df = combined_df.groupby(['separation', 'method']).agg({
        'accuracy': ['mean', 'std'],
        'f1': ['mean', 'std'],
        'time': 'mean'
    }).reset_index()
    summary_df.to_csv(output_path / 'summary.csv', index=False)
    print(f"✓ Summary saved to: {output_path / 'summary.csv'}")

    return combined_df


def plot_results(results_df: pd.DataFrame, output_dir: str = 'results/rssalg_benchmark'):
    """Bar chart of the mean accuracy of every method per separation."""
    output_path = Path(output_dir)
    summary = results_df.groupby(['separation', 'method'])['accuracy'].mean().reset_index()
    separations = sorted(summary['separation'].unique())

    fig, axes = plt.subplots(1, len(separations), figsize=(6 * len(separations), 5), squeeze=False)
    for ax, separation in zip(axes[0], separations):
        data = summary[summary['separation'] == separation].sort_values('accuracy', ascending=False)
        x_pos = np.arange(len(data))
        ax.bar(x_pos, data['accuracy'], alpha=0.7, color='skyblue', edgecolor='black')
        ax.set_xticks(x_pos)
        ax.set_xticklabels(data['method'], rotation=45, ha='right', fontsize=8)
        ax.set_ylabel('Accuracy (%)', fontsize=12)
        ax.set_title(f'Separation {separation:.1f}', fontsize=13, fontweight='bold')
        ax.grid(axis='y', alpha=0.3)
        ax.set_ylim([0, 100])

    plt.tight_layout()
    plt.savefig(output_path / 'benchmark_comparison.png', dpi=300, bbox_inches='tight')
    print(f"\n✓ Plot saved to: {output_path / 'benchmark_comparison.png'}")
    plt.close()

    print("\n" + "="*70)
    print("BEST METHOD BY SEPARATION")
    print("="*70)
    for separation in separations:
        data = summary[summary['separation'] == separation]
        best = data.loc[data['accuracy'].idxmax()]
        print(f"  {separation:.1f}: {best['method']} ({best['accuracy']:.2f}%)")


def main():
    parser = argparse.ArgumentParser(
        description="RSSalg benchmark on synthetic multi-view data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default sweep (results/rssalg_benchmark/)
  python rssalg_benchmark.py

  # Quick run
  python rssalg_benchmark.py --trials 1 --splits 5 -o results/quick
        """
    )
    parser.add_argument('--output-dir', '-o', type=str, default='results/rssalg_benchmark',
                        help='Directory to save results (default: results/rssalg_benchmark)')
    parser.add_argument('--trials', type=int, default=3, help='Trials per separation')
    parser.add_argument('--splits', type=int, default=20, help='Co-training runs recorded by RSSalg')
    parser.add_argument('--separations', type=float, nargs='+', default=[1.0, 1.5, 2.0],
                        help='Class separations to test')
    args = parser.parse_args()

    print("\n" + "="*70)
    print("RSSALG BENCHMARK: Does pruning self-labeled examples help?")
    print("="*70)

    results_df = run_separation_sweep(
        separations=args.separations,
        n_trials=args.trials,
        n_splits=args.splits,
        output_dir=args.output_dir
    )
    plot_results(results_df, args.output_dir)


if __name__ == '__main__':
    main()
