"""
Genetic Algorithm Threshold Optimizer

Searches the 2-D space of (label agreement, example occurrence) thresholds
for the Candidate whose kept examples make the best training set.

Encoding:
    Each threshold is one 8-bit chromosome: an integer percentage in
    [min_bound, 100] mapped linearly onto [0, 255], where min_bound is the
    lowest agreement (label chromosome) or occurrence (example chromosome)
    observed in the statistics. Thresholds below the observed minimum keep
    the same examples as the minimum itself, so they are never searched.

Per generation:
    1. evaluate every candidate (memoized by the evaluator)
    2. track the best candidate so far and the generations without improvement
    3. build the next generation: the best so far first (elitism), then
       offspring of roulette-selected parents, two per crossover + mutation

The search stops after `max_generations` generations or after the
configured number of generations without improvement.
"""

import math
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..config import GASettings
from ..data.partitions import DataPartitions, TEST
from ..ensemble.statistics import EnsembleRecordSet
from .candidate import Candidate
from .evaluators import CandidateEvaluator, round_half_up

N_BITS = 8
MAX_CODE = 2 ** N_BITS - 1


def encode_percent(value: float, min_bound: int) -> int:
    """
    Map an integer percentage in [min_bound, 100] to a code in [0, 255].

    A degenerate range (min_bound == 100) encodes everything as 0.
    """
    if min_bound >= 100:
        return 0
    code = round_half_up((value - min_bound) * MAX_CODE / (100 - min_bound))
    return int(min(max(code, 0), MAX_CODE))


def decode_percent(code: int, min_bound: int) -> int:
    """Map a code in [0, 255] back to an integer percentage in [min_bound, 100]."""
    if min_bound >= 100:
        return 100
    return round_half_up(min_bound + code * (100 - min_bound) / MAX_CODE)


def to_bits(code: int) -> np.ndarray:
    """8-bit big-endian representation of a code."""
    return np.array([(code >> shift) & 1 for shift in range(N_BITS - 1, -1, -1)], dtype=np.uint8)


def from_bits(bits: np.ndarray) -> int:
    code = 0
    for bit in bits:
        code = (code << 1) | int(bit)
    return code


class GAThresholdOptimizer:
    """
    Binary-encoded genetic algorithm over candidate thresholds.

    Attributes:
        settings: GA parameters
        evaluator: Fitness function (memoizing)
        rng: Random generator of the search
        label_min_bound: Lowest searched label threshold (percent)
        example_min_bound: Lowest searched example threshold (percent)
        best_so_far: Fittest candidate found
        history: Per-generation fitness statistics

    Example:
        >>> optimizer = GAThresholdOptimizer(ga_settings, evaluator,
        ...                                  rng=experiment_random.clone())
        >>> best = optimizer.optimize(data, statistics)
        >>> best.label_threshold, best.example_threshold
        (0.86, 0.7)
        >>> optimizer.plot_fitness_curves()
    """

    def __init__(
        self,
        settings: GASettings,
        evaluator: CandidateEvaluator,
        rng: np.random.Generator,
        verbose: bool = False
    ):
        self.settings = settings
        self.evaluator = evaluator
        self.rng = rng
        self.verbose = verbose

        self.label_min_bound = 0
        self.example_min_bound = 0
        self.best_so_far: Optional[Candidate] = None
        self.no_improvement = 0
        self.generation = 0

        self.history: Dict[str, list] = {
            'best_fitness': [],
            'mean_fitness': [],
            'best_so_far_fitness': [],
            'best_true_fitness': [],
            'n_kept': [],
            'generation': [],
            'population': []
        }

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, candidate: Candidate) -> Tuple[int, int]:
        """(label code, example code) of a candidate's thresholds."""
        return (
            encode_percent(round_half_up(100 * candidate.label_threshold), self.label_min_bound),
            encode_percent(round_half_up(100 * candidate.example_threshold), self.example_min_bound),
        )

    def decode(self, label_code: int, example_code: int, statistics: EnsembleRecordSet) -> Candidate:
        return Candidate(
            decode_percent(label_code, self.label_min_bound) / 100,
            decode_percent(example_code, self.example_min_bound) / 100,
            statistics
        )

    # ------------------------------------------------------------------
    # GA operators
    # ------------------------------------------------------------------

    def initialize(self, statistics: EnsembleRecordSet) -> List[Candidate]:
        """Generation 0: uniformly random integer percentages in [min_bound, 100]."""
        population = []
        for _ in range(self.settings.population_size):
            label = int(self.rng.integers(self.label_min_bound, 101))
            example = int(self.rng.integers(self.example_min_bound, 101))
            population.append(Candidate(label / 100, example / 100, statistics))
        return population

    def select(self, population: List[Candidate]) -> Candidate:
        """Roulette-wheel selection proportional to fitness (with replacement)."""
        total = sum(c.fitness for c in population)
        if total <= 0:
            return population[0]
        threshold = self.rng.random() * total
        running = 0.0
        for candidate in population:
            running += candidate.fitness
            if running > threshold:
                return candidate
        return population[-1]

    def crossover(
        self,
        first: Tuple[int, int],
        second: Tuple[int, int]
    ) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """Uniform crossover: every bit of every chromosome swaps with probability crossover_rate."""
        child_a, child_b = [], []
        for gene_a, gene_b in zip(first, second):
            bits_a, bits_b = to_bits(gene_a), to_bits(gene_b)
            swap = self.rng.random(N_BITS) < self.settings.crossover_rate
            bits_a[swap], bits_b[swap] = bits_b[swap], bits_a[swap]
            child_a.append(from_bits(bits_a))
            child_b.append(from_bits(bits_b))
        return tuple(child_a), tuple(child_b)

    def mutate(self, genes: Tuple[int, int]) -> Tuple[int, int]:
        """Flip every bit of every chromosome with probability mutation_rate."""
        mutated = []
        for gene in genes:
            bits = to_bits(gene)
            flip = self.rng.random(N_BITS) < self.settings.mutation_rate
            bits[flip] ^= 1
            mutated.append(from_bits(bits))
        return tuple(mutated)

    def next_generation(self, population: List[Candidate], statistics: EnsembleRecordSet) -> List[Candidate]:
        """Elite first, then offspring pairs until the population is full."""
        offspring: List[Candidate] = []
        if self.settings.elitism and self.best_so_far is not None:
            offspring.append(self.best_so_far)
        while len(offspring) < self.settings.population_size:
            first = self.encode(self.select(population))
            second = self.encode(self.select(population))
            child_a, child_b = self.crossover(first, second)
            offspring.append(self.decode(*self.mutate(child_a), statistics))
            offspring.append(self.decode(*self.mutate(child_b), statistics))
        return offspring[:self.settings.population_size]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def evaluate_population(
        self,
        data: DataPartitions,
        statistics: EnsembleRecordSet,
        population: List[Candidate]
    ):
        for candidate in population:
            self.evaluator.evaluate(data, statistics, candidate)

        # max() keeps the first of equally fit candidates
        generation_best = max(population, key=lambda c: c.fitness)
        if self.best_so_far is None or generation_best.fitness > self.best_so_far.fitness:
            self.best_so_far = generation_best
            self.no_improvement = 0
        else:
            self.no_improvement += 1

        fitness = np.array([c.fitness for c in population])
        self.history['generation'].append(self.generation)
        self.history['best_fitness'].append(float(fitness.max()))
        self.history['mean_fitness'].append(float(fitness.mean()))
        self.history['best_so_far_fitness'].append(self.best_so_far.fitness)
        self.history['best_true_fitness'].append(self.best_so_far.true_fitness)
        self.history['n_kept'].append(len(self.best_so_far.kept))
        self.history['population'].append(self.snapshot(population))

        if self.verbose:
            print(
                f"Generation {self.generation:3d}: "
                f"best={fitness.max():.2f}, mean={fitness.mean():.2f}, "
                f"best so far={self.best_so_far.fitness:.2f} "
                f"({len(self.best_so_far.kept)} kept), "
                f"no improvement for {self.no_improvement}"
            )

    @staticmethod
    def snapshot(population: List[Candidate]) -> str:
        """Text listing of a generation, fittest first."""
        lines = []
        for rank, candidate in enumerate(sorted(population)):
            lines.append(
                f"{rank:3d}. label {100 * candidate.label_threshold:6.2f}%  "
                f"example {100 * candidate.example_threshold:6.2f}%  "
                f"kept {len(candidate.kept):5d}  fitness {candidate.fitness:.2f}"
            )
        return "\n".join(lines)

    def finished(self) -> bool:
        if self.generation >= self.settings.max_generations:
            return True
        return (
            self.settings.stops_without_improvement
            and self.no_improvement >= self.settings.no_improvement_generations
        )

    def working_data(self, data: DataPartitions) -> DataPartitions:
        """Copy of `data` with merged views (and no test set unless the evaluator uses it)."""
        working = data.copy()
        if not self.evaluator.uses_test_set:
            working.clear(TEST)
        working.merge_views()
        return working

    def optimize(self, data: DataPartitions, statistics: EnsembleRecordSet) -> Candidate:
        """
        Run the genetic algorithm.

        Parameters:
            data: Experiment dataset (not modified)
            statistics: Aggregated ensemble statistics

        Returns:
            best: Fittest candidate found

        Raises:
            ValueError: If the statistics are empty
            TrainingError: If a candidate's training set cannot be fitted
        """
        if statistics.statistic_size == 0:
            raise ValueError("Cannot optimize thresholds over empty ensemble statistics")

        working = self.working_data(data)
        self.label_min_bound = int(math.floor(100 * statistics.min_agreement_percent()))
        self.example_min_bound = int(math.floor(100 * statistics.min_occurrence_percent()))
        self.best_so_far = None
        self.no_improvement = 0
        self.generation = 0

        if self.verbose:
            print("Starting GA threshold optimization...")
            print(f"  Statistic size: {statistics.statistic_size} ({len(statistics)} ensembles)")
            print(f"  Label threshold range: [{self.label_min_bound}, 100]%")
            print(f"  Example threshold range: [{self.example_min_bound}, 100]%")

        population = self.initialize(statistics)
        while True:
            self.evaluate_population(working, statistics, population)
            self.generation += 1
            if self.finished():
                break
            population = self.next_generation(population, statistics)

        if self.verbose:
            print(f"Best candidate: {self.best_so_far.describe()}")
            print(f"  {self.evaluator}")
            print()
        return self.best_so_far

    def plot_fitness_curves(self, figsize=(10, 4)):
        """
        Plot best / mean fitness per generation.

        Parameters:
            figsize: Figure size (width, height)
        """
        try:
            import matplotlib.pyplot as plt
        except ImportError:
            print("matplotlib not available. Install with: pip install matplotlib")
            return

        if len(self.history['best_fitness']) == 0:
            print("No optimization history. Run optimize() first.")
            return

        fig, axes = plt.subplots(1, 2, figsize=figsize)
        generations = self.history['generation']

        axes[0].plot(generations, self.history['best_fitness'], 'b-', label='Generation best', linewidth=2)
        axes[0].plot(generations, self.history['mean_fitness'], 'g--', label='Generation mean', linewidth=2)
        axes[0].plot(generations, self.history['best_so_far_fitness'], 'r-', label='Best so far', linewidth=1)
        axes[0].set_xlabel('Generation')
        axes[0].set_ylabel('Fitness')
        axes[0].set_title('Fitness')
        axes[0].legend()
        axes[0].grid(True, alpha=0.3)

        axes[1].plot(generations, self.history['n_kept'], 'k-', linewidth=2)
        axes[1].set_xlabel('Generation')
        axes[1].set_ylabel('Examples')
        axes[1].set_title('Training Set Size of the Best Candidate')
        axes[1].grid(True, alpha=0.3)

        plt.tight_layout()
        plt.show()

    def __repr__(self) -> str:
        return (
            f"GAThresholdOptimizer(population_size={self.settings.population_size}, "
            f"generation={self.generation}, "
            f"best_fitness={self.best_so_far.fitness if self.best_so_far else None})"
        )
