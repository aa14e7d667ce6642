"""
Experiment configuration for RSSalg.

Three settings objects, validated when they are constructed, describe an
experiment and are passed explicitly to the components that need them:

- CoTrainingSettings: pool size, per-class growth size, stopping criterion
- GASettings: genetic algorithm parameters and the optimized measure
- ExperimentSettings: classes, number of feature splits, seed, classifiers,
  candidate evaluator and reported measures

Invalid values raise ConfigurationError immediately.

Example:
    >>> co_training = CoTrainingSettings(['A', 'B'], growth_size={'A': 1, 'B': 3},
    ...                                  pool_size=75, iterations=30)
    >>> ga = GASettings(population_size=20, max_generations=30,
    ...                 crossover_rate=0.9, mutation_rate=0.02)
    >>> settings = ExperimentSettings(['A', 'B'], co_training, ga, n_splits=50)
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import ConfigurationError
from .evaluation.measures import Measure, get_measure
from .models.classifiers import ClassifierFactory, get_classifier_factory
from .utils.rng import ExperimentRandom

MeasureSpec = Union[str, Tuple[str, Optional[str]], Measure]


def _check_class_names(class_names: Sequence[str]) -> List[str]:
    class_names = list(class_names)
    if len(class_names) == 0:
        raise ConfigurationError("class_names must not be empty")
    if len(set(class_names)) != len(class_names):
        raise ConfigurationError(f"class_names must be unique, got {class_names}")
    return class_names


def _resolve_measure(spec: MeasureSpec) -> Measure:
    if isinstance(spec, tuple):
        return get_measure(*spec)
    return get_measure(spec)


class CoTrainingSettings:
    """
    Co-training parameters.

    Parameters:
        class_names: Canonical class ordering
        growth_size: Examples labeled per class, per view and iteration;
                     a mapping class → size or a sequence aligned with class_names
        pool_size: Size of the unlabeled pool (0 disables the pool)
        iterations: Iteration budget (ignored in label-all mode)
        label_all_unlabeled: Iterate until no unlabeled data is left
        test_each_iteration: Evaluate the combined classifier after every iteration

    Raises:
        ConfigurationError: If a value is out of range
    """

    def __init__(
        self,
        class_names: Sequence[str],
        growth_size: Union[Mapping[str, int], Sequence[int]],
        pool_size: int = 0,
        iterations: int = 1,
        label_all_unlabeled: bool = False,
        test_each_iteration: bool = False
    ):
        self.class_names = _check_class_names(class_names)

        if isinstance(growth_size, Mapping):
            missing = [name for name in self.class_names if name not in growth_size]
            unknown = [name for name in growth_size if name not in self.class_names]
            if missing or unknown:
                raise ConfigurationError(
                    f"growth_size must list every class exactly: missing {missing}, unknown {unknown}"
                )
            sizes = {name: growth_size[name] for name in self.class_names}
        else:
            growth_size = list(growth_size)
            if len(growth_size) != len(self.class_names):
                raise ConfigurationError(
                    f"growth_size has {len(growth_size)} values for {len(self.class_names)} classes"
                )
            sizes = dict(zip(self.class_names, growth_size))

        for name, size in sizes.items():
            if int(size) != size or size < 0:
                raise ConfigurationError(
                    f"growth_size for class '{name}' must be a non-negative integer, got {size}"
                )
        if sum(sizes.values()) == 0:
            raise ConfigurationError("At least one class must have a positive growth_size")
        if pool_size < 0:
            raise ConfigurationError(f"pool_size must be non-negative, got {pool_size}")
        if not label_all_unlabeled and iterations < 1:
            raise ConfigurationError(f"iterations must be at least 1, got {iterations}")

        self.growth_size: Dict[str, int] = {name: int(size) for name, size in sizes.items()}
        self.pool_size = pool_size
        self.iterations = iterations
        self.label_all_unlabeled = label_all_unlabeled
        self.test_each_iteration = test_each_iteration

    def __repr__(self) -> str:
        return (
            f"CoTrainingSettings(growth_size={self.growth_size}, pool_size={self.pool_size}, "
            f"iterations={self.iterations}, label_all_unlabeled={self.label_all_unlabeled})"
        )

    def summary(self) -> str:
        lines = [
            "Co-training settings:",
            f"  Growth size:            {self.growth_size}",
            f"  Pool size:              {self.pool_size if self.pool_size else 'disabled'}",
        ]
        if self.label_all_unlabeled:
            lines.append("  Stopping criterion:     label all unlabeled data")
        else:
            lines.append(f"  Iterations:             {self.iterations}")
        lines.append(f"  Test each iteration:    {self.test_each_iteration}")
        return "\n".join(lines)


class GASettings:
    """
    Genetic algorithm parameters.

    Parameters:
        population_size: Candidates per generation (>= 2)
        max_generations: Generation budget (>= 1)
        crossover_rate: Per-bit swap probability in (0, 1]
        mutation_rate: Per-bit flip probability in (0, 1]
        elitism: Carry the best candidate so far into every generation
        held_out_fraction: Minimum share of the statistics left out for
                           fitness evaluation, in [0, 1]
        no_improvement_generations: Stop after this many generations without
                                    improvement (0 or -1 disables)
        compute_true_fitness: Also evaluate candidates on the real test set
                              (reporting only)
        measure: Optimized measure name
        measure_class: Target class of a class-dependent measure

    Raises:
        ConfigurationError: If a value is out of range
    """

    def __init__(
        self,
        population_size: int,
        max_generations: int,
        crossover_rate: float,
        mutation_rate: float,
        elitism: bool = True,
        held_out_fraction: float = 0.0,
        no_improvement_generations: int = -1,
        compute_true_fitness: bool = False,
        measure: str = 'accuracy',
        measure_class: Optional[str] = None
    ):
        if population_size < 2:
            raise ConfigurationError(f"population_size must be at least 2, got {population_size}")
        if max_generations < 1:
            raise ConfigurationError(f"max_generations must be at least 1, got {max_generations}")
        if not 0 < crossover_rate <= 1:
            raise ConfigurationError(f"crossover_rate must be in (0, 1], got {crossover_rate}")
        if not 0 < mutation_rate <= 1:
            raise ConfigurationError(f"mutation_rate must be in (0, 1], got {mutation_rate}")
        if not 0 <= held_out_fraction <= 1:
            raise ConfigurationError(f"held_out_fraction must be in [0, 1], got {held_out_fraction}")
        if no_improvement_generations < -1:
            raise ConfigurationError(
                f"no_improvement_generations must be >= 0 (or -1 to disable), "
                f"got {no_improvement_generations}"
            )

        self.population_size = population_size
        self.max_generations = max_generations
        self.crossover_rate = crossover_rate
        self.mutation_rate = mutation_rate
        self.elitism = elitism
        self.held_out_fraction = held_out_fraction
        self.no_improvement_generations = no_improvement_generations
        self.compute_true_fitness = compute_true_fitness
        self.measure = get_measure(measure, measure_class)

    @property
    def stops_without_improvement(self) -> bool:
        return self.no_improvement_generations > 0

    def __repr__(self) -> str:
        return (
            f"GASettings(population_size={self.population_size}, "
            f"max_generations={self.max_generations}, "
            f"crossover_rate={self.crossover_rate}, mutation_rate={self.mutation_rate}, "
            f"elitism={self.elitism})"
        )

    def summary(self) -> str:
        window = self.no_improvement_generations if self.stops_without_improvement else 'disabled'
        return "\n".join([
            "GA settings:",
            f"  Population size:        {self.population_size}",
            f"  Max generations:        {self.max_generations}",
            f"  No-improvement window:  {window}",
            f"  Crossover rate:         {self.crossover_rate}",
            f"  Mutation rate:          {self.mutation_rate}",
            f"  Elitism:                {self.elitism}",
            f"  Held-out fraction:      {self.held_out_fraction}",
            f"  Optimized measure:      {self.measure.display_name}",
        ])


class ExperimentSettings:
    """
    Complete description of an RSSalg experiment.

    Parameters:
        class_names: Canonical class ordering
        co_training: Co-training parameters
        ga: Genetic algorithm parameters
        n_splits: Number of co-training runs (distinct feature splits)
        seed: Seed of the experiment's random stream
        view_classifiers: Classifier per view (name, estimator or factory);
                          a single entry is used for every view
        combined_classifier: Classifier trained on the merged views
        evaluator: Candidate evaluator, 'rssalg' (held-out) or 'best' (oracle)
        measures: Reported measures: names, (name, class) pairs or Measures
        splitter: 'different_random' or 'random'

    Raises:
        ConfigurationError: If a value is invalid or a name is unknown
    """

    SPLITTERS = ('different_random', 'random')

    def __init__(
        self,
        class_names: Sequence[str],
        co_training: CoTrainingSettings,
        ga: GASettings,
        n_splits: int = 1,
        seed: int = 42,
        view_classifiers: Sequence = ('naive_bayes',),
        combined_classifier='naive_bayes',
        evaluator: str = 'rssalg',
        measures: Sequence[MeasureSpec] = ('accuracy',),
        splitter: str = 'different_random'
    ):
        # rssalg.optimization imports this module
        from .optimization.evaluators import EVALUATORS

        self.class_names = _check_class_names(class_names)
        if co_training.class_names != self.class_names:
            raise ConfigurationError(
                f"Co-training classes {co_training.class_names} differ from "
                f"experiment classes {self.class_names}"
            )
        if n_splits < 1:
            raise ConfigurationError(f"n_splits must be at least 1, got {n_splits}")
        if evaluator not in EVALUATORS:
            raise ConfigurationError(
                f"Unknown candidate evaluator '{evaluator}'. Available: {list(EVALUATORS.keys())}"
            )
        if splitter not in self.SPLITTERS:
            raise ConfigurationError(
                f"Unknown splitter '{splitter}'. Available: {list(self.SPLITTERS)}"
            )
        if len(view_classifiers) == 0:
            raise ConfigurationError("At least one view classifier is required")
        if ga.measure.class_name is not None and ga.measure.class_name not in self.class_names:
            raise ConfigurationError(
                f"Unknown class '{ga.measure.class_name}' for the optimized measure"
            )

        self.co_training = co_training
        self.ga = ga
        self.n_splits = n_splits
        self.seed = seed
        self.view_classifiers: List[ClassifierFactory] = [
            get_classifier_factory(c) for c in view_classifiers
        ]
        self.combined_classifier = get_classifier_factory(combined_classifier)
        self.evaluator = evaluator
        self.measures: List[Measure] = [_resolve_measure(m) for m in measures]
        for measure in self.measures:
            if measure.class_name is not None and measure.class_name not in self.class_names:
                raise ConfigurationError(
                    f"Unknown class '{measure.class_name}' for measure {measure.name}"
                )
        self.splitter = splitter
        self.random = ExperimentRandom(seed)

    def view_classifier_factories(self, n_views: int) -> List[ClassifierFactory]:
        """One classifier factory per view."""
        if len(self.view_classifiers) == 1:
            return self.view_classifiers * n_views
        if len(self.view_classifiers) != n_views:
            raise ConfigurationError(
                f"{len(self.view_classifiers)} view classifiers configured for {n_views} views"
            )
        return list(self.view_classifiers)

    def __repr__(self) -> str:
        return (
            f"ExperimentSettings(class_names={self.class_names}, n_splits={self.n_splits}, "
            f"seed={self.seed}, evaluator='{self.evaluator}')"
        )

    def summary(self) -> str:
        """Get detailed summary of the experiment."""
        lines = [
            "=" * 50,
            "RSSalg Experiment Settings",
            "=" * 50,
            f"Classes:                  {self.class_names}",
            f"Feature splits:           {self.n_splits} ({self.splitter})",
            f"Seed:                     {self.seed}",
            f"View classifiers:         {[f.name for f in self.view_classifiers]}",
            f"Combined classifier:      {self.combined_classifier.name}",
            f"Candidate evaluator:      {self.evaluator}",
            f"Measures:                 {[m.display_name for m in self.measures]}",
            "",
            self.co_training.summary(),
            "",
            self.ga.summary(),
            "=" * 50,
        ]
        return "\n".join(lines)
