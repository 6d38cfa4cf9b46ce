"""
virtual_creatures module: evolution/algorithm.py

Generational evolution loop: mutate, evaluate, rank, reproduce.
"""

from __future__ import annotations
import random
import threading
from typing import Callable, List, Optional, Sequence

from loguru import logger

import config
from evolution.evaluation import Evaluate, evaluate_population
from evolution.lineage import LineageRecord
from evolution.mutate import Mutator
from evolution.selection import PopulationMember, children_schedule, coherence_for, rank
from exceptions import EvolutionError, RepairExhaustedError
from morphology.morphology import Morphology


class EvolutionAlgorithm:
    """
    Owns the population and the master random stream.

    Every child draws its own ``random.Random`` seeded from the master stream,
    so a run is reproducible from ``seed`` no matter how members are evaluated.
    """

    def __init__(
        self,
        base: Morphology,
        population_size: int = config.POPULATION_SIZE,
        seed: Optional[int] = config.SEED,
        mutator: Optional[Mutator] = None,
        mutation_attempts: int = config.MUTATION_ATTEMPTS,
    ):
        if population_size < 1:
            raise EvolutionError("population size must be at least 1")
        self.base = base
        self.population_size = population_size
        self.rng = random.Random(seed)
        self.mutator = mutator if mutator is not None else Mutator()
        self.mutation_attempts = max(1, mutation_attempts)

        self.generation = -1
        self.population: List[PopulationMember] = []
        self.history: List[LineageRecord] = []
        self.repair_failures = 0

    # ---- reproduction ----

    def _offspring(self, parent: Morphology, coherence: float, parents: Sequence[PopulationMember]) -> PopulationMember:
        rng = random.Random(self.rng.getrandbits(64))
        morphology = None
        for attempt in range(self.mutation_attempts):
            try:
                morphology = self.mutator.mutate(rng, parent, coherence).morphology
                break
            except RepairExhaustedError as e:
                self.repair_failures += 1
                logger.warning(f"[EvolutionAlgorithm] mutation attempt {attempt + 1} discarded: {e}")
        if morphology is None:
            morphology = parent.deep_copy()
        return PopulationMember(morphology, parents, coherence if parents else None, self.generation)

    def generate_new_population(self, fitness: Optional[Sequence[float]] = None) -> List[PopulationMember]:
        """
        Build the next generation.

        The first call mutates the base morphology with coherence 0. Later calls
        rank the current population by ``avg_fitness`` (assigning ``fitness``
        first when given) and let each ranked parent produce a shrinking number of
        children, with a coherence proportional to its share of the best raw
        ``fitness`` of the generation.
        """
        if not self.population:
            self.generation = 0
            self.population = [self._offspring(self.base, 0.0, ()) for _ in range(self.population_size)]
            logger.info(f"[EvolutionAlgorithm] generation 0: {len(self.population)} members")
            return self.population

        if fitness is not None:
            self.assign_fitness(fitness)
        if any(m.avg_fitness is None for m in self.population):
            raise EvolutionError("the current population has not been evaluated")

        ranked = rank(self.population)
        # ranking follows the lineage average, coherence the raw score
        best = max(m.fitness for m in self.population)
        self.generation += 1
        children: List[PopulationMember] = []
        for r, n in children_schedule(self.population_size, len(ranked)):
            parent = ranked[r]
            coherence = coherence_for(parent.fitness, best)
            children.extend(self._offspring(parent.morphology, coherence, (parent,)) for _ in range(n))
        self.population = children
        logger.debug(f"[EvolutionAlgorithm] generation {self.generation}: {len(children)} members")
        return self.population

    def assign_fitness(self, fitness: Sequence[float]) -> None:
        if len(fitness) != len(self.population):
            raise EvolutionError(f"got {len(fitness)} fitness values for {len(self.population)} members")
        for member, f in zip(self.population, fitness):
            member.set_fitness(f)
            self.history.append(LineageRecord.of(member))

    def best(self) -> Optional[PopulationMember]:
        evaluated = [m for m in self.population if m.fitness is not None]
        if not evaluated:
            return None
        return max(evaluated, key=lambda m: m.fitness)

    # ---- main loop ----

    def run(
        self,
        evaluate: Evaluate,
        generations: int,
        cancel_event: Optional[threading.Event] = None,
        max_workers: int = config.MAX_WORKERS,
        on_generation: Optional[Callable[["EvolutionAlgorithm"], None]] = None,
    ) -> Optional[PopulationMember]:
        """
        Evaluate and reproduce for ``generations`` generations and return the best
        member of the last fully evaluated one. A cancelled evaluation stops the
        run without reproducing the partial generation.
        """
        if not self.population:
            self.generate_new_population()

        best: Optional[PopulationMember] = None
        for g in range(generations):
            scores = evaluate_population(self.population, evaluate, max_workers, cancel_event)
            if any(s is None for s in scores):
                logger.warning(f"[EvolutionAlgorithm] generation {self.generation} cancelled")
                break

            self.assign_fitness(scores)
            best = self.best()
            mean = sum(scores) / len(scores)
            logger.info(
                f"[EvolutionAlgorithm] gen={self.generation} best={best.fitness:.4f} "
                f"mean={mean:.4f} repair_failures={self.repair_failures}"
            )
            if on_generation is not None:
                on_generation(self)
            if g < generations - 1:
                self.generate_new_population()
        return best
