"""
virtual_creatures module: evolution/selection.py

Population members and the rank-based reproduction schedule.
"""

from __future__ import annotations
import itertools
from typing import Iterator, List, Optional, Sequence, Tuple

import config
from morphology.morphology import Morphology

_member_ids = itertools.count()


class PopulationMember:
    """
    One individual of a generation. Identity fields are read-only; ``fitness``
    and ``avg_fitness`` are filled in once the member has been evaluated.
    """

    def __init__(
        self,
        morphology: Morphology,
        parents: Sequence["PopulationMember"] = (),
        coherence_to_original: Optional[float] = None,
        generation: int = 0,
    ):
        self._id = next(_member_ids)
        self._morphology = morphology
        # only ids and scores are kept so a member never pins its ancestry in memory
        self._parent_ids: Tuple[int, ...] = tuple(p.id for p in parents)
        self._parent_averages: Tuple[float, ...] = tuple(p.avg_fitness for p in parents if p.avg_fitness is not None)
        self._coherence = coherence_to_original
        self._generation = generation
        self.fitness: Optional[float] = None
        self.avg_fitness: Optional[float] = None

    @property
    def id(self) -> int:
        return self._id

    @property
    def morphology(self) -> Morphology:
        return self._morphology

    @property
    def parent_ids(self) -> Tuple[int, ...]:
        return self._parent_ids

    @property
    def coherence_to_original(self) -> Optional[float]:
        return self._coherence

    @property
    def generation(self) -> int:
        return self._generation

    def set_fitness(self, fitness: float, parent_weight: float = config.PARENT_FITNESS_WEIGHT) -> None:
        """
        Record ``fitness`` and blend it with the parents' running average, which
        makes ``avg_fitness`` an exponential average over the lineage.
        """
        self.fitness = fitness
        known = self._parent_averages
        if not known:
            self.avg_fitness = fitness
        else:
            self.avg_fitness = parent_weight * (sum(known) / len(known)) + (1.0 - parent_weight) * fitness

    def __repr__(self) -> str:
        return f"PopulationMember(id={self._id}, gen={self._generation}, fitness={self.fitness}, avg={self.avg_fitness})"


def rank(members: Sequence[PopulationMember]) -> List[PopulationMember]:
    """Members sorted by descending ``avg_fitness``; ties keep population order."""
    return sorted(members, key=lambda m: m.avg_fitness if m.avg_fitness is not None else float("-inf"), reverse=True)


def children_schedule(
    population_size: int,
    parents: int,
    fraction: float = config.CHILDREN_FRACTION,
    decay: float = config.CHILDREN_DECAY,
) -> Iterator[Tuple[int, int]]:
    """
    Yield ``(rank, children)`` until ``population_size`` children are planned or
    parents run out. The count starts at ``population_size * fraction`` and
    shrinks by ``decay`` per rank; every scheduled parent gets at least one child.
    """
    children = population_size * fraction
    remaining = population_size
    for r in range(parents):
        if remaining <= 0:
            return
        n = min(remaining, max(1, round(children)))
        yield r, n
        remaining -= n
        children *= decay


def coherence_for(fitness: float, best: float, cap: float = config.MAX_COHERENCE) -> float:
    if best <= 0:
        return 0.0
    return min(cap, max(0.0, cap * fitness / best))
