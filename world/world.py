"""
virtual_creatures module: world/world.py

Fitness collaborator: builds a creature and its network from a Morphology,
lets the network settle, simulates and measures the displacement.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

import config
from morphology.morphology import Morphology
from neural.engine import NaiveNN
from world.creature import Creature
from world.fitness import Fitness, measure


@dataclass
class World:
    dt: float = config.PHYSICS_DT
    nn_steps: int = config.NN_STEPS_PER_PHYSICS_STEP
    settle_ticks: int = config.SETTLE_TICKS
    initialization_time: float = config.INITIALIZATION_TIME
    evaluation_time: float = config.EVALUATION_TIME
    fitness: Fitness = Fitness[config.FITNESS]

    def build(self, morphology: Morphology) -> Tuple[Creature, NaiveNN]:
        creature = Creature(morphology)
        nn = NaiveNN.construct(morphology, creature.joints)
        # let the network run a couple of ticks without time passing
        nn.tick(self.settle_ticks, dt=0.0)
        return creature, nn

    def step(self, creature: Creature, nn: NaiveNN) -> None:
        """One physics step: the network reads and writes the joints once."""
        nn.tick(self.nn_steps, dt=self.dt / self.nn_steps)
        creature.step(self.dt)

    def simulate(self, creature: Creature, nn: NaiveNN, seconds: float) -> None:
        for _ in range(int(round(seconds / self.dt))):
            self.step(creature, nn)

    def evaluate(self, morphology: Morphology) -> float:
        creature, nn = self.build(morphology)
        self.simulate(creature, nn, self.initialization_time)
        start = creature.center_of_mass()
        self.simulate(creature, nn, self.evaluation_time)
        return measure(self.fitness, start, creature.center_of_mass())
