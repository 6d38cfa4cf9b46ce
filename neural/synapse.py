"""
virtual_creatures module: neural/synapse.py

Weighted directed connection between neurals.
"""

from __future__ import annotations

from exceptions import StructuralInvariantError
from neural.neuron import NeuralSpec

MIN_WEIGHT = 0.0
MAX_WEIGHT = 1.0


class Connection:
    """
    Directed edge ``source -> destination``. An actor is never a source and a
    sensor is never a destination; the weight stays in [0, 1].

    The same instance may be registered in two networks at once (an
    inter-network connection), so endpoints are re-homed in place.
    """

    __slots__ = ("_source", "_destination", "_weight")

    def __init__(self, source: NeuralSpec, destination: NeuralSpec, weight: float = MAX_WEIGHT):
        self.source = source
        self.destination = destination
        self.weight = weight

    @property
    def source(self) -> NeuralSpec:
        return self._source

    @source.setter
    def source(self, value: NeuralSpec) -> None:
        if value.is_actor():
            raise StructuralInvariantError(f"actor {value} cannot be a connection source")
        self._source = value

    @property
    def destination(self) -> NeuralSpec:
        return self._destination

    @destination.setter
    def destination(self, value: NeuralSpec) -> None:
        if value.is_sensor():
            raise StructuralInvariantError(f"sensor {value} cannot be a connection destination")
        self._destination = value

    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, value: float) -> None:
        if not MIN_WEIGHT <= value <= MAX_WEIGHT:
            raise StructuralInvariantError(f"weight {value} outside [{MIN_WEIGHT}, {MAX_WEIGHT}]")
        self._weight = float(value)

    def __repr__(self) -> str:
        return f"Connection({self._source.label} -> {self._destination.label}, {self._weight:.3f})"
