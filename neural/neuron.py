"""
virtual_creatures module: neural/neuron.py

Neural vertex primitives: the role of a vertex, the function a neuron computes
and how many incoming connections that function needs.
"""

from __future__ import annotations
from enum import Enum
import itertools
import sys


class NeuronType(Enum):
    SENSOR = 0
    NEURON = 1
    ACTOR = 2


class NeuronFunc(Enum):
    """Functions a neuron can compute."""
    # unary
    ABS = "ABS"
    ATAN = "ATAN"
    SIN = "SIN"
    COS = "COS"
    EXP = "EXP"
    LOG = "LOG"
    SIGMOID = "SIGMOID"
    SIGN = "SIGN"
    # unary with history
    DIFFERENTIATE = "DIFFERENTIATE"
    INTEGRATE = "INTEGRATE"
    MEMORY = "MEMORY"
    SMOOTH = "SMOOTH"
    # unary, driven by the tick delta-time
    SAW = "SAW"
    WAVE = "WAVE"
    # n-ary commutative
    MIN = "MIN"
    MAX = "MAX"
    SUM = "SUM"
    PRODUCT = "PRODUCT"
    # binary
    DIVISION = "DIVISION"
    # ternary
    GTE = "GTE"
    IF = "IF"
    INTERPOLATE = "INTERPOLATE"
    IFSUM = "IFSUM"

    @property
    def min_connections(self) -> int:
        return _MIN_CONNECTIONS[self]

    @property
    def max_connections(self) -> int:
        return _MAX_CONNECTIONS.get(self, UNBOUNDED)


UNBOUNDED = sys.maxsize

UNARY = (
    NeuronFunc.ABS, NeuronFunc.ATAN, NeuronFunc.SIN, NeuronFunc.COS,
    NeuronFunc.EXP, NeuronFunc.LOG, NeuronFunc.SIGMOID, NeuronFunc.SIGN,
)
HISTORY = (NeuronFunc.DIFFERENTIATE, NeuronFunc.INTEGRATE, NeuronFunc.MEMORY, NeuronFunc.SMOOTH)
TIMED = (NeuronFunc.SAW, NeuronFunc.WAVE)
REDUCE = (NeuronFunc.MIN, NeuronFunc.MAX, NeuronFunc.SUM, NeuronFunc.PRODUCT)
BINARY = (NeuronFunc.DIVISION,)
TERNARY = (NeuronFunc.GTE, NeuronFunc.IF, NeuronFunc.INTERPOLATE, NeuronFunc.IFSUM)

_MIN_CONNECTIONS = {}
_MIN_CONNECTIONS.update({f: 1 for f in UNARY + HISTORY + TIMED})
_MIN_CONNECTIONS.update({f: 2 for f in REDUCE + BINARY})
_MIN_CONNECTIONS.update({f: 3 for f in TERNARY})

_MAX_CONNECTIONS = {NeuronFunc.DIVISION: 2}
_MAX_CONNECTIONS.update({f: 3 for f in TERNARY})

_ids = itertools.count()


class NeuralSpec:
    """
    One vertex of a network specification: a sensor, a neuron or an actor.

    Equality is identity. ``id`` is a process-unique handle used for labels only.
    """

    __slots__ = ("id", "type", "function")

    def __init__(self, type: NeuronType, function: NeuronFunc | None = None):
        if type == NeuronType.NEURON and function is None:
            raise ValueError("a neuron needs a function")
        if type != NeuronType.NEURON and function is not None:
            raise ValueError(f"{type.name} carries no function")
        self.id = next(_ids)
        self.type = type
        self.function = function

    @staticmethod
    def sensor() -> "NeuralSpec":
        return NeuralSpec(NeuronType.SENSOR)

    @staticmethod
    def neuron(function: NeuronFunc) -> "NeuralSpec":
        return NeuralSpec(NeuronType.NEURON, function)

    @staticmethod
    def actor() -> "NeuralSpec":
        return NeuralSpec(NeuronType.ACTOR)

    def is_sensor(self) -> bool:
        return self.type == NeuronType.SENSOR

    def is_neuron(self) -> bool:
        return self.type == NeuronType.NEURON

    def is_actor(self) -> bool:
        return self.type == NeuronType.ACTOR

    @property
    def min_connections(self) -> int:
        return self.function.min_connections if self.function is not None else 0

    @property
    def max_connections(self) -> int:
        return self.function.max_connections if self.function is not None else UNBOUNDED

    def clone(self) -> "NeuralSpec":
        return NeuralSpec(self.type, self.function)

    @property
    def label(self) -> str:
        name = self.function.value if self.function is not None else self.type.name
        return f"{self.id}{name}"

    def __repr__(self) -> str:
        return f"NeuralSpec({self.label})"
