"""
virtual_creatures module: neural/operators.py

Runtime operators of the explicit network engine.

One ``Operator`` exists per compiled neural. Neurons dispatch on their function
through the ``STEP`` table; sensors are plain value holders and actors are
weighted sums. State-bearing functions keep their history on the operator.

Updates are two-phase: ``compute`` reads the committed values of the inputs and
stores the result in ``pending``; ``commit`` publishes it.
"""

from __future__ import annotations
from collections import deque
import math
from typing import Callable, Deque, Dict, List, Optional

import config
from neural.neuron import NeuronFunc, NeuronType

ATAN_X = 7.0
ATAN_NORM = 1.0 / math.atan(ATAN_X)
EXP_X = 2.0
EXP_NORM = 1.0 / math.exp(EXP_X)
LOG_SCALE = 0.2
SIGMOID_X = -5.0
MAX_EXPONENT = 700.0


class Operator:
    __slots__ = ("role", "function", "inputs", "weights", "value", "pending", "acc", "history")

    def __init__(self, role: NeuronType, function: Optional[NeuronFunc] = None):
        self.role = role
        self.function = function
        self.inputs: List[Operator] = []
        self.weights: List[float] = []
        self.value = 0.0
        self.pending = 0.0
        # DIFFERENTIATE: last input, INTEGRATE: integral, SAW / WAVE: phase
        self.acc = 0.0
        self.history: Optional[Deque[float]] = None
        if function == NeuronFunc.MEMORY:
            self.history = deque([0.0] * config.MEMORY_SIZE, maxlen=config.MEMORY_SIZE)
        elif function == NeuronFunc.SMOOTH:
            self.history = deque([0.0] * len(config.SMOOTH_KERNEL), maxlen=len(config.SMOOTH_KERNEL))

    @staticmethod
    def sensor() -> "Operator":
        return Operator(NeuronType.SENSOR)

    @staticmethod
    def actor() -> "Operator":
        return Operator(NeuronType.ACTOR)

    @staticmethod
    def neuron(function: NeuronFunc) -> "Operator":
        if function not in STEP:
            raise NotImplementedError(f"no operator for {function}")
        return Operator(NeuronType.NEURON, function)

    def connect(self, source: "Operator", weight: float) -> None:
        self.inputs.append(source)
        self.weights.append(weight)

    def weighted(self) -> List[float]:
        return [w * i.value for w, i in zip(self.weights, self.inputs)]

    def weighted_sum(self) -> float:
        return sum(self.weighted())

    def compute(self, dt: float) -> None:
        if self.role == NeuronType.SENSOR:
            self.pending = self.value
        elif self.role == NeuronType.ACTOR:
            self.pending = _bounded(self.weighted_sum())
        else:
            self.pending = _bounded(STEP[self.function](self, dt))

    def commit(self) -> None:
        self.value = self.pending

    def __repr__(self) -> str:
        name = self.function.value if self.function is not None else self.role.name
        return f"Operator({name}, value={self.value:.4f}, inputs={len(self.inputs)})"


def _bounded(v: float) -> float:
    # keeps runaway feedback loops finite; NaN collapses to neutral
    if v != v:
        return 0.0
    return max(-config.VALUE_LIMIT, min(config.VALUE_LIMIT, v))


# ---- unary ----

def _unary(f: Callable[[float], float]) -> Callable[[Operator, float], float]:
    def step(op: Operator, dt: float) -> float:
        return f(op.weighted_sum())
    return step


def _log(x: float) -> float:
    if x <= 0:
        return -1.0
    return max(-1.0, LOG_SCALE * math.log(x))


def _sigmoid(x: float) -> float:
    return 1.0 / (1.0 + math.exp(min(MAX_EXPONENT, SIGMOID_X * x)))


# ---- history ----

def _differentiate(op: Operator, dt: float) -> float:
    x = op.weighted_sum()
    last, op.acc = op.acc, x
    return x - last


def _integrate(op: Operator, dt: float) -> float:
    op.acc = max(-1.0, min(1.0, op.acc + op.weighted_sum() * dt))
    return op.acc


def _memory(op: Operator, dt: float) -> float:
    op.history.append(op.weighted_sum())
    return op.history[0]


def _smooth(op: Operator, dt: float) -> float:
    op.history.appendleft(op.weighted_sum())
    kernel = config.SMOOTH_KERNEL
    return sum(k * h for k, h in zip(kernel, op.history))


# ---- time driven ----

def _rate(op: Operator) -> float:
    return op.weighted_sum() if op.inputs else 1.0


def _saw(op: Operator, dt: float) -> float:
    op.acc += _rate(op) * dt
    return 2.0 * (op.acc % 1.0) - 1.0


def _wave(op: Operator, dt: float) -> float:
    op.acc += _rate(op) * dt
    return math.cos(2.0 * math.pi * op.acc)


# ---- n-ary ----

def _select(op: Operator, better: Callable[[float, float], bool]) -> float:
    # winner on the raw input values, reported with the winner's weight
    if not op.inputs:
        return 0.0
    index = 0
    for i in range(1, len(op.inputs)):
        if better(op.inputs[i].value, op.inputs[index].value):
            index = i
    return op.inputs[index].value * op.weights[index]


def _product(op: Operator, dt: float) -> float:
    # raw input values, the weights do not take part
    if not op.inputs:
        return 0.0
    return math.prod(i.value for i in op.inputs)


# ---- binary / ternary ----

def _args(op: Operator, n: int) -> List[float]:
    values = op.weighted()[:n]
    return values + [0.0] * (n - len(values))


def _division(op: Operator, dt: float) -> float:
    a, b = _args(op, 2)
    limit = config.DIVISION_LIMIT
    if -limit < a < limit:
        a = -limit if a < 0 else limit
    return b / a


def _gte(op: Operator, dt: float) -> float:
    x, y, z = _args(op, 3)
    return z if x > y else -z


def _if(op: Operator, dt: float) -> float:
    x, y, z = _args(op, 3)
    return y if x >= 0 else -z


def _interpolate(op: Operator, dt: float) -> float:
    x, y, z = _args(op, 3)
    w = (z + 1.0) / 2.0
    return x * w + y * (1.0 - w)


def _ifsum(op: Operator, dt: float) -> float:
    x, y, z = _args(op, 3)
    return 1.0 if x + y > z else -1.0


STEP: Dict[NeuronFunc, Callable[[Operator, float], float]] = {
    NeuronFunc.ABS: _unary(abs),
    NeuronFunc.ATAN: _unary(lambda x: math.atan(ATAN_X * x) * ATAN_NORM),
    NeuronFunc.SIN: _unary(lambda x: math.sin(math.pi * x)),
    NeuronFunc.COS: _unary(lambda x: math.cos(math.pi * x)),
    NeuronFunc.EXP: _unary(lambda x: math.exp(min(MAX_EXPONENT, EXP_X * x)) * EXP_NORM),
    NeuronFunc.LOG: _unary(_log),
    NeuronFunc.SIGMOID: _unary(_sigmoid),
    NeuronFunc.SIGN: _unary(lambda x: 1.0 if x >= 0 else -1.0),
    NeuronFunc.DIFFERENTIATE: _differentiate,
    NeuronFunc.INTEGRATE: _integrate,
    NeuronFunc.MEMORY: _memory,
    NeuronFunc.SMOOTH: _smooth,
    NeuronFunc.SAW: _saw,
    NeuronFunc.WAVE: _wave,
    NeuronFunc.MIN: lambda op, dt: _select(op, lambda a, b: a < b),
    NeuronFunc.MAX: lambda op, dt: _select(op, lambda a, b: a > b),
    NeuronFunc.SUM: _unary(lambda x: x),
    NeuronFunc.PRODUCT: _product,
    NeuronFunc.DIVISION: _division,
    NeuronFunc.GTE: _gte,
    NeuronFunc.IF: _if,
    NeuronFunc.INTERPOLATE: _interpolate,
    NeuronFunc.IFSUM: _ifsum,
}
