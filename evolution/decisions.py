"""
virtual_creatures module: evolution/decisions.py

Reusable probabilistic operators for the mutation pass.

Every operator draws from an explicitly passed ``random.Random`` so a run can be
reproduced from its seed. ``coherence`` is a [0, 1] bias towards the parent:
1 keeps the parent value or structure, 0 explores freely.
"""

from __future__ import annotations
from enum import Enum
import random
from typing import Sequence, Tuple, Type, TypeVar

from neural.neuron import NeuronFunc

# |z| > Z_99 has probability ~0.01 for a standard normal
Z_99 = 2.576

E = TypeVar("E", bound=Enum)


def bounded_normal(rng: random.Random, mean: float, minimum: float, maximum: float) -> float:
    """
    Gaussian around ``mean`` whose 99% interval reaches the nearest boundary,
    clamped to [minimum, maximum].
    """
    sigma = min(mean - minimum, maximum - mean) / Z_99
    if sigma <= 0:
        return min(maximum, max(minimum, mean))
    return min(maximum, max(minimum, rng.gauss(mean, sigma)))


class Decision:
    def __init__(self, probability: float):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability {probability} outside [0, 1]")
        self.probability = probability

    def happens(self, rng: random.Random, coherence: float = 0.0) -> bool:
        return rng.random() < self.probability * (1.0 - coherence)


class DoubleMutation:
    """
    Mutates a bounded real value.

    ``coherence`` (fixed per operator) trades a narrow Gaussian around the old
    value against a uniform draw over the whole range.
    """

    def __init__(self, probability: float, coherence: float, minimum: float, maximum: float):
        if minimum > maximum:
            raise ValueError(f"empty range [{minimum}, {maximum}]")
        self.decision = Decision(probability)
        self.coherence = coherence
        self.minimum = minimum
        self.maximum = maximum

    def sample(self, rng: random.Random, old: float) -> float:
        near = bounded_normal(rng, old, self.minimum, self.maximum)
        far = rng.uniform(self.minimum, self.maximum)
        return self.coherence * near + (1.0 - self.coherence) * far

    def new_val(self, rng: random.Random, old: float, coherence_to_original: float = 0.0) -> float:
        c = coherence_to_original
        if c >= 1.0:
            return old
        return min(self.maximum, max(self.minimum, c * old + (1.0 - c) * self.sample(rng, old)))

    def possibly_change_val(self, rng: random.Random, old: float, coherence_to_original: float = 0.0) -> float:
        # coherence lowers the chance to mutate and then again the size of the step
        if self.decision.happens(rng, coherence_to_original):
            return self.new_val(rng, old, coherence_to_original)
        return old


class IntegerDecision:
    """Zero-inflated half-Gaussian count in [0, maximum]."""

    def __init__(self, p_zero: float, maximum: int):
        if maximum < 1:
            raise ValueError("maximum must be at least 1")
        self.nonzero = Decision(1.0 - p_zero)
        self.maximum = maximum

    def draw(self, rng: random.Random, coherence: float = 0.0) -> int:
        if not self.nonzero.happens(rng, coherence):
            return 0
        spread = self.maximum - 1
        n = abs(round(bounded_normal(rng, 0.0, -spread, spread))) + 1
        return min(self.maximum, n)


class MultipleDecision:
    """
    Categorical draw over an open partition of [0, 1). A draw past the last
    weight selects the implicit no-op outcome ``len(weights)``.
    """

    def __init__(self, *weights: float):
        if any(w < 0 for w in weights):
            raise ValueError("weights must be non-negative")
        if sum(weights) > 1.0 + 1e-9:
            raise ValueError(f"weights sum to {sum(weights)} > 1")
        self.weights: Tuple[float, ...] = tuple(weights)

    @property
    def no_op(self) -> int:
        return len(self.weights)

    def choose(self, rng: random.Random, coherence: float = 0.0) -> int:
        # coherence pulls the draw towards the first outcome
        r = rng.random() * (1.0 - coherence)
        cumulative = 0.0
        for i, w in enumerate(self.weights):
            cumulative += w
            if r < cumulative:
                return i
        return self.no_op


class NominalMutation:
    def __init__(self, probability: float, values: Type[E] | Sequence[E]):
        self.decision = Decision(probability)
        self.values = list(values)

    def possibly_change(self, rng: random.Random, current: E, coherence: float = 0.0) -> E:
        if not self.decision.happens(rng, coherence):
            return current
        others = [v for v in self.values if v != current]
        if not others:
            return current
        return rng.choice(others)


class NeuronChooser:
    """
    Two-level draw of a neuron function: a weighted group, then a uniform
    function inside it. Functions that need more inputs than the network has
    neurals are rejected and redrawn.
    """

    def __init__(self, groups: Sequence[Tuple[str, float, Sequence[NeuronFunc | str]]], attempts: int = 10):
        if not groups:
            raise ValueError("at least one neuron group is needed")
        self.names = [name for name, _, _ in groups]
        self.functions = [[NeuronFunc(f) if isinstance(f, str) else f for f in funcs] for _, _, funcs in groups]
        total = sum(w for _, w, _ in groups)
        self.groups = MultipleDecision(*[w / total for _, w, _ in groups])
        self.attempts = attempts

    def choose(self, rng: random.Random, network_size: int, coherence: float = 0.0) -> NeuronFunc:
        if network_size > 0:
            for _ in range(self.attempts):
                group = self.groups.choose(rng, coherence)
                if group == self.groups.no_op:
                    continue
                function = rng.choice(self.functions[group])
                if function.min_connections <= network_size:
                    return function
        return rng.choice(self.functions[0])
