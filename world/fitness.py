"""
virtual_creatures module: world/fitness.py

Fitness of a centre-of-mass displacement. Positions are (x, y, z) with z
pointing up.
"""

from __future__ import annotations
from enum import Enum
import math
from typing import Tuple

Vec3 = Tuple[float, float, float]


class Fitness(Enum):
    WALKING = "WALKING"    # horizontal distance only
    SWIMMING = "SWIMMING"  # rising counts half, sinking costs half


def measure(fitness: Fitness, start: Vec3, end: Vec3) -> float:
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    dz = end[2] - start[2]
    if fitness == Fitness.WALKING:
        return dx * dx + dy * dy
    if fitness == Fitness.SWIMMING:
        return dx * dx + dy * dy + 0.5 * math.copysign(dz * dz, dz)
    raise ValueError(f"unknown fitness {fitness}")
