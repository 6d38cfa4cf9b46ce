"""
virtual_creatures module: morphology/shapes.py

Shape primitives for body segments. A shape has no position or rotation; it
only knows its extent along its own right (X), forward (Y) and up (Z) axes.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import copy
from dataclasses import dataclass
from enum import IntEnum
import math
from typing import Tuple

from exceptions import StructuralInvariantError


class Face(IntEnum):
    """Faces of a bounding box, relative to the shape's own axes."""
    UP = 1
    RIGHT = 2
    FORWARD = 3
    LEFT = 4
    BACKWARD = 5
    DOWN = 6


class ShapeSpecification(ABC):
    @abstractmethod
    def bounds(self) -> Tuple[float, float, float]:
        """Half extents along (X, Y, Z)."""

    @abstractmethod
    def volume(self) -> float:
        ...

    def bound(self, face: Face) -> float:
        """Distance from the centre to ``face``."""
        x, y, z = self.bounds()
        if face in (Face.RIGHT, Face.LEFT):
            return x
        if face in (Face.FORWARD, Face.BACKWARD):
            return y
        return z

    def deep_copy(self) -> "ShapeSpecification":
        return copy.deepcopy(self)


@dataclass
class Rectangle(ShapeSpecification):
    width: float   # centre to edge along X
    depth: float   # centre to edge along Y
    height: float  # centre to edge along Z

    def __post_init__(self):
        if self.width < 0 or self.depth < 0 or self.height < 0:
            raise StructuralInvariantError(f"negative rectangle size {self}")

    def bounds(self) -> Tuple[float, float, float]:
        return (self.width, self.depth, self.height)

    def volume(self) -> float:
        return 8.0 * self.width * self.depth * self.height


class Cube(Rectangle):
    def __init__(self, scale: float):
        super().__init__(scale, scale, scale)


class LongRectangle(Rectangle):
    """A beam stretched along its up axis (for arms)."""

    def __init__(self, size: float, factor: float):
        if factor <= 1:
            raise StructuralInvariantError(f"beam factor must exceed 1, got {factor}")
        super().__init__(size, size, size * factor)


PLANE_THICKNESS = 0.2


class PlaneRectangle(Rectangle):
    """A thin plate standing upwards (for fins)."""

    def __init__(self, size: float, factor: float):
        if factor <= 1:
            raise StructuralInvariantError(f"plane factor must exceed 1, got {factor}")
        super().__init__(size, PLANE_THICKNESS, size * factor)


@dataclass
class Sphere(ShapeSpecification):
    radius: float

    def __post_init__(self):
        if self.radius < 0:
            raise StructuralInvariantError(f"negative sphere radius {self.radius}")

    def bounds(self) -> Tuple[float, float, float]:
        return (self.radius, self.radius, self.radius)

    def volume(self) -> float:
        return 4.0 / 3.0 * math.pi * self.radius ** 3
