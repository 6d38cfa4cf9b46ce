"""
virtual_creatures module: morphology/nodes.py

Body segment primitive.
"""

from __future__ import annotations
from dataclasses import dataclass

from morphology.shapes import ShapeSpecification


@dataclass(eq=False)
class Node:
    shape: ShapeSpecification
    label: str = ""  # debug label

    def deep_copy(self) -> "Node":
        return Node(shape=self.shape.deep_copy(), label=self.label)
