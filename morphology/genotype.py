"""
virtual_creatures module: morphology/genotype.py

Placeholder for ancestor tracking. A Morphology carries one, but no logic
depends on it yet.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from morphology.edges import EdgeMorph
    from morphology.nodes import Node
    from neural.network import NNSpecification


@dataclass
class Genotype:
    root: Optional["Node"] = None
    nodes: Optional[List["Node"]] = None
    edges: Optional[List["EdgeMorph"]] = None
    brain: Optional["NNSpecification"] = None
