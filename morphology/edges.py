"""
virtual_creatures module: morphology/edges.py

Edges attach a child segment to its parent through a joint, and carry the
joint's local neural network.
"""

from __future__ import annotations
from dataclasses import dataclass

from exceptions import StructuralInvariantError
from morphology.joints import JointSpecification
from morphology.nodes import Node
from neural.network import NNSpecification


@dataclass(eq=False)
class EdgeMorph:
    source: Node
    destination: Node
    joint: JointSpecification
    network: NNSpecification

    def __post_init__(self):
        self.check_invariants()

    def check_invariants(self) -> None:
        dof = self.joint.dof
        if len(self.network.sensors) > dof:
            raise StructuralInvariantError(
                f"{len(self.network.sensors)} sensors on a joint with {dof} degrees of freedom"
            )
        if len(self.network.actors) > dof:
            raise StructuralInvariantError(
                f"{len(self.network.actors)} actors on a joint with {dof} degrees of freedom"
            )
