"""
virtual_creatures module: world/creature.py

Toy body built from a Morphology:
- segments are laid out once from the joint faces, hovers and shape bounds
- the body moves as one piece; only hinge angles change shape-wise
- a turning hinge paddles its child segment, the power stroke (angle growing)
  pushes harder than the recovery stroke
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Dict, List, Tuple

import config
from morphology.morphology import Morphology
from morphology.nodes import Node
from morphology.shapes import Face
from world.joints import SimJoint, make_joint

Vec3 = Tuple[float, float, float]

DIRECTIONS: Dict[Face, Vec3] = {
    Face.RIGHT: (1.0, 0.0, 0.0),
    Face.LEFT: (-1.0, 0.0, 0.0),
    Face.FORWARD: (0.0, 1.0, 0.0),
    Face.BACKWARD: (0.0, -1.0, 0.0),
    Face.UP: (0.0, 0.0, 1.0),
    Face.DOWN: (0.0, 0.0, -1.0),
}

OPPOSITE: Dict[Face, Face] = {
    Face.RIGHT: Face.LEFT,
    Face.LEFT: Face.RIGHT,
    Face.FORWARD: Face.BACKWARD,
    Face.BACKWARD: Face.FORWARD,
    Face.UP: Face.DOWN,
    Face.DOWN: Face.UP,
}

# (horizontal, vertical) tangent faces used by the joint offsets
TANGENTS: Dict[Face, Tuple[Face, Face]] = {
    Face.RIGHT: (Face.FORWARD, Face.UP),
    Face.LEFT: (Face.FORWARD, Face.UP),
    Face.FORWARD: (Face.RIGHT, Face.UP),
    Face.BACKWARD: (Face.RIGHT, Face.UP),
    Face.UP: (Face.RIGHT, Face.FORWARD),
    Face.DOWN: (Face.RIGHT, Face.FORWARD),
}


def _add(a: Vec3, b: Vec3, s: float = 1.0) -> Vec3:
    return (a[0] + b[0] * s, a[1] + b[1] * s, a[2] + b[2] * s)


@dataclass
class Segment:
    node: Node
    offset: Vec3   # rest position relative to the body origin
    mass: float


class Creature:
    def __init__(self, morphology: Morphology):
        self.morphology = morphology
        self.joints: List[SimJoint] = [make_joint(e.joint) for e in morphology.edges]
        self.segments: Dict[Node, Segment] = {}
        self._place(morphology.root, (0.0, 0.0, 0.0))

        self.position: Vec3 = (0.0, 0.0, 0.0)
        self.velocity: Vec3 = (0.0, 0.0, 0.0)
        self.mass = sum(s.mass for s in self.segments.values()) or 1.0

    def _place(self, node: Node, offset: Vec3) -> None:
        self.segments[node] = Segment(node, offset, node.shape.volume())
        for e in self.morphology.outgoing_edges(node):
            j = e.joint
            parent = node.shape
            horizontal, vertical = TANGENTS[j.face]
            anchor = _add(offset, DIRECTIONS[j.face], parent.bound(j.face))
            anchor = _add(anchor, DIRECTIONS[horizontal], j.offset_horizontal * parent.bound(horizontal))
            anchor = _add(anchor, DIRECTIONS[vertical], j.offset_vertical * parent.bound(vertical))
            reach = j.hover + e.destination.shape.bound(OPPOSITE[j.face])
            self._place(e.destination, _add(anchor, DIRECTIONS[j.face], reach))

    def step(self, dt: float) -> None:
        impulse: Vec3 = (0.0, 0.0, 0.0)
        for e, joint in zip(self.morphology.edges, self.joints):
            delta = math.radians(joint.step(dt))
            if delta == 0.0:
                continue
            stroke = config.POWER_STROKE if delta > 0 else config.RECOVERY_STROKE
            area = e.destination.shape.volume() ** (2.0 / 3.0)
            sweep = DIRECTIONS[TANGENTS[e.joint.face][0]]
            impulse = _add(impulse, sweep, config.THRUST_SCALE * stroke * area * delta)

        v = _add(self.velocity, impulse, 1.0 / self.mass)
        self.velocity = (v[0] * config.BODY_DRAG, v[1] * config.BODY_DRAG, v[2] * config.BODY_DRAG)
        self.position = _add(self.position, self.velocity, dt)

    def segment_positions(self) -> List[Tuple[Segment, Vec3]]:
        return [(s, _add(self.position, s.offset)) for s in self.segments.values()]

    def center_of_mass(self) -> Vec3:
        cx = cy = cz = 0.0
        for s, (x, y, z) in self.segment_positions():
            cx += s.mass * x
            cy += s.mass * y
            cz += s.mass * z
        return (cx / self.mass, cy / self.mass, cz / self.mass)
