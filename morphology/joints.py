"""
virtual_creatures module: morphology/joints.py

Joint descriptors: where a child segment attaches to its parent and how it may
move. The joint type is the single source of truth for the degrees of freedom
that bound how many sensors and actors the joint's network may use.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import math
from typing import Tuple

from exceptions import StructuralInvariantError
from morphology.shapes import Face

MIN_HOVER = -1.0
MAX_HOVER = 20.0


class JointType(Enum):
    FIXED = "FIXED"            # cannot move
    HINGE = "HINGE"            # like a door, turns around one axis
    PISTON = "PISTON"          # contracts and extends along the joint direction
    ROTATIONAL = "ROTATIONAL"  # ball and socket without twist

    @property
    def dof(self) -> int:
        return _DOF[self]


_DOF = {
    JointType.FIXED: 0,
    JointType.HINGE: 1,
    JointType.PISTON: 1,
    JointType.ROTATIONAL: 2,
}


@dataclass(frozen=True)
class JointSpecification:
    """
    One parent -> child attachment.

    face:
      - face of the parent's bounding box the child is attached to
    offset_horizontal, offset_vertical:
      - position on that face, relative to the bounding box, in [-1, 1]
    hover:
      - extra distance along the joint direction, in [MIN_HOVER, MAX_HOVER]
    rotation:
      - independent rotation of the attached shape, in (-pi, pi]
    bending:
      - initial inclination towards the face normal, in [0, pi/2]
    angle:
      - direction of the inclination around the normal, in (-pi, pi]
    limits:
      - symmetric limit per degree of freedom (radians)
    """
    face: Face = Face.UP
    offset_horizontal: float = 0.0
    offset_vertical: float = 0.0
    hover: float = 0.0
    rotation: float = 0.0
    bending: float = 0.0
    angle: float = 0.0
    joint_type: JointType = JointType.FIXED
    limits: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "face", Face(self.face))
        object.__setattr__(self, "limits", tuple(float(limit) for limit in self.limits))

        if not -1.0 <= self.offset_horizontal <= 1.0 or not -1.0 <= self.offset_vertical <= 1.0:
            raise StructuralInvariantError("joint offsets must lie in [-1, 1]")
        if not MIN_HOVER <= self.hover <= MAX_HOVER:
            raise StructuralInvariantError(f"hover {self.hover} outside [{MIN_HOVER}, {MAX_HOVER}]")
        if not -math.pi < self.rotation <= math.pi:
            raise StructuralInvariantError(f"rotation {self.rotation} outside (-pi, pi]")
        if not 0.0 <= self.bending <= math.pi / 2:
            raise StructuralInvariantError(f"bending {self.bending} outside [0, pi/2]")
        if not -math.pi < self.angle <= math.pi:
            raise StructuralInvariantError(f"angle {self.angle} outside (-pi, pi]")
        if len(self.limits) != self.dof:
            raise StructuralInvariantError(
                f"{self.joint_type.name} needs {self.dof} limits, got {len(self.limits)}"
            )
        for limit in self.limits:
            if limit < 0:
                raise StructuralInvariantError("joint limits must be non-negative")
            if self.joint_type in (JointType.HINGE, JointType.ROTATIONAL) and limit > math.pi / 2:
                raise StructuralInvariantError("angular joint limits cannot exceed pi/2")

    @property
    def dof(self) -> int:
        return self.joint_type.dof

    def copy(self) -> "JointSpecification":
        return replace(self)

    @staticmethod
    def create_simple(face: Face, hover: float) -> "JointSpecification":
        return JointSpecification(face=face, hover=hover, joint_type=JointType.FIXED)

    @staticmethod
    def create_hinge(face: Face, hover: float, limit: float) -> "JointSpecification":
        return JointSpecification(face=face, hover=hover, joint_type=JointType.HINGE, limits=(limit,))
