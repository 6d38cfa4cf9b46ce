"""
virtual_creatures module: world/joints.py

Simulated joints for the toy physics layer. They implement the joint protocol
the network engine consumes: ``angle`` (degrees) and ``motor_force``.

- hinge: motor force accelerates the joint, drag damps it, limit stops clamp it
- fixed / piston / rotational: passive, they never move
"""

from __future__ import annotations
import math

import config
from morphology.joints import JointSpecification, JointType


class SimJoint:
    def __init__(self, spec: JointSpecification):
        self.spec = spec
        self.joint_type = spec.joint_type
        self.angle = 0.0        # degrees
        self.motor_force = 0.0

    def step(self, dt: float) -> float:
        """Advance the joint by ``dt`` seconds and return the angle change in degrees."""
        return 0.0


class HingeJoint(SimJoint):
    def __init__(
        self,
        spec: JointSpecification,
        gain: float = config.HINGE_MOTOR_GAIN,
        drag: float = config.HINGE_DRAG,
    ):
        super().__init__(spec)
        self.limit = math.degrees(spec.limits[0]) if spec.limits else math.degrees(config.DEFAULT_HINGE_LIMIT)
        self.velocity = 0.0     # degrees per second
        self.gain = gain
        self.drag = drag

    def step(self, dt: float) -> float:
        before = self.angle
        self.velocity += self.motor_force * self.gain * dt
        self.velocity *= self.drag
        self.angle += self.velocity * dt

        # limit stops absorb the motion
        if self.angle > self.limit:
            self.angle = self.limit
            self.velocity = 0.0
        elif self.angle < -self.limit:
            self.angle = -self.limit
            self.velocity = 0.0
        return self.angle - before


def make_joint(spec: JointSpecification) -> SimJoint:
    if spec.joint_type == JointType.HINGE:
        return HingeJoint(spec)
    return SimJoint(spec)
