"""
virtual_creatures module: neural/engine.py

Explicit network engine: compiles a Morphology (brain plus every edge network)
into runtime operators and steps them against an array of joints.

Joint protocol (duck-typed): a HINGE joint exposes ``angle`` in degrees, read
into the first sensor slot, and ``motor_force``, written from the first actor
slot. Joints of other types are accepted but cannot be sensed, and their
actuation is not implemented.
"""

from __future__ import annotations
import threading
from typing import Dict, List, Optional, Sequence

from loguru import logger

import config
from exceptions import MembershipError, StructuralInvariantError, UnsupportedJointError
from morphology.joints import JointType
from morphology.morphology import Morphology
from neural.neuron import NeuralSpec
from neural.operators import Operator


class ExplicitNN:
    """
    Base of the tick-stepped engines. ``tick`` accounts for sub-steps and
    guards against two threads driving the same instance.
    """

    def __init__(self, joints: Sequence, tick_dt: float = 0.0):
        self.joints = list(joints)
        self.tick_dt = tick_dt
        self.total_ticks = 0
        self._driving = threading.Lock()

    def tick(self, n: int, dt: Optional[float] = None) -> None:
        """Read sensors, run ``n`` internal sub-steps, then update and write actors."""
        if n < 0:
            raise ValueError("number of sub-steps must be non-negative")
        if not self._driving.acquire(blocking=False):
            raise RuntimeError(f"{type(self).__name__} is already being ticked by another thread")
        try:
            if dt is not None:
                self.tick_dt = dt
            self._tick(n)
            self.total_ticks += n
        finally:
            self._driving.release()

    def _tick(self, n: int) -> None:
        raise NotImplementedError


class NaiveNN(ExplicitNN):
    """
    Synchronous engine: each sub-step every neuron reads the values its inputs
    held at the start of that sub-step. No topological order is assumed.
    """

    def __init__(self, joints: Sequence, joint_types: Sequence[JointType], tick_dt: float = 0.0):
        super().__init__(joints, tick_dt)
        self.joint_types = list(joint_types)
        # one sensor and one actor slot per degree of freedom of every joint
        self.sensors: List[List[Operator]] = []
        self.actors: List[List[Operator]] = []
        self.internal: List[Operator] = []
        self.created: Dict[NeuralSpec, Operator] = {}

    @staticmethod
    def construct(morphology: Morphology, joints: Sequence, tick_dt: float = 0.0) -> "NaiveNN":
        if len(morphology.edges) != len(joints):
            raise StructuralInvariantError(
                f"{len(morphology.edges)} edges but {len(joints)} joints: every edge needs exactly one joint"
            )
        networks = morphology.networks()
        for network in networks:
            network.check_invariants()

        nn = NaiveNN(joints, [e.joint.joint_type for e in morphology.edges], tick_dt)
        created = nn.created
        for n in morphology.brain.neurons:
            created[n] = Operator.neuron(n.function)

        for edge in morphology.edges:
            dof = edge.joint.dof
            network = edge.network
            if len(network.sensors) > dof or len(network.actors) > dof:
                raise StructuralInvariantError("more sensors or actors than degrees of freedom")

            sensors = [Operator.sensor() for _ in range(dof)]
            actors = [Operator.actor() for _ in range(dof)]
            for spec, op in zip(network.sensors, sensors):
                created[spec] = op
            for spec, op in zip(network.actors, actors):
                created[spec] = op
            nn.sensors.append(sensors)
            nn.actors.append(actors)
            for n in network.neurons:
                created[n] = Operator.neuron(n.function)

        for network in networks:
            for destination in network.destination_candidates():
                op = created[destination]
                for c in network.get_incoming(destination):
                    op.connect(created[c.source], c.weight)

        nn.internal = [created[n] for network in networks for n in network.neurons]
        logger.debug(
            f"[NaiveNN] compiled {len(nn.internal)} neurons, {len(joints)} joints, "
            f"{sum(len(op.inputs) for op in created.values())} connections"
        )
        return nn

    def _tick(self, n: int) -> None:
        for joint, joint_type, sensors in zip(self.joints, self.joint_types, self.sensors):
            if joint_type == JointType.FIXED:
                continue
            if joint_type == JointType.HINGE:
                sensors[0].value = joint.angle * config.HINGE_SENSOR_SCALE
            else:
                raise UnsupportedJointError(f"{joint_type.name} joints cannot be sensed by {type(self).__name__}")

        dt = self.tick_dt
        for _ in range(n):
            for op in self.internal:
                op.compute(dt)
            for op in self.internal:
                op.commit()

        for actors in self.actors:
            for op in actors:
                op.compute(dt)
                op.commit()

        for joint, joint_type, actors in zip(self.joints, self.joint_types, self.actors):
            if joint_type == JointType.HINGE:
                joint.motor_force = actors[0].value * config.FORCE_FACTOR
            # FIXED cannot move; PISTON and ROTATIONAL actuation is not implemented

    # ---- inspection ----

    def actor_outputs(self) -> List[List[float]]:
        """Actor values per joint, in edge order."""
        return [[op.value for op in actors] for actors in self.actors]

    def value_of(self, spec: NeuralSpec) -> float:
        op = self.created.get(spec)
        if op is None:
            raise MembershipError(f"{spec} is not part of this network")
        return op.value
