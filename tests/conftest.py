"""Shared fixtures for the virtual creature tests."""

import random

import pytest

from morphology.edges import EdgeMorph
from morphology.joints import JointSpecification
from morphology.morphology import Morphology
from morphology.nodes import Node
from morphology.shapes import Cube, Face
from neural.network import NNSpecification
from world.joints import HingeJoint


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fins():
    """Ball with two hinged fins driven by the brain's sine wave."""
    return Morphology.sin_wave_fins()


@pytest.fixture
def sensing_arm():
    """
    Root cube with one hinged arm whose network reads and writes the hinge;
    the brain is empty.
    """
    root = Node(Cube(0.5), label="root")
    arm = Node(Cube(0.3), label="arm")
    joint = JointSpecification.create_hinge(Face.UP, 0.0, 1.0)
    network = NNSpecification.empty_read_write_network(1, 1)
    return Morphology(root, NNSpecification.empty(), [EdgeMorph(root, arm, joint, network)])


@pytest.fixture
def hinge_joints():
    def make(morphology):
        return [HingeJoint(e.joint) for e in morphology.edges]
    return make
