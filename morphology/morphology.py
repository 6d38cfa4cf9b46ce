"""
virtual_creatures module: morphology/morphology.py

Morphology container: a tree of body segments whose edges carry a joint and a
local network, plus a shared brain network wired into the edge networks.
"""

from __future__ import annotations
import math
from typing import Dict, List, Optional, Tuple

from exceptions import StructuralInvariantError
from morphology.edges import EdgeMorph
from morphology.genotype import Genotype
from morphology.joints import JointSpecification
from morphology.nodes import Node
from morphology.shapes import Face, PlaneRectangle, Sphere
from neural.network import NNSpecification
from neural.neuron import NeuralSpec
from neural.synapse import Connection


class Morphology:
    def __init__(
        self,
        root: Node,
        brain: NNSpecification,
        edges: List[EdgeMorph],
        genotype: Optional[Genotype] = None,
    ):
        self.root = root
        self.brain = brain
        self.edges: List[EdgeMorph] = list(edges)
        self.genotype = genotype
        self.nodes: List[Node] = _distinct([root] + [n for e in self.edges for n in (e.source, e.destination)])
        self.check_invariants()

    def check_invariants(self) -> None:
        if self.brain.sensors or self.brain.actors:
            raise StructuralInvariantError("the brain should not have sensors or actors")

        networks = [e.network for e in self.edges]
        if self.brain in networks:
            raise StructuralInvariantError("the brain cannot be the network of an edge")
        if len(_distinct(networks)) != len(networks):
            raise StructuralInvariantError("a network belongs to more than one edge")

        pairs = set()
        for e in self.edges:
            pair = (e.source, e.destination)
            if pair in pairs:
                raise StructuralInvariantError("two edges share the same source and destination")
            pairs.add(pair)
            e.check_invariants()

        self._check_tree()
        for network in self.networks():
            network.check_invariants()
        self._check_interconnections()

    def _check_tree(self) -> None:
        parents: Dict[Node, int] = {}
        for e in self.edges:
            if e.source is e.destination:
                raise StructuralInvariantError("an edge cannot attach a node to itself")
            parents[e.destination] = parents.get(e.destination, 0) + 1
        if self.root in parents:
            raise StructuralInvariantError("the root cannot be attached to a parent")
        if any(count > 1 for count in parents.values()):
            raise StructuralInvariantError("a node has more than one parent")

        reached = {self.root}
        frontier = [self.root]
        while frontier:
            node = frontier.pop()
            for e in self.outgoing_edges(node):
                if e.destination not in reached:
                    reached.add(e.destination)
                    frontier.append(e.destination)
        if len(reached) != len(self.nodes):
            raise StructuralInvariantError("not every node is reachable from the root")

    def _check_interconnections(self) -> None:
        # both ends of an inter-network connection must resolve to exactly one network
        self.inter_edge_map()
        networks = self.networks()
        for network in networks:
            for c in network.incoming_connections():
                owners = [n for n in networks if n is not network and c in n.outgoing_connections()]
                if len(owners) != 1:
                    raise StructuralInvariantError(f"{c} has {len(owners)} source networks")

    # ---- queries ----

    def networks(self) -> List[NNSpecification]:
        """The brain first, then every edge network in edge order."""
        return [self.brain] + [e.network for e in self.edges]

    def outgoing_edges(self, node: Node) -> List[EdgeMorph]:
        return [e for e in self.edges if e.source is node]

    def inter_edge_map(self) -> Dict[Connection, Tuple[NNSpecification, NNSpecification]]:
        """
        For every outgoing connection, the (source network, destination network)
        pair it bridges.
        """
        networks = self.networks()
        incoming = [(n, n.incoming_connections()) for n in networks]
        bridges: Dict[Connection, Tuple[NNSpecification, NNSpecification]] = {}
        for source_network in networks:
            for c in source_network.outgoing_connections():
                targets = [n for n, cs in incoming if c in cs]
                if len(targets) != 1:
                    raise StructuralInvariantError(f"{c} reaches {len(targets)} destination networks")
                bridges[c] = (source_network, targets[0])
        return bridges

    def neighbor_map(self) -> Dict[NNSpecification, List[NNSpecification]]:
        """
        Per network, the networks it shares a direct connection with. The brain
        neighbours every network.
        """
        networks = self.networks()
        neighbors: Dict[NNSpecification, List[NNSpecification]] = {n: [] for n in networks}

        def link(a: NNSpecification, b: NNSpecification) -> None:
            if a is not b and b not in neighbors[a]:
                neighbors[a].append(b)

        for network in networks[1:]:
            link(self.brain, network)
            link(network, self.brain)
        for source_network, destination_network in self.inter_edge_map().values():
            link(source_network, destination_network)
            link(destination_network, source_network)
        return neighbors

    def connection_count(self) -> int:
        return len(_distinct([c for n in self.networks() for c in n.connections]))

    def neuron_count(self) -> int:
        return sum(len(n.neurons) for n in self.networks())

    # ---- copying ----

    def deep_copy(self) -> "Morphology":
        """
        Clone every node, joint, network, neural and connection.

        All neurals of all networks are mapped first so connections that cross
        network boundaries are rewired to the copies on both sides.
        """
        identity_map: Dict[NeuralSpec, NeuralSpec] = {
            n: n.clone() for network in self.networks() for n in network.all_neurals()
        }

        node_map = {node: node.deep_copy() for node in self.nodes}
        copied_connections: Dict[Connection, Connection] = {}
        brain = self.brain.copy(identity_map, copied_connections)
        edges = [
            EdgeMorph(
                source=node_map[e.source],
                destination=node_map[e.destination],
                joint=e.joint.copy(),
                network=e.network.copy(identity_map, copied_connections),
            )
            for e in self.edges
        ]
        return Morphology(node_map[self.root], brain, edges, self.genotype)

    # ---- starters ----

    @staticmethod
    def sin_wave_fins(limit: float = math.pi / 2 * 0.8) -> "Morphology":
        """
        A ball with two hinged fins. The brain's sine wave drives the actor of
        both fins; the fin networks are write-only.
        """
        brain = NNSpecification.sin_wave_brain()
        sin = brain.neurons[1]

        root = Node(Sphere(0.25), label="body")
        right = Node(PlaneRectangle(0.5, 2.0), label="right fin")
        left = Node(PlaneRectangle(0.5, 2.0), label="left fin")

        right_joint = JointSpecification.create_hinge(Face.RIGHT, 0.1, limit)
        left_joint = JointSpecification.create_hinge(Face.LEFT, 0.1, limit)
        right_network = NNSpecification.empty_write_network(right_joint.dof)
        left_network = NNSpecification.empty_write_network(left_joint.dof)
        brain.add_inter_connection_to_actors(sin, right_network)
        brain.add_inter_connection_to_actors(sin, left_network)

        edges = [
            EdgeMorph(root, right, right_joint, right_network),
            EdgeMorph(root, left, left_joint, left_network),
        ]
        return Morphology(root, brain, edges)

    def __repr__(self) -> str:
        return (
            f"Morphology(nodes={len(self.nodes)}, edges={len(self.edges)}, "
            f"neurons={self.neuron_count()}, connections={self.connection_count()})"
        )


def _distinct(items: list) -> list:
    seen = set()
    out = []
    for item in items:
        if id(item) not in seen:
            seen.add(id(item))
            out.append(item)
    return out
