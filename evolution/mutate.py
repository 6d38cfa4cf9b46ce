"""
virtual_creatures module: evolution/mutate.py

Mutation pass over a whole Morphology: joint geometry, neurons, local
connections and inter-network connections, followed by a cardinality repair.

The pass always works on a private deep copy and ends by constructing a new,
re-validated Morphology.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

import config
from evolution.decisions import (
    Decision,
    DoubleMutation,
    IntegerDecision,
    MultipleDecision,
    NeuronChooser,
    NominalMutation,
)
from exceptions import RepairExhaustedError
from morphology.edges import EdgeMorph
from morphology.joints import MAX_HOVER, MIN_HOVER, JointSpecification
from morphology.morphology import Morphology
from morphology.shapes import Face
from neural.network import NNSpecification
from neural.neuron import NeuralSpec, NeuronFunc
from neural.synapse import Connection, MAX_WEIGHT, MIN_WEIGHT

Endpoint = Tuple[NNSpecification, NeuralSpec]


@dataclass(frozen=True)
class RepairLimitation:
    """A neuron the repair stage could not bring up to its minimal fan-in."""
    network_index: int
    function: NeuronFunc
    connected: int
    required: int


@dataclass
class MutationReport:
    joints_changed: int = 0
    neurons_added: int = 0
    weights_changed: int = 0
    internal_rewired: int = 0
    internal_removed: int = 0
    internal_added: int = 0
    inter_rewired: int = 0
    inter_removed: int = 0
    inter_added: int = 0
    repairs_added: int = 0
    repairs_removed: int = 0
    limitations: List[RepairLimitation] = field(default_factory=list)


@dataclass
class MutationResult:
    morphology: Morphology
    report: MutationReport


# ---- endpoint search ----

def _fan_in(network: NNSpecification, n: NeuralSpec) -> int:
    return sum(1 for c in network.connections if c.destination is n)


def find_new_destination(
    rng: random.Random,
    source_network: NNSpecification,
    source: NeuralSpec,
    networks: Sequence[NNSpecification],
) -> Optional[Endpoint]:
    """
    Pick a legal new destination for ``source`` among ``networks``.

    Excludes actors when the source is a sensor, the source itself, every
    neural the source already feeds and neurons already at their maximal
    fan-in. Returns None when nothing is left.
    """
    # every connection leaving ``source`` is registered in its own network
    connected = {c.destination for c in source_network.connections if c.source is source}
    candidates: List[Endpoint] = []
    for network in networks:
        for d in network.destination_candidates():
            if d is source or d in connected:
                continue
            if source.is_sensor() and d.is_actor():
                continue
            if d.is_neuron() and _fan_in(network, d) >= d.max_connections:
                continue
            candidates.append((network, d))
    if not candidates:
        return None
    return rng.choice(candidates)


def find_new_source(
    rng: random.Random,
    destination_network: NNSpecification,
    destination: NeuralSpec,
    networks: Sequence[NNSpecification],
) -> Optional[Endpoint]:
    """Mirror of :func:`find_new_destination` for a connection ending on ``destination``."""
    connected = {c.source for c in destination_network.connections if c.destination is destination}
    candidates: List[Endpoint] = []
    for network in networks:
        for s in network.source_candidates():
            if s is destination or s in connected:
                continue
            if s.is_sensor() and destination.is_actor():
                continue
            candidates.append((network, s))
    if not candidates:
        return None
    return rng.choice(candidates)


def _connect(source_network: NNSpecification, source: NeuralSpec, destination_network: NNSpecification,
             destination: NeuralSpec, weight: float) -> Connection:
    if source_network is destination_network:
        return source_network.add_local_connection(source, destination, weight)
    return source_network.add_inter_connection(source, destination, destination_network, weight)


# ---- the pass ----

class Mutator:
    def __init__(
        self,
        p_add_neuron: float = config.P_ADD_NEURON,
        p_weight: float = config.P_WEIGHT,
        weight_coherence: float = config.WEIGHT_COHERENCE,
        p_internal_structure: float = config.P_INTERNAL_STRUCTURE,
        internal_outcomes: Sequence[float] = config.INTERNAL_OUTCOMES,
        new_connection_p_zero: float = config.NEW_CONNECTION_P_ZERO,
        new_connection_max: int = config.NEW_CONNECTION_MAX,
        p_inter_structure: float = config.P_INTER_STRUCTURE,
        inter_outcomes: Sequence[float] = config.INTER_OUTCOMES,
        new_inter_connection_p_zero: float = config.NEW_INTER_CONNECTION_P_ZERO,
        new_inter_connection_max: int = config.NEW_INTER_CONNECTION_MAX,
        p_joint: float = config.P_JOINT,
        joint_coherence: float = config.JOINT_COHERENCE,
        p_face: float = config.P_FACE,
        neuron_groups=config.NEURON_GROUPS,
    ):
        self.add_neuron = Decision(p_add_neuron)
        self.weight = DoubleMutation(p_weight, weight_coherence, MIN_WEIGHT, MAX_WEIGHT)
        self.internal_structure = Decision(p_internal_structure)
        self.internal_outcomes = MultipleDecision(*internal_outcomes)
        self.new_connections = IntegerDecision(new_connection_p_zero, new_connection_max)
        self.inter_structure = Decision(p_inter_structure)
        self.inter_outcomes = MultipleDecision(*inter_outcomes)
        self.new_inter_connections = IntegerDecision(new_inter_connection_p_zero, new_inter_connection_max)
        self.chooser = NeuronChooser(neuron_groups, config.CHOOSER_ATTEMPTS)

        self.face = NominalMutation(p_face, Face)
        self.offset = DoubleMutation(p_joint, joint_coherence, -1.0, 1.0)
        self.hover = DoubleMutation(p_joint, joint_coherence, MIN_HOVER, MAX_HOVER)
        self.turn = DoubleMutation(p_joint, joint_coherence, -math.pi, math.pi)
        self.bending = DoubleMutation(p_joint, joint_coherence, 0.0, math.pi / 2)

    def mutate(self, rng: random.Random, morphology: Morphology, coherence: float) -> MutationResult:
        """
        Return a mutated, validated copy of ``morphology``.

        Raises RepairExhaustedError when some neuron could not be given enough
        incoming connections. ``morphology`` itself is never modified.
        """
        m = morphology.deep_copy()
        report = MutationReport()

        self._mutate_networks(rng, m, coherence, report)
        self._add_internal_connections(rng, m, coherence, report)
        self._mutate_inter_connections(rng, m, coherence, report)
        self._add_inter_connections(rng, m, coherence, report)
        self._repair(rng, m, report)

        logger.debug(f"[Mutator] coherence={coherence:.3f} {report}")
        if report.limitations:
            raise RepairExhaustedError(report.limitations)
        return MutationResult(Morphology(m.root, m.brain, m.edges, m.genotype), report)

    # ---- stage 1 ----

    def _mutate_joint(self, rng: random.Random, edge: EdgeMorph, coherence: float) -> bool:
        j = edge.joint
        new = replace(
            j,
            face=self.face.possibly_change(rng, j.face, coherence),
            offset_horizontal=self.offset.possibly_change_val(rng, j.offset_horizontal, coherence),
            offset_vertical=self.offset.possibly_change_val(rng, j.offset_vertical, coherence),
            hover=self.hover.possibly_change_val(rng, j.hover, coherence),
            rotation=_wrap(self.turn.possibly_change_val(rng, j.rotation, coherence)),
            bending=self.bending.possibly_change_val(rng, j.bending, coherence),
            angle=_wrap(self.turn.possibly_change_val(rng, j.angle, coherence)),
        )
        if new == j:
            return False
        edge.joint = new
        return True

    def _mutate_networks(self, rng: random.Random, m: Morphology, coherence: float, report: MutationReport) -> None:
        neighbors = m.neighbor_map()
        joints = {e.network: e for e in m.edges}
        for network in m.networks():
            edge = joints.get(network)
            if edge is not None and self._mutate_joint(rng, edge, coherence):
                report.joints_changed += 1

            if self.add_neuron.happens(rng, coherence):
                reachable = sum(len(n.source_candidates()) for n in [network] + neighbors[network])
                network.add_neuron(self.chooser.choose(rng, reachable, coherence))
                report.neurons_added += 1

            for c in list(network.internal_connections()):
                weight = self.weight.possibly_change_val(rng, c.weight, coherence)
                if weight != c.weight:
                    c.weight = weight
                    report.weights_changed += 1

                if not self.internal_structure.happens(rng, coherence):
                    continue
                outcome = self.internal_outcomes.choose(rng)
                if outcome == 0:
                    found = find_new_source(rng, network, c.destination, [network])
                    if found is not None:
                        c.source = found[1]
                        report.internal_rewired += 1
                elif outcome == 1:
                    found = find_new_destination(rng, network, c.source, [network])
                    if found is not None:
                        c.destination = found[1]
                        report.internal_rewired += 1
                elif outcome == 2:
                    network.remove_internal_connection(c)
                    report.internal_removed += 1

    # ---- stage 2 ----

    def _add_internal_connections(self, rng: random.Random, m: Morphology, coherence: float,
                                  report: MutationReport) -> None:
        for network in m.networks():
            for _ in range(self.new_connections.draw(rng, coherence)):
                sources = network.source_candidates()
                if not sources:
                    break
                source = rng.choice(sources)
                found = find_new_destination(rng, network, source, [network])
                if found is None:
                    continue
                network.add_local_connection(source, found[1], rng.random())
                report.internal_added += 1

    # ---- stage 3 ----

    def _mutate_inter_connections(self, rng: random.Random, m: Morphology, coherence: float,
                                  report: MutationReport) -> None:
        neighbors = m.neighbor_map()
        for c, (source_network, destination_network) in list(m.inter_edge_map().items()):
            weight = self.weight.possibly_change_val(rng, c.weight, coherence)
            if weight != c.weight:
                c.weight = weight
                report.weights_changed += 1

            if not self.inter_structure.happens(rng, coherence):
                continue
            outcome = self.inter_outcomes.choose(rng)
            if outcome in (0, 1):
                if outcome == 0:
                    scope = [source_network]
                else:
                    scope = [n for n in neighbors[source_network] if n is not destination_network]
                found = find_new_source(rng, destination_network, c.destination, scope)
                if found is not None:
                    destination_network.move_external_connection_source(c, found[0], found[1], source_network)
                    report.inter_rewired += 1
            elif outcome in (2, 3):
                if outcome == 2:
                    scope = [destination_network]
                else:
                    scope = [n for n in neighbors[destination_network] if n is not source_network]
                found = find_new_destination(rng, source_network, c.source, scope)
                if found is not None:
                    source_network.move_external_connection_destination(c, found[0], found[1], destination_network)
                    report.inter_rewired += 1
            elif outcome == 4:
                source_network.remove_external_connection(c, destination_network)
                report.inter_removed += 1

    # ---- stage 4 ----

    def _add_inter_connections(self, rng: random.Random, m: Morphology, coherence: float,
                               report: MutationReport) -> None:
        for _ in range(self.new_inter_connections.draw(rng, coherence)):
            neighbors = m.neighbor_map()
            origins = [n for n in m.networks() if n.source_candidates() and neighbors[n]]
            if not origins:
                return
            source_network = rng.choice(origins)
            destination_network = rng.choice(neighbors[source_network])
            source = rng.choice(source_network.source_candidates())
            found = find_new_destination(rng, source_network, source, [destination_network])
            if found is None:
                continue
            source_network.add_inter_connection(source, found[1], destination_network, rng.random())
            report.inter_added += 1

    # ---- stage 5 ----

    def _repair(self, rng: random.Random, m: Morphology, report: MutationReport) -> None:
        neighbors = m.neighbor_map()
        networks = m.networks()
        owner: Dict[NeuralSpec, NNSpecification] = {n: net for net in networks for n in net.all_neurals()}

        for index, network in enumerate(networks):
            scope = [network] + neighbors[network]
            for n in list(network.neurons):
                while network.connected_count(n) < n.min_connections:
                    found = find_new_source(rng, network, n, scope)
                    if found is None:
                        report.limitations.append(
                            RepairLimitation(index, n.function, network.connected_count(n), n.min_connections)
                        )
                        break
                    _connect(found[0], found[1], network, n, rng.random())
                    report.repairs_added += 1

                while network.connected_count(n) > n.max_connections:
                    c = rng.choice(network.get_incoming(n))
                    source_network = owner[c.source]
                    if source_network is network:
                        network.remove_internal_connection(c)
                    else:
                        source_network.remove_external_connection(c, network)
                    report.repairs_removed += 1


def _wrap(angle: float) -> float:
    # (-pi, pi]
    return math.pi if angle <= -math.pi else angle
