"""
virtual_creatures module: neural/network.py

Specification of one neural network: sensors, neurons, actors and the weighted
connections between them.

A connection that bridges two networks (an inter-network connection) is
registered in the lists of both networks. That dual registration is what lets a
Morphology reconstruct which networks a connection bridges.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional

import config
from exceptions import MembershipError, StructuralInvariantError
from neural.neuron import NeuralSpec, NeuronFunc
from neural.synapse import Connection, MAX_WEIGHT


class NNSpecification:
    def __init__(
        self,
        sensors: Iterable[NeuralSpec] = (),
        neurons: Iterable[NeuralSpec] = (),
        actors: Iterable[NeuralSpec] = (),
        connections: Iterable[Connection] = (),
    ):
        self.sensors: List[NeuralSpec] = list(sensors)
        self.neurons: List[NeuralSpec] = list(neurons)
        self.actors: List[NeuralSpec] = list(actors)
        self.connections: List[Connection] = list(connections)
        self.check_invariants()

    # ---- factories ----

    @staticmethod
    def empty() -> "NNSpecification":
        return NNSpecification()

    @staticmethod
    def empty_read_network(dof: int) -> "NNSpecification":
        return NNSpecification.empty_read_write_network(dof, 0)

    @staticmethod
    def empty_write_network(dof: int) -> "NNSpecification":
        return NNSpecification.empty_read_write_network(0, dof)

    @staticmethod
    def empty_read_write_network(n_sensors: int, n_actors: int) -> "NNSpecification":
        return NNSpecification(
            sensors=[NeuralSpec.sensor() for _ in range(n_sensors)],
            actors=[NeuralSpec.actor() for _ in range(n_actors)],
        )

    @staticmethod
    def sin_wave_brain() -> "NNSpecification":
        """
        Brain with a SAW oscillator feeding a SIN neuron: ``neurons[1]`` emits a
        sine wave whose period is set by the SAW rate.
        """
        saw = NeuralSpec.neuron(NeuronFunc.SAW)
        sin = NeuralSpec.neuron(NeuronFunc.SIN)
        return NNSpecification(neurons=[saw, sin], connections=[Connection(saw, sin)])

    # ---- validation ----

    def check_invariants(self) -> None:
        sensors = set(self.sensors)
        neurons = set(self.neurons)
        actors = set(self.actors)
        if len(sensors) != len(self.sensors) or len(neurons) != len(self.neurons) or len(actors) != len(self.actors):
            raise StructuralInvariantError("a neural is listed twice")
        if sensors & actors:
            raise StructuralInvariantError("sensors and actors should be disjoint sets")
        if neurons & sensors:
            raise StructuralInvariantError("neurons and sensors should be disjoint sets")
        if neurons & actors:
            raise StructuralInvariantError("neurons and actors should be disjoint sets")
        if any(not s.is_sensor() for s in self.sensors) or any(not n.is_neuron() for n in self.neurons) \
                or any(not a.is_actor() for a in self.actors):
            raise StructuralInvariantError("neural listed under the wrong role")

        sources = sensors | neurons
        destinations = neurons | actors
        fan_in: Dict[NeuralSpec, int] = {}
        for c in self.connections:
            if c.source.is_sensor() and c.destination.is_actor():
                raise StructuralInvariantError("no direct connections allowed between sensors and actors")
            if c.source not in sources and c.destination not in destinations:
                raise StructuralInvariantError(f"{c} does not hit anything in this network")
            fan_in[c.destination] = fan_in.get(c.destination, 0) + 1

        for n in self.neurons:
            required = n.min_connections
            if required >= 2 and fan_in.get(n, 0) < required:
                raise StructuralInvariantError(
                    f"{n} needs {required} incoming connections, has {fan_in.get(n, 0)}"
                )

    # ---- membership ----

    def all_neurals(self) -> List[NeuralSpec]:
        return self.sensors + self.neurons + self.actors

    def source_candidates(self) -> List[NeuralSpec]:
        """All possible starting points of a connection."""
        return self.sensors + self.neurons

    def destination_candidates(self) -> List[NeuralSpec]:
        """All possible end points of a connection."""
        return self.neurons + self.actors

    def number_of_neurals(self) -> int:
        return len(self.sensors) + len(self.neurons) + len(self.actors)

    def contains(self, n: NeuralSpec) -> bool:
        return n in self.all_neurals()

    def _require_member(self, n: NeuralSpec) -> None:
        if not self.contains(n):
            raise MembershipError(f"{n} is not in this network")

    # ---- connection views ----

    def internal_connections(self) -> List[Connection]:
        sources = set(self.source_candidates())
        destinations = set(self.destination_candidates())
        return [c for c in self.connections if c.source in sources and c.destination in destinations]

    def outgoing_connections(self) -> List[Connection]:
        """Connections that leave this network towards another one."""
        sources = set(self.source_candidates())
        destinations = set(self.destination_candidates())
        return [c for c in self.connections if c.source in sources and c.destination not in destinations]

    def incoming_connections(self) -> List[Connection]:
        """Connections that arrive here from another network."""
        sources = set(self.source_candidates())
        destinations = set(self.destination_candidates())
        return [c for c in self.connections if c.source not in sources and c.destination in destinations]

    def interfacing_connections(self) -> List[Connection]:
        return self.incoming_connections() + self.outgoing_connections()

    def get_incoming(self, n: NeuralSpec) -> List[Connection]:
        """Every connection ending on ``n``, local or from another network."""
        self._require_member(n)
        return [c for c in self.connections if c.destination is n]

    def get_outgoing(self, n: NeuralSpec) -> List[Connection]:
        """Every connection starting at ``n``, local or towards another network."""
        self._require_member(n)
        return [c for c in self.connections if c.source is n]

    def connected_count(self, n: NeuralSpec) -> int:
        if n not in self.neurons:
            raise MembershipError(f"{n} is not a neuron of this network")
        return sum(1 for c in self.connections if c.destination is n)

    def _has(self, c: Connection) -> bool:
        return c in self.connections

    def _remove(self, c: Connection) -> bool:
        try:
            self.connections.remove(c)
        except ValueError:
            return False
        return True

    # ---- modifications ----

    def add_neuron(self, function: NeuronFunc) -> NeuralSpec:
        n = NeuralSpec.neuron(function)
        self.neurons.append(n)
        return n

    def add_local_connection(self, source: NeuralSpec, destination: NeuralSpec, weight: float = MAX_WEIGHT) -> Connection:
        if source not in self.source_candidates():
            raise MembershipError(f"{source} is not a source in this network")
        if destination not in self.destination_candidates():
            raise MembershipError(f"{destination} is not a destination in this network")
        if source.is_sensor() and destination.is_actor():
            raise StructuralInvariantError("no direct connections allowed between sensors and actors")
        c = Connection(source, destination, weight)
        self.connections.append(c)
        return c

    def add_inter_connection(
        self,
        source: NeuralSpec,
        destination: NeuralSpec,
        destination_network: "NNSpecification",
        weight: float = MAX_WEIGHT,
    ) -> Connection:
        """Connect a source of this network to a destination of another one."""
        if destination_network is self:
            raise StructuralInvariantError("use add_local_connection inside one network")
        if source not in self.source_candidates():
            raise MembershipError(f"{source} is not a source in this network")
        if destination not in destination_network.destination_candidates():
            raise MembershipError(f"{destination} is not a destination in the destination network")
        if source.is_sensor() and destination.is_actor():
            raise StructuralInvariantError("no direct connections allowed between sensors and actors")
        c = Connection(source, destination, weight)
        self.connections.append(c)
        destination_network.connections.append(c)
        return c

    def add_inter_connection_to_actors(self, source: NeuralSpec, destination_network: "NNSpecification") -> List[Connection]:
        return [self.add_inter_connection(source, actor, destination_network) for actor in destination_network.actors]

    def remove_internal_connection(self, c: Connection) -> None:
        if config.DEBUG:
            debug_check_connection(c, self, self)
        if not self._remove(c):
            raise StructuralInvariantError("connection could not be removed because it is no longer in this network")

    def remove_external_connection(self, c: Connection, destination_network: "NNSpecification") -> None:
        """Remove a connection from this network to ``destination_network``."""
        if config.DEBUG:
            debug_check_connection(c, self, destination_network)
        if not self._remove(c):
            raise StructuralInvariantError("connection could not be removed because it is no longer in this network")
        if not destination_network._remove(c):
            raise StructuralInvariantError("connection could not be removed from the destination network")

    def move_external_connection_source(
        self,
        c: Connection,
        new_source_network: "NNSpecification",
        new_source: NeuralSpec,
        old_source_network: "NNSpecification",
    ) -> None:
        """
        Re-home the source of a connection from ``old_source_network`` to this
        network. The connection keeps its identity.
        """
        if config.DEBUG:
            debug_check_connection(c, old_source_network, self)
            if new_source not in new_source_network.source_candidates():
                raise StructuralInvariantError("new source is not a source of the new source network")
            if new_source_network is self:
                raise StructuralInvariantError("an external connection cannot move into its destination network")
            if new_source_network is not old_source_network and new_source_network._has(c):
                raise StructuralInvariantError("new source network already holds this connection")
            if new_source is c.source or new_source is c.destination:
                raise StructuralInvariantError("new source is not a valid endpoint")
        if not old_source_network._remove(c):
            raise StructuralInvariantError("connection was not in the old source network")
        c.source = new_source
        new_source_network.connections.append(c)

    def move_external_connection_destination(
        self,
        c: Connection,
        new_destination_network: "NNSpecification",
        new_destination: NeuralSpec,
        old_destination_network: "NNSpecification",
    ) -> None:
        """
        Re-home the destination of a connection from this network to
        ``old_destination_network``. The connection keeps its identity.
        """
        if config.DEBUG:
            debug_check_connection(c, self, old_destination_network)
            if new_destination not in new_destination_network.destination_candidates():
                raise StructuralInvariantError("new destination is not a destination of the new destination network")
            if new_destination_network is self:
                raise StructuralInvariantError("an external connection cannot move into its source network")
            if new_destination_network is not old_destination_network and new_destination_network._has(c):
                raise StructuralInvariantError("new destination network already holds this connection")
            if new_destination is c.source or new_destination is c.destination:
                raise StructuralInvariantError("new destination is not a valid endpoint")
        if not old_destination_network._remove(c):
            raise StructuralInvariantError("connection was not in the old destination network")
        c.destination = new_destination
        new_destination_network.connections.append(c)

    # ---- copying ----

    def copy(
        self,
        identity_map: Dict[NeuralSpec, NeuralSpec],
        copied_connections: Optional[Dict[Connection, Connection]] = None,
    ) -> "NNSpecification":
        """
        Clone this network through ``identity_map`` (old neural -> new neural),
        which must already cover every neural a connection here touches, including
        those of other networks.

        ``copied_connections`` is shared by every network copied together so a
        connection registered in two networks is cloned exactly once.
        """
        if copied_connections is None:
            copied_connections = {}
        connections = []
        for old in self.connections:
            new = copied_connections.get(old)
            if new is None:
                new = Connection(identity_map[old.source], identity_map[old.destination], old.weight)
                copied_connections[old] = new
            connections.append(new)
        return NNSpecification(
            sensors=[identity_map[s] for s in self.sensors],
            neurons=[identity_map[n] for n in self.neurons],
            actors=[identity_map[a] for a in self.actors],
            connections=connections,
        )

    def __repr__(self) -> str:
        return (
            f"NNSpecification(sensors={len(self.sensors)}, neurons={len(self.neurons)}, "
            f"actors={len(self.actors)}, connections={len(self.connections)})"
        )


def debug_check_connection(c: Connection, source: NNSpecification, destination: NNSpecification) -> None:
    if not source._has(c):
        raise StructuralInvariantError("expected connection in source network")
    if c.source not in source.source_candidates():
        raise StructuralInvariantError("expected connection.source in source network")
    if not destination._has(c):
        raise StructuralInvariantError("expected connection in destination network")
    if c.destination not in destination.destination_candidates():
        raise StructuralInvariantError("expected connection.destination in destination network")
