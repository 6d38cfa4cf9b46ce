"""
Tests for NeuralSpec, Connection and NNSpecification: construction invariants,
membership queries and the inter-network mutators.
"""

import pytest

from exceptions import MembershipError, StructuralInvariantError
from neural.network import NNSpecification
from neural.neuron import NeuralSpec, NeuronFunc, UNBOUNDED
from neural.synapse import Connection


# ============================================================================
# NeuralSpec / Connection
# ============================================================================

class TestNeuralSpec:
    def test_cardinalities(self):
        assert NeuronFunc.SIN.min_connections == 1
        assert NeuronFunc.MEMORY.min_connections == 1
        assert NeuronFunc.SAW.min_connections == 1
        assert NeuronFunc.MIN.min_connections == 2
        assert NeuronFunc.DIVISION.min_connections == 2
        assert NeuronFunc.IFSUM.min_connections == 3
        assert NeuronFunc.DIVISION.max_connections == 2
        assert NeuronFunc.GTE.max_connections == 3
        assert NeuronFunc.SUM.max_connections == UNBOUNDED

    def test_sensors_and_actors_need_no_inputs(self):
        assert NeuralSpec.sensor().min_connections == 0
        assert NeuralSpec.actor().min_connections == 0

    def test_neuron_requires_function(self):
        from neural.neuron import NeuronType
        with pytest.raises(ValueError):
            NeuralSpec(NeuronType.NEURON)
        with pytest.raises(ValueError):
            NeuralSpec(NeuronType.SENSOR, NeuronFunc.ABS)

    def test_identity_equality(self):
        a = NeuralSpec.neuron(NeuronFunc.ABS)
        b = a.clone()
        assert a is not b
        assert a != b
        assert b.function == NeuronFunc.ABS
        assert b.id != a.id


class TestConnection:
    def test_actor_cannot_be_source(self):
        with pytest.raises(StructuralInvariantError):
            Connection(NeuralSpec.actor(), NeuralSpec.neuron(NeuronFunc.ABS))

    def test_sensor_cannot_be_destination(self):
        with pytest.raises(StructuralInvariantError):
            Connection(NeuralSpec.neuron(NeuronFunc.ABS), NeuralSpec.sensor())

    def test_weight_range(self):
        a = NeuralSpec.sensor()
        b = NeuralSpec.neuron(NeuronFunc.ABS)
        with pytest.raises(StructuralInvariantError):
            Connection(a, b, 1.5)
        c = Connection(a, b, 0.25)
        with pytest.raises(StructuralInvariantError):
            c.weight = -0.1
        assert c.weight == 0.25


# ============================================================================
# Construction invariants
# ============================================================================

class TestInvariants:
    def test_min_neuron_with_one_input_is_rejected(self):
        s = NeuralSpec.sensor()
        n = NeuralSpec.neuron(NeuronFunc.MIN)
        with pytest.raises(StructuralInvariantError):
            NNSpecification(sensors=[s], neurons=[n], connections=[Connection(s, n)])

    def test_min_neuron_with_two_inputs_is_accepted(self):
        s1, s2 = NeuralSpec.sensor(), NeuralSpec.sensor()
        n = NeuralSpec.neuron(NeuronFunc.MIN)
        nn = NNSpecification(sensors=[s1, s2], neurons=[n], connections=[Connection(s1, n), Connection(s2, n)])
        assert nn.connected_count(n) == 2

    def test_unary_neuron_may_be_unconnected(self):
        n = NeuralSpec.neuron(NeuronFunc.SIN)
        nn = NNSpecification(neurons=[n])
        assert nn.connected_count(n) == 0

    def test_sensor_to_actor_is_rejected(self):
        s, a = NeuralSpec.sensor(), NeuralSpec.actor()
        with pytest.raises(StructuralInvariantError):
            NNSpecification(sensors=[s], actors=[a], connections=[Connection(s, a)])

    def test_neural_listed_twice_is_rejected(self):
        s = NeuralSpec.sensor()
        with pytest.raises(StructuralInvariantError):
            NNSpecification(sensors=[s, s])

    def test_wrong_role_is_rejected(self):
        with pytest.raises(StructuralInvariantError):
            NNSpecification(sensors=[NeuralSpec.actor()])

    def test_foreign_connection_is_rejected(self):
        a = NeuralSpec.neuron(NeuronFunc.ABS)
        b = NeuralSpec.neuron(NeuronFunc.ABS)
        with pytest.raises(StructuralInvariantError):
            NNSpecification(neurons=[NeuralSpec.neuron(NeuronFunc.SIN)], connections=[Connection(a, b)])


# ============================================================================
# Queries
# ============================================================================

class TestQueries:
    def test_factories(self):
        nn = NNSpecification.empty_read_write_network(2, 1)
        assert len(nn.sensors) == 2 and len(nn.actors) == 1 and not nn.neurons
        assert len(NNSpecification.empty_read_network(1).sensors) == 1
        assert len(NNSpecification.empty_write_network(2).actors) == 2
        assert NNSpecification.empty().number_of_neurals() == 0

    def test_sin_wave_brain(self):
        brain = NNSpecification.sin_wave_brain()
        saw, sin = brain.neurons
        assert saw.function == NeuronFunc.SAW
        assert sin.function == NeuronFunc.SIN
        assert [c.source for c in brain.get_incoming(sin)] == [saw]
        assert brain.internal_connections() == brain.connections

    def test_candidates(self):
        nn = NNSpecification.empty_read_write_network(1, 1)
        n = nn.add_neuron(NeuronFunc.ABS)
        assert nn.source_candidates() == nn.sensors + [n]
        assert nn.destination_candidates() == [n] + nn.actors

    def test_non_member_queries_fail(self):
        nn = NNSpecification.sin_wave_brain()
        stranger = NeuralSpec.neuron(NeuronFunc.ABS)
        with pytest.raises(MembershipError):
            nn.get_incoming(stranger)
        with pytest.raises(KeyError):
            nn.get_outgoing(stranger)
        with pytest.raises(MembershipError):
            nn.connected_count(stranger)


# ============================================================================
# Mutators
# ============================================================================

class TestMutators:
    def test_local_connection_roles(self):
        nn = NNSpecification.empty_read_write_network(1, 1)
        with pytest.raises(StructuralInvariantError):
            nn.add_local_connection(nn.sensors[0], nn.actors[0])
        n = nn.add_neuron(NeuronFunc.ABS)
        nn.add_local_connection(nn.sensors[0], n)
        nn.add_local_connection(n, nn.actors[0], 0.5)
        assert len(nn.internal_connections()) == 2
        nn.check_invariants()

    def test_inter_connection_is_registered_twice(self):
        brain = NNSpecification.sin_wave_brain()
        fin = NNSpecification.empty_write_network(1)
        sin = brain.neurons[1]
        c = brain.add_inter_connection(sin, fin.actors[0], fin)
        assert c in brain.connections and c in fin.connections
        assert brain.outgoing_connections() == [c]
        assert fin.incoming_connections() == [c]
        assert fin.interfacing_connections() == [c]
        assert fin.get_incoming(fin.actors[0]) == [c]

    def test_remove_external_connection(self):
        brain = NNSpecification.sin_wave_brain()
        fin = NNSpecification.empty_write_network(1)
        c = brain.add_inter_connection(brain.neurons[1], fin.actors[0], fin)
        brain.remove_external_connection(c, fin)
        assert c not in brain.connections
        assert c not in fin.connections
        with pytest.raises(StructuralInvariantError):
            brain.remove_internal_connection(c)

    def test_move_destination_keeps_identity(self):
        brain = NNSpecification.sin_wave_brain()
        left = NNSpecification.empty_write_network(1)
        right = NNSpecification.empty_write_network(1)
        c = brain.add_inter_connection(brain.neurons[1], left.actors[0], left)

        brain.move_external_connection_destination(c, right, right.actors[0], left)
        assert c.destination is right.actors[0]
        assert c in right.connections and c not in left.connections
        assert brain.connections.count(c) == 1

    def test_move_source_keeps_identity(self):
        brain = NNSpecification.sin_wave_brain()
        saw, sin = brain.neurons
        fin = NNSpecification.empty_write_network(1)
        c = brain.add_inter_connection(sin, fin.actors[0], fin)

        fin.move_external_connection_source(c, brain, saw, brain)
        assert c.source is saw
        assert brain.connections.count(c) == 1
        assert fin.connections == [c]

    def test_copy_remaps_every_neural(self):
        brain = NNSpecification.sin_wave_brain()
        identity = {n: n.clone() for n in brain.all_neurals()}
        copy = brain.copy(identity)
        assert [identity[n] for n in brain.neurons] == copy.neurons
        assert copy.connections[0] is not brain.connections[0]
        assert copy.connections[0].source is identity[brain.neurons[0]]
        assert copy.connections[0].weight == brain.connections[0].weight
