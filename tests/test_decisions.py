"""
Tests for the probabilistic mutation primitives. Statistical checks use fixed
seeds and generous tolerances.
"""

import random

import pytest

import config
from evolution.decisions import (
    Decision,
    DoubleMutation,
    IntegerDecision,
    MultipleDecision,
    NeuronChooser,
    NominalMutation,
    bounded_normal,
)
from morphology.shapes import Face


class TestBoundedNormal:
    def test_stays_in_range(self, rng):
        values = [bounded_normal(rng, 0.2, 0.0, 1.0) for _ in range(2000)]
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_on_the_boundary(self, rng):
        assert bounded_normal(rng, 0.0, 0.0, 1.0) == 0.0
        assert bounded_normal(rng, 1.0, 0.0, 1.0) == 1.0


class TestDecision:
    def test_full_coherence_never_happens(self, rng):
        d = Decision(1.0)
        assert not any(d.happens(rng, 1.0) for _ in range(5000))

    def test_base_rate(self, rng):
        d = Decision(0.3)
        rate = sum(d.happens(rng) for _ in range(20000)) / 20000
        assert rate == pytest.approx(0.3, abs=0.02)

    def test_coherence_scales_rate(self, rng):
        d = Decision(0.8)
        rate = sum(d.happens(rng, 0.5) for _ in range(20000)) / 20000
        assert rate == pytest.approx(0.4, abs=0.02)

    def test_probability_range(self):
        with pytest.raises(ValueError):
            Decision(1.5)


class TestDoubleMutation:
    def test_full_coherence_keeps_old_value(self, rng):
        m = DoubleMutation(1.0, 0.5, -1.0, 1.0)
        for old in (-1.0, -0.3, 0.0, 0.77, 1.0):
            assert m.new_val(rng, old, 1.0) == old

    def test_values_stay_in_range(self, rng):
        m = DoubleMutation(1.0, 0.3, 0.0, 1.0)
        old = 0.5
        for _ in range(2000):
            old = m.possibly_change_val(rng, old)
            assert 0.0 <= old <= 1.0

    def test_never_triggered(self, rng):
        m = DoubleMutation(0.0, 0.5, 0.0, 1.0)
        assert all(m.possibly_change_val(rng, 0.42) == 0.42 for _ in range(500))

    def test_high_operator_coherence_stays_close(self, rng):
        near = DoubleMutation(1.0, 1.0, 0.0, 10.0)
        far = DoubleMutation(1.0, 0.0, 0.0, 10.0)
        near_moves = [abs(near.new_val(rng, 5.0) - 5.0) for _ in range(2000)]
        far_moves = [abs(far.new_val(rng, 5.0) - 5.0) for _ in range(2000)]
        assert sum(near_moves) < sum(far_moves)

    def test_empty_range(self):
        with pytest.raises(ValueError):
            DoubleMutation(0.5, 0.5, 1.0, 0.0)


class TestIntegerDecision:
    def test_always_zero(self, rng):
        d = IntegerDecision(1.0, 5)
        assert all(d.draw(rng) == 0 for _ in range(500))

    def test_never_zero(self, rng):
        d = IntegerDecision(0.0, 4)
        draws = [d.draw(rng) for _ in range(2000)]
        assert all(1 <= n <= 4 for n in draws)
        assert draws.count(1) > draws.count(4)

    def test_single_value(self, rng):
        d = IntegerDecision(0.0, 1)
        assert all(d.draw(rng) == 1 for _ in range(200))

    def test_zero_rate(self, rng):
        d = IntegerDecision(0.6, 3)
        zeros = sum(d.draw(rng) == 0 for _ in range(20000)) / 20000
        assert zeros == pytest.approx(0.6, abs=0.02)

    def test_coherence_suppresses_draws(self, rng):
        d = IntegerDecision(0.0, 3)
        assert all(d.draw(rng, 1.0) == 0 for _ in range(200))


class TestMultipleDecision:
    def test_no_op_outcome(self, rng):
        d = MultipleDecision(0.2, 0.3)
        outcomes = [d.choose(rng) for _ in range(20000)]
        assert set(outcomes) == {0, 1, 2}
        assert d.no_op == 2
        assert outcomes.count(2) / len(outcomes) == pytest.approx(0.5, abs=0.02)
        assert outcomes.count(0) / len(outcomes) == pytest.approx(0.2, abs=0.02)

    def test_full_coherence_picks_first(self, rng):
        d = MultipleDecision(0.2, 0.3)
        assert all(d.choose(rng, 1.0) == 0 for _ in range(200))

    def test_invalid_weights(self):
        with pytest.raises(ValueError):
            MultipleDecision(0.7, 0.5)
        with pytest.raises(ValueError):
            MultipleDecision(-0.1, 0.5)


class TestNominalMutation:
    def test_always_changes(self, rng):
        m = NominalMutation(1.0, Face)
        for _ in range(200):
            assert m.possibly_change(rng, Face.UP) != Face.UP

    def test_never_changes(self, rng):
        m = NominalMutation(0.0, Face)
        assert all(m.possibly_change(rng, Face.LEFT) == Face.LEFT for _ in range(200))

    def test_coherence_blocks_change(self, rng):
        m = NominalMutation(1.0, Face)
        assert all(m.possibly_change(rng, Face.LEFT, 1.0) == Face.LEFT for _ in range(200))


class TestNeuronChooser:
    def test_empty_network_gets_simplest_group(self, rng):
        chooser = NeuronChooser(config.NEURON_GROUPS)
        unary = set(chooser.functions[0])
        assert all(chooser.choose(rng, 0) in unary for _ in range(200))

    def test_respects_network_size(self, rng):
        chooser = NeuronChooser(config.NEURON_GROUPS)
        for size in (1, 2):
            for _ in range(500):
                assert chooser.choose(rng, size).min_connections <= size

    def test_large_network_reaches_every_group(self, rng):
        chooser = NeuronChooser(config.NEURON_GROUPS)
        chosen = {chooser.choose(rng, 10) for _ in range(3000)}
        for functions in chooser.functions:
            assert chosen & set(functions)

    def test_needs_groups(self):
        with pytest.raises(ValueError):
            NeuronChooser(())


def test_primitives_are_reproducible():
    a, b = random.Random(7), random.Random(7)
    m = DoubleMutation(0.5, 0.5, 0.0, 1.0)
    assert [m.possibly_change_val(a, 0.5) for _ in range(50)] == [m.possibly_change_val(b, 0.5) for _ in range(50)]
