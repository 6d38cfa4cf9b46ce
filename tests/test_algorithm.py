"""
Tests for the population loop: generation 0, rank-based reproduction, fitness
bookkeeping, the mutation fallback, parallel evaluation and lineage export.
"""

import gc
import threading
import weakref

import pytest

from evolution.algorithm import EvolutionAlgorithm
from evolution.evaluation import evaluate_population
from evolution.lineage import LineageRecord, to_delimited
from evolution.selection import PopulationMember, children_schedule, coherence_for, rank
from exceptions import EvolutionError, RepairExhaustedError


class FailingMutator:
    def __init__(self):
        self.calls = 0

    def mutate(self, rng, morphology, coherence):
        self.calls += 1
        raise RepairExhaustedError([])


def _connections(m):
    return sum(len(n.connections) for n in m.networks())


# ============================================================================
# Schedule and coherence
# ============================================================================

class TestSchedule:
    @pytest.mark.parametrize("size", [1, 4, 10, 40, 100])
    def test_fills_the_population(self, size):
        assert sum(n for _, n in children_schedule(size, size)) == size

    def test_counts_shrink_with_rank(self):
        counts = [n for _, n in children_schedule(40, 40)]
        assert counts[0] == 4
        assert counts == sorted(counts, reverse=True)
        assert min(counts) >= 1

    def test_last_parent_is_truncated(self):
        plan = list(children_schedule(5, 5, fraction=0.6, decay=1.0))
        assert plan == [(0, 3), (1, 2)]

    def test_coherence(self):
        assert coherence_for(10.0, 10.0) == pytest.approx(0.97)
        assert coherence_for(5.0, 10.0) == pytest.approx(0.485)
        assert coherence_for(3.0, 0.0) == 0.0
        assert coherence_for(-1.0, -0.5) == 0.0


class TestPopulationMember:
    def test_first_fitness_is_its_own_average(self, fins):
        m = PopulationMember(fins)
        m.set_fitness(2.0)
        assert m.fitness == m.avg_fitness == 2.0

    def test_average_blends_parents(self, fins):
        a, b = PopulationMember(fins), PopulationMember(fins)
        a.set_fitness(4.0)
        b.set_fitness(8.0)
        child = PopulationMember(fins, (a, b), 0.5, 1)
        child.set_fitness(2.0)
        assert child.avg_fitness == pytest.approx(0.75 * 6.0 + 0.25 * 2.0)

    def test_parents_are_not_kept_alive(self, fins):
        parent = PopulationMember(fins)
        parent.set_fitness(3.0)
        parent_id = parent.id
        child = PopulationMember(fins, (parent,), 0.5, 1)
        ref = weakref.ref(parent)
        del parent
        gc.collect()
        assert ref() is None
        assert child.parent_ids == (parent_id,)
        # the parent's average is still blended in
        child.set_fitness(7.0)
        assert child.avg_fitness == pytest.approx(0.75 * 3.0 + 0.25 * 7.0)

    def test_identity_is_read_only(self, fins):
        m = PopulationMember(fins)
        with pytest.raises(AttributeError):
            m.morphology = fins
        assert PopulationMember(fins).id != m.id

    def test_rank(self, fins):
        members = [PopulationMember(fins) for _ in range(3)]
        for m, f in zip(members, (1.0, 3.0, 2.0)):
            m.set_fitness(f)
        assert rank(members) == [members[1], members[2], members[0]]


# ============================================================================
# EvolutionAlgorithm
# ============================================================================

class TestEvolutionAlgorithm:
    def test_generation_zero(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=6, seed=3)
        population = algorithm.generate_new_population()
        assert len(population) == 6
        assert algorithm.generation == 0
        for m in population:
            assert m.generation == 0
            assert m.parent_ids == ()
            assert m.coherence_to_original is None
            assert m.fitness is None
            assert m.morphology is not fins

    def test_needs_members(self, fins):
        with pytest.raises(EvolutionError):
            EvolutionAlgorithm(fins, population_size=0)

    def test_best_parent_gets_most_children(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=10, seed=5)
        first = algorithm.generate_new_population()
        scores = [10.0] + [1.0] * 9
        children = algorithm.generate_new_population(scores)

        assert len(children) == 10
        assert algorithm.generation == 1
        from_best = [c for c in children if c.parent_ids == (first[0].id,)]
        assert len(from_best) == 1
        assert from_best[0].coherence_to_original == pytest.approx(0.97)
        others = [c for c in children if c.parent_ids != (first[0].id,)]
        assert all(c.coherence_to_original == pytest.approx(0.097) for c in others)

    def test_coherence_follows_the_raw_best_score(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=4, seed=7)
        first = algorithm.generate_new_population()
        second = algorithm.generate_new_population([9.0, 5.0, 5.0, 5.0])
        # one child per parent, in rank order
        assert [c.parent_ids for c in second] == [(p.id,) for p in first]

        third = algorithm.generate_new_population([5.0, 5.0, 5.0, 12.0])
        assert [m.avg_fitness for m in second] == pytest.approx([8.0, 5.0, 5.0, 6.75])
        # ranked by avg_fitness: second[0] leads although second[3] scored best
        assert [c.parent_ids for c in third] == [(second[i].id,) for i in (0, 3, 1, 2)]
        coherence = {c.parent_ids[0]: c.coherence_to_original for c in third}
        assert coherence[second[3].id] == pytest.approx(0.97)
        for i in (0, 1, 2):
            assert coherence[second[i].id] == pytest.approx(0.97 * 5.0 / 12.0)

    def test_children_follow_rank(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=40, seed=5)
        first = algorithm.generate_new_population()
        children = algorithm.generate_new_population([float(i) for i in range(40)])
        per_parent = [sum(1 for c in children if c.parent_ids == (p.id,)) for p in reversed(first)]
        assert per_parent[0] == 4
        assert per_parent == sorted(per_parent, reverse=True)
        assert sum(per_parent) == 40

    def test_fitness_length_mismatch(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=3, seed=1)
        algorithm.generate_new_population()
        with pytest.raises(EvolutionError):
            algorithm.generate_new_population([1.0, 2.0])

    def test_unevaluated_population(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=3, seed=1)
        algorithm.generate_new_population()
        with pytest.raises(EvolutionError):
            algorithm.generate_new_population()

    def test_fitness_is_recorded(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=3, seed=1)
        population = algorithm.generate_new_population()
        algorithm.assign_fitness([1.0, 5.0, 2.0])
        assert algorithm.best() is population[1]
        assert [r.fitness for r in algorithm.history] == [1.0, 5.0, 2.0]
        assert algorithm.history[1].member_id == population[1].id

    def test_failed_mutations_fall_back_to_copies(self, fins):
        mutator = FailingMutator()
        algorithm = EvolutionAlgorithm(fins, population_size=4, seed=1, mutator=mutator, mutation_attempts=3)
        population = algorithm.generate_new_population()
        assert mutator.calls == 12
        assert algorithm.repair_failures == 12
        for m in population:
            assert m.morphology is not fins
            assert _connections(m.morphology) == _connections(fins)

    def test_same_seed_same_run(self, fins):
        def run():
            algorithm = EvolutionAlgorithm(fins, population_size=5, seed=42)
            algorithm.generate_new_population()
            algorithm.generate_new_population([float(i) for i in range(5)])
            return [(m.morphology.neuron_count(), m.morphology.connection_count(), m.coherence_to_original)
                    for m in algorithm.population]

        assert run() == run()

    def test_run(self, fins):
        algorithm = EvolutionAlgorithm(fins, population_size=4, seed=2)
        seen = []
        best = algorithm.run(
            lambda m: float(m.connection_count()),
            generations=3,
            max_workers=2,
            on_generation=lambda a: seen.append(a.generation),
        )
        assert seen == [0, 1, 2]
        assert len(algorithm.history) == 12
        assert best is not None
        assert best.fitness == max(r.fitness for r in algorithm.history if r.generation == 2)

    def test_cancelled_run(self, fins):
        cancel = threading.Event()
        cancel.set()
        algorithm = EvolutionAlgorithm(fins, population_size=3, seed=2)
        assert algorithm.run(lambda m: 1.0, generations=2, cancel_event=cancel) is None
        assert algorithm.history == []


# ============================================================================
# Evaluation and lineage
# ============================================================================

class TestEvaluation:
    def test_results_keep_member_order(self, fins):
        members = [PopulationMember(fins.deep_copy()) for _ in range(6)]
        order = {id(m.morphology): float(i) for i, m in enumerate(members)}
        assert evaluate_population(members, lambda m: order[id(m)], max_workers=3) == [float(i) for i in range(6)]

    def test_errors_propagate(self, fins):
        def boom(m):
            raise ValueError("broken creature")

        with pytest.raises(ValueError):
            evaluate_population([PopulationMember(fins)], boom, max_workers=1)


class TestLineage:
    def test_delimited_output(self, fins):
        parent = PopulationMember(fins)
        parent.set_fitness(2.0)
        child = PopulationMember(fins, (parent,), 0.5, 1)
        child.set_fitness(4.0)
        text = to_delimited([LineageRecord.of(parent), LineageRecord.of(child)])
        lines = text.splitlines()
        assert lines[0] == "generation;member_id;parent_ids;coherence;fitness;avg_fitness"
        assert lines[1] == f"0;{parent.id};;;2.0;2.0"
        assert lines[2] == f"1;{child.id};{parent.id};0.5;4.0;2.5"
