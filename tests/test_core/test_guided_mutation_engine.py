"""Tests for GuidedMutationEngine selection and feedback."""

import random
from collections import Counter

import pytest

from io_fuzzer.core.config import MutationConfig, SelectionConfig
from io_fuzzer.core.engine import GuidedMutationEngine
from io_fuzzer.core.exceptions import InvalidArgumentError, NoMutatorsRegisteredError
from io_fuzzer.core.mutation import DEFAULT_MUTATOR_FACTORIES, SerializationMutator


def warm_up(engine, mutator, runs=10, new_coverage=False, latency=1.0):
    for _ in range(runs):
        engine.record_feedback(mutator, new_coverage, False, latency)


class TestConstruction:
    """Tests for building an engine."""

    def test_requires_rng(self):
        with pytest.raises(InvalidArgumentError):
            GuidedMutationEngine(None)

    def test_default_config(self, rng):
        engine = GuidedMutationEngine(rng)
        assert engine.config == SelectionConfig()
        assert engine.get_mutators() == ()

    def test_create_registers_builtins(self, rng):
        engine = GuidedMutationEngine.create(rng)
        assert [type(m) for m in engine.get_mutators()] == list(
            DEFAULT_MUTATOR_FACTORIES
        )

    def test_create_passes_mutation_config(self, rng):
        engine = GuidedMutationEngine.create(
            rng, mutation_config=MutationConfig(max_insert_growth=64)
        )
        (serialization,) = [
            m for m in engine.get_mutators() if isinstance(m, SerializationMutator)
        ]
        assert serialization.max_growth == 64

    def test_create_with_explicit_mutators(self, rng, identity_mutator):
        engine = GuidedMutationEngine.create(rng, mutators=[identity_mutator])
        assert engine.get_mutators() == (identity_mutator,)

    def test_register_none_rejected(self, rng):
        with pytest.raises(InvalidArgumentError):
            GuidedMutationEngine(rng).register_mutator(None)

    def test_duplicate_names_allowed(self, rng, make_mutator):
        engine = GuidedMutationEngine(rng, [make_mutator("A"), make_mutator("A")])
        assert list(engine.get_statistics()) == ["A", "A#2"]


class TestSelection:
    """Tests for select_mutator."""

    def test_no_mutators(self, rng):
        with pytest.raises(NoMutatorsRegisteredError):
            GuidedMutationEngine(rng).select_mutator()

    def test_bootstrap_tries_every_mutator(self, make_mutator):
        mutators = [make_mutator(name) for name in ("A", "B", "C")]
        engine = GuidedMutationEngine(random.Random(42), mutators)
        selected = {id(engine.select_mutator()) for _ in range(1000)}
        assert selected == {id(m) for m in mutators}

    def test_scoring_starts_once_any_mutator_has_samples(self, rng, make_mutator):
        """Bootstrap ends when any mutator reaches the threshold."""
        a, b = make_mutator("A"), make_mutator("B")
        engine = GuidedMutationEngine(rng, [a, b])
        warm_up(engine, a, runs=10, new_coverage=True)
        warm_up(engine, b, runs=9)
        counts = Counter(engine.select_mutator().name for _ in range(2000))
        assert counts["A"] > counts["B"] > 0

    def test_adaptive_favours_coverage(self, identity_mutator, reverse_mutator):
        engine = GuidedMutationEngine(
            random.Random(7), [identity_mutator, reverse_mutator]
        )
        warm_up(engine, identity_mutator, new_coverage=False)
        warm_up(engine, reverse_mutator, new_coverage=True)

        counts = Counter(engine.select_mutator().name for _ in range(10_000))
        # Expected weights are 0.1 (floor) against 0.6
        assert counts["Reverse"] > 3 * counts["Identity"]
        assert counts["Identity"] > 0

    def test_scores_reported(self, rng, identity_mutator, reverse_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator, reverse_mutator])
        assert engine.score_mutators() == {"Identity": 1.0, "Reverse": 1.0}
        warm_up(engine, identity_mutator)
        warm_up(engine, reverse_mutator, new_coverage=True)
        scores = engine.score_mutators()
        assert scores["Identity"] == pytest.approx(0.1)
        assert scores["Reverse"] == pytest.approx(0.6)

    def test_roulette_overflow_falls_back_to_last(
        self, make_mutator, first_choice_rng
    ):
        """A draw at the very top of the range picks the last mutator."""
        first_choice_rng.fraction = 1.0
        a, b, c = make_mutator("A"), make_mutator("B"), make_mutator("C")
        engine = GuidedMutationEngine(first_choice_rng, [a, b, c])
        for mutator in (a, b, c):
            warm_up(engine, mutator)
        assert engine.select_mutator() is c

    def test_roulette_low_draw_picks_first(self, make_mutator, first_choice_rng):
        a, b = make_mutator("A"), make_mutator("B")
        engine = GuidedMutationEngine(first_choice_rng, [a, b])
        warm_up(engine, a)
        warm_up(engine, b)
        assert engine.select_mutator() is a

    def test_seeded_selection_reproducible(self, make_mutator):
        def sequence():
            mutators = [make_mutator(n) for n in ("A", "B", "C")]
            engine = GuidedMutationEngine(random.Random(99), mutators)
            for mutator in mutators:
                warm_up(engine, mutator, new_coverage=mutator.name == "B")
            return [engine.select_mutator().name for _ in range(200)]

        assert sequence() == sequence()


class TestMutate:
    """Tests for GuidedMutationEngine.mutate."""

    def test_none_seed(self, rng, identity_mutator):
        assert GuidedMutationEngine(rng, [identity_mutator]).mutate(None) == b""

    def test_no_mutators_returns_seed(self, rng):
        assert GuidedMutationEngine(rng).mutate(b"abc") == b"abc"

    def test_applies_selected_mutator(self, rng, reverse_mutator):
        engine = GuidedMutationEngine(rng, [reverse_mutator])
        assert engine.mutate(b"abc") == b"cba"
        assert engine.last_mutator is reverse_mutator

    def test_stacked_mutations(self, rng, reverse_mutator):
        engine = GuidedMutationEngine(rng, [reverse_mutator])
        assert engine.mutate(b"abc", 2) == b"abc"
        assert engine.mutate(b"abc", 3) == b"cba"

    def test_zero_count_returns_seed(self, rng, reverse_mutator):
        """No mutator ran, so none is left to credit."""
        engine = GuidedMutationEngine(rng, [reverse_mutator])
        engine.mutate(b"abc")
        assert engine.last_mutator is reverse_mutator
        assert engine.mutate(b"abc", 0) == b"abc"
        assert engine.last_mutator is None

    def test_none_seed_clears_last_mutator(self, rng, reverse_mutator):
        engine = GuidedMutationEngine(rng, [reverse_mutator])
        engine.mutate(b"abc")
        engine.mutate(None)
        assert engine.last_mutator is None

    def test_negative_count_rejected(self, rng, reverse_mutator):
        with pytest.raises(InvalidArgumentError):
            GuidedMutationEngine(rng, [reverse_mutator]).mutate(b"abc", -1)

    def test_failing_mutator_does_not_escape(self, rng, make_mutator):
        def explode(data):
            raise ZeroDivisionError

        engine = GuidedMutationEngine(rng, [make_mutator("Boom", explode)])
        assert engine.mutate(b"abc") == b"abc"

    def test_builtins_reproducible(self):
        def run():
            engine = GuidedMutationEngine.create(random.Random(5))
            data = bytes(range(40))
            out = []
            for _ in range(50):
                data = engine.mutate(data) or b"\x00"
                out.append(data)
            return out

        assert run() == run()


class TestFeedback:
    """Tests for record_feedback, record_success and reset_statistics."""

    def test_running_mean_via_engine(self, rng, identity_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        for latency in (10, 20, 30):
            engine.record_feedback(identity_mutator, False, False, latency)
        stats = engine.get_statistics()["Identity"]
        assert stats.average_latency_ms == pytest.approx(20.0)
        assert stats.total_executions == 3

    def test_success_counted_separately(self, rng, identity_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        engine.record_success(identity_mutator, 3.0)
        stats = engine.get_statistics()["Identity"]
        assert stats.successful_mutation_count == 1
        assert stats.total_coverage_increase == 3.0
        assert stats.total_executions == 0

    def test_unknown_mutator_ignored(self, rng, identity_mutator, make_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        engine.record_feedback(make_mutator("Stranger"), True, True, 1.0)
        engine.record_success(make_mutator("Stranger"), 1.0)
        assert engine.get_statistics()["Identity"].total_executions == 0

    def test_unknown_mutator_logged(
        self, rng, identity_mutator, make_mutator, captured_logs
    ):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        engine.record_feedback(make_mutator("Stranger"), True, False, 1.0)
        assert any(
            entry["event"] == "feedback_for_unknown_mutator"
            and entry["mutator"] == "Stranger"
            for entry in captured_logs
        )

    def test_none_mutator_rejected(self, rng, identity_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        with pytest.raises(InvalidArgumentError):
            engine.record_feedback(None, False, False, 1.0)
        with pytest.raises(InvalidArgumentError):
            engine.record_success(None, 1.0)

    def test_negative_latency_rejected(self, rng, identity_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        with pytest.raises(InvalidArgumentError):
            engine.record_feedback(identity_mutator, False, False, -5)

    def test_statistics_are_snapshots(self, rng, identity_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator])
        snapshot = engine.get_statistics()
        engine.record_feedback(identity_mutator, True, False, 1.0)
        assert snapshot["Identity"].total_executions == 0

    def test_reset_statistics(self, rng, identity_mutator, reverse_mutator):
        engine = GuidedMutationEngine(rng, [identity_mutator, reverse_mutator])
        engine.mutate(b"abc")
        warm_up(engine, identity_mutator, new_coverage=True)
        engine.record_success(reverse_mutator, 1.0)

        engine.reset_statistics()

        assert engine.get_mutators() == (identity_mutator, reverse_mutator)
        assert engine.last_mutator is None
        assert all(s.total_executions == 0 for s in engine.get_statistics().values())
        assert engine.get_statistics()["Reverse"].successful_mutation_count == 0
