"""Tests for the uniform baseline MutationEngine."""

import random

import pytest

from io_fuzzer.core.config import MutationConfig
from io_fuzzer.core.engine import MutationEngine
from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.core.mutation import DEFAULT_MUTATOR_FACTORIES, SerializationMutator


class TestMutationEngine:
    """Tests for MutationEngine."""

    def test_requires_rng(self):
        with pytest.raises(InvalidArgumentError):
            MutationEngine(None)

    def test_add_none_rejected(self, rng):
        with pytest.raises(InvalidArgumentError):
            MutationEngine(rng).add_mutator(None)

    def test_get_mutators_is_read_only(self, rng, identity_mutator):
        engine = MutationEngine(rng)
        engine.add_mutator(identity_mutator)
        mutators = engine.get_mutators()
        assert mutators == (identity_mutator,)
        assert isinstance(mutators, tuple)

    def test_create_with_default_mutators(self, rng):
        engine = MutationEngine.create_with_default_mutators(rng)
        assert [type(m) for m in engine.get_mutators()] == list(
            DEFAULT_MUTATOR_FACTORIES
        )

    def test_create_passes_mutation_config(self, rng):
        engine = MutationEngine.create_with_default_mutators(
            rng, MutationConfig(max_insert_growth=64)
        )
        serialization = engine.get_mutators()[-1]
        assert isinstance(serialization, SerializationMutator)
        assert serialization.max_growth == 64

    def test_none_data(self, rng, reverse_mutator):
        engine = MutationEngine(rng)
        engine.add_mutator(reverse_mutator)
        assert engine.mutate(None) == b""

    def test_no_mutators_returns_input(self, rng):
        assert MutationEngine(rng).mutate(b"abc", 3) == b"abc"

    @pytest.mark.parametrize("count", [0, -2])
    def test_non_positive_count_returns_input(self, rng, reverse_mutator, count):
        engine = MutationEngine(rng)
        engine.add_mutator(reverse_mutator)
        assert engine.mutate(b"abc", count) == b"abc"

    def test_sequential_application(self, rng, reverse_mutator):
        """Each step operates on the previous output."""
        engine = MutationEngine(rng)
        engine.add_mutator(reverse_mutator)
        assert engine.mutate(b"abc") == b"cba"
        assert engine.mutate(b"abc", 2) == b"abc"

    def test_uniform_selection(self, make_mutator):
        calls = {"A": 0, "B": 0}

        def counting(name):
            def func(data):
                calls[name] += 1
                return data

            return make_mutator(name, func)

        engine = MutationEngine(random.Random(3))
        engine.add_mutator(counting("A"))
        engine.add_mutator(counting("B"))
        engine.mutate(b"x", 2000)
        assert 800 < calls["A"] < 1200
        assert calls["A"] + calls["B"] == 2000

    def test_reproducible(self):
        def run():
            engine = MutationEngine.create_with_default_mutators(random.Random(11))
            return [engine.mutate(bytes(range(24)), 3) for _ in range(30)]

        assert run() == run()
