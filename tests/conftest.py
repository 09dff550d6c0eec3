"""
Pytest configuration and shared fixtures for IO-Fuzzer tests.
"""

import logging
import random

import pytest
import structlog


class FirstChoiceRandom(random.Random):
    """Randomness source pinned to the lowest value of every draw.

    ``randint`` returns its lower bound, ``randrange`` its start, ``choice``
    the first element and ``random`` the value given at construction.
    """

    def __init__(self, fraction: float = 0.0) -> None:
        super().__init__(0)
        self.fraction = fraction

    def randint(self, a, b):
        return a

    def randrange(self, start, stop=None, step=1):
        return 0 if stop is None else start

    def choice(self, seq):
        return seq[0]

    def random(self):
        return self.fraction


class NamedMutator:
    """Minimal third-party style mutator built from a plain function."""

    def __init__(self, name, func=None):
        self.name = name
        self.func = func or (lambda data: data)

    def mutate(self, data, rng):
        return self.func(bytes(data))


@pytest.fixture
def rng() -> random.Random:
    """Seeded randomness source for reproducible tests."""
    return random.Random(1234)


@pytest.fixture
def first_choice_rng() -> FirstChoiceRandom:
    """Randomness source that always takes the first option."""
    return FirstChoiceRandom()


@pytest.fixture
def make_mutator():
    """Factory for simple named mutators."""
    return NamedMutator


@pytest.fixture
def identity_mutator() -> NamedMutator:
    return NamedMutator("Identity")


@pytest.fixture
def reverse_mutator() -> NamedMutator:
    return NamedMutator("Reverse", lambda data: data[::-1])


@pytest.fixture
def reset_structlog():
    """Reset structlog configuration after each test."""
    yield
    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


@pytest.fixture
def captured_logs():
    """Capture structlog events emitted during a test."""
    with structlog.testing.capture_logs() as logs:
        yield logs
