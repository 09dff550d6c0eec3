"""Mutator capability and the mutation boundary.

A mutator is anything with a stable ``name`` and a
``mutate(data, rng) -> bytes`` method. No base class is required; the
built-in mutators decorate their ``mutate`` with :func:`mutation_boundary`,
and the engines route every call through :func:`apply_mutator` so that
third-party mutators get the same guarantees.
"""

from __future__ import annotations

import functools
import random
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.utils.logger import get_logger

logger = get_logger(__name__)

BytesLike = bytes | bytearray | memoryview


@runtime_checkable
class Mutator(Protocol):
    """Protocol defining the mutator capability."""

    @property
    def name(self) -> str:
        """Stable name, used as the statistics key in reports."""
        ...

    def mutate(self, data: bytes, rng: random.Random) -> bytes:
        """Return a mutated copy of ``data`` drawn from ``rng``."""
        ...


MutateImpl = Callable[[object, bytearray, random.Random], bytes | bytearray]


def mutation_boundary(method: MutateImpl) -> Callable[..., bytes]:
    """Wrap a mutator implementation with the common contract.

    The wrapped method receives a private ``bytearray`` copy of a non-empty
    input. Empty or None input yields ``b""``; a missing randomness source is
    rejected; any exception raised by the implementation degrades to an
    unmodified copy of the input.
    """

    @functools.wraps(method)
    def wrapper(self: object, data: BytesLike | None, rng: random.Random) -> bytes:
        if rng is None:
            raise InvalidArgumentError("rng", "A randomness source is required")
        if not data:
            return b""

        buffer = bytearray(data)
        try:
            return bytes(method(self, buffer, rng))
        except Exception as e:
            logger.debug(
                "mutation_failed",
                mutator=getattr(self, "name", type(self).__name__),
                error=str(e),
            )
            return bytes(data)

    return wrapper


def mutator_name(mutator: object) -> str:
    """Return the reporting name of a mutator, falling back to its class name."""
    name = getattr(mutator, "name", None)
    return str(name) if name else type(mutator).__name__


def apply_mutator(mutator: Mutator, data: BytesLike, rng: random.Random) -> bytes:
    """Run one mutator, converting its failures into an unmodified copy.

    Args:
        mutator: Mutator to apply
        data: Input buffer (left untouched)
        rng: Injected randomness source

    Returns:
        The mutated buffer, or ``bytes(data)`` if the mutator misbehaved

    Raises:
        InvalidArgumentError: If the mutator rejects its arguments

    """
    try:
        result = mutator.mutate(bytes(data), rng)
    except InvalidArgumentError:
        raise
    except Exception as e:
        logger.warning(
            "mutator_raised",
            mutator=mutator_name(mutator),
            error_type=type(e).__name__,
            error=str(e),
        )
        return bytes(data)

    if result is None:
        logger.warning("mutator_returned_none", mutator=mutator_name(mutator))
        return bytes(data)
    return bytes(result)
