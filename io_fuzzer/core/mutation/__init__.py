"""Mutation primitives -- bit, byte, structural, value and format-aware."""

from io_fuzzer.core.config import MutationConfig

from .base import Mutator, apply_mutator, mutation_boundary, mutator_name
from .bit_mutators import BitFlipMutator, ByteFlipMutator, EndiannessMutator
from .serialization_mutator import SerializationMutator
from .structure_mutator import StructureMutator
from .value_mutator import ValueMutator

#: Built-in mutators in registration order
DEFAULT_MUTATOR_FACTORIES = (
    BitFlipMutator,
    ByteFlipMutator,
    EndiannessMutator,
    StructureMutator,
    ValueMutator,
    SerializationMutator,
)


def default_mutators(mutation_config: MutationConfig | None = None) -> list[Mutator]:
    """Instantiate one of each built-in mutator.

    ``mutation_config.max_insert_growth`` caps value insertions in the
    format-aware mutator.
    """
    config = mutation_config or MutationConfig()
    return [
        SerializationMutator(max_growth=config.max_insert_growth)
        if factory is SerializationMutator
        else factory()
        for factory in DEFAULT_MUTATOR_FACTORIES
    ]


__all__ = [
    "DEFAULT_MUTATOR_FACTORIES",
    "BitFlipMutator",
    "ByteFlipMutator",
    "EndiannessMutator",
    "Mutator",
    "SerializationMutator",
    "StructureMutator",
    "ValueMutator",
    "apply_mutator",
    "default_mutators",
    "mutation_boundary",
    "mutator_name",
]
