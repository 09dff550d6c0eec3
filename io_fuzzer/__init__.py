"""IO-Fuzzer - adaptive coverage-guided mutation engine for byte fuzzing.

Mutators transform byte buffers; the guided engine learns from execution
feedback which mutators to favour; the coverage tracker records which
signals inside the target were exercised.
"""

__version__ = "1.0.0"

from io_fuzzer.core import (
    CallableExecutor,
    CoverageTracker,
    ExecutionOutcome,
    ExecutionResult,
    FuzzerError,
    FuzzingLoop,
    GuidedMutationEngine,
    InMemoryCorpus,
    InvalidArgumentError,
    MutationEngine,
    NoMutatorsRegisteredError,
    SelectionConfig,
)
from io_fuzzer.core.mutation import (
    BitFlipMutator,
    ByteFlipMutator,
    EndiannessMutator,
    Mutator,
    SerializationMutator,
    StructureMutator,
    ValueMutator,
    default_mutators,
)

__all__ = [
    "BitFlipMutator",
    "ByteFlipMutator",
    "CallableExecutor",
    "CoverageTracker",
    "EndiannessMutator",
    "ExecutionOutcome",
    "ExecutionResult",
    "FuzzerError",
    "FuzzingLoop",
    "GuidedMutationEngine",
    "InMemoryCorpus",
    "InvalidArgumentError",
    "MutationEngine",
    "Mutator",
    "NoMutatorsRegisteredError",
    "SelectionConfig",
    "SerializationMutator",
    "StructureMutator",
    "ValueMutator",
    "__version__",
    "default_mutators",
]
