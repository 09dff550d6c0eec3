"""Core mutation, selection, coverage and orchestration components."""

from .config import (
    LoggingConfig,
    LoopConfig,
    MutationConfig,
    SelectionConfig,
    Settings,
    get_settings,
)
from .coverage_tracker import CoverageTracker, ReadWriteLock
from .engine import GuidedMutationEngine, MutationEngine
from .exceptions import (
    FuzzerError,
    InvalidArgumentError,
    MutationError,
    NoMutatorsRegisteredError,
)
from .execution import CallableExecutor, ExecutionOutcome, ExecutionResult, Executor
from .fuzzing_loop import FuzzingLoop, FuzzingStats, InMemoryCorpus
from .statistics import MutationStatisticsStore, MutatorStatistics, utility_score

__all__ = [
    "CallableExecutor",
    "CoverageTracker",
    "ExecutionOutcome",
    "ExecutionResult",
    "Executor",
    "FuzzerError",
    "FuzzingLoop",
    "FuzzingStats",
    "GuidedMutationEngine",
    "InMemoryCorpus",
    "InvalidArgumentError",
    "LoggingConfig",
    "LoopConfig",
    "MutationConfig",
    "MutationEngine",
    "MutationError",
    "MutationStatisticsStore",
    "MutatorStatistics",
    "NoMutatorsRegisteredError",
    "ReadWriteLock",
    "SelectionConfig",
    "Settings",
    "get_settings",
    "utility_score",
]
