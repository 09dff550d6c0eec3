"""Execution contract between the fuzzing loop and the target.

The mutation core never runs target code itself. It consumes one
:class:`ExecutionResult` per execution: a three-valued outcome, the coverage
signals touched, and the elapsed time. :class:`CallableExecutor` produces
those results for an in-process Python callable.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.utils.logger import get_logger

logger = get_logger(__name__)

Target = Callable[[bytes], Iterable[str] | None]


class ExecutionOutcome(str, Enum):
    """Outcome of one target execution."""

    SUCCESS = "success"
    CRASHED = "crashed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing one candidate input."""

    outcome: ExecutionOutcome
    latency_ms: float
    coverage: frozenset[str] = field(default_factory=frozenset)
    error: str | None = None

    @property
    def crashed(self) -> bool:
        """Timeouts count as crashes."""
        return self.outcome is not ExecutionOutcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "latency_ms": self.latency_ms,
            "coverage": sorted(self.coverage),
            "error": self.error,
        }


@runtime_checkable
class Executor(Protocol):
    """Anything that can run a candidate input against the target."""

    def execute(self, data: bytes) -> ExecutionResult: ...


class CallableExecutor:
    """Run a Python callable on each input in a worker thread.

    The callable may return an iterable of coverage signal names. Any
    exception it raises is a crash. If it does not return within
    ``timeout_ms`` the execution is reported as timed out; the worker is a
    daemon thread and is abandoned, since Python threads cannot be killed.

    Args:
        target: Function under test
        timeout_ms: Deadline per execution in milliseconds

    """

    def __init__(self, target: Target, timeout_ms: float = 5000) -> None:
        if target is None:
            raise InvalidArgumentError("target", "A target callable is required")
        if timeout_ms <= 0:
            raise InvalidArgumentError(
                "timeout_ms", "Timeout must be positive", {"timeout_ms": timeout_ms}
            )
        self.target = target
        self.timeout_ms = timeout_ms

    def execute(self, data: bytes) -> ExecutionResult:
        outcome: dict[str, Any] = {}

        def run() -> None:
            try:
                outcome["coverage"] = self.target(data)
            except Exception as e:
                outcome["error"] = f"{type(e).__name__}: {e}"

        worker = threading.Thread(target=run, name="io-fuzzer-target", daemon=True)
        start = time.perf_counter()
        worker.start()
        worker.join(self.timeout_ms / 1000.0)
        latency_ms = (time.perf_counter() - start) * 1000.0

        if worker.is_alive():
            logger.debug("execution_timeout", timeout_ms=self.timeout_ms)
            return ExecutionResult(
                outcome=ExecutionOutcome.TIMED_OUT,
                latency_ms=float(self.timeout_ms),
                error=f"Execution exceeded {self.timeout_ms} ms",
            )

        if "error" in outcome:
            logger.debug("execution_crashed", error=outcome["error"])
            return ExecutionResult(
                outcome=ExecutionOutcome.CRASHED,
                latency_ms=latency_ms,
                error=outcome["error"],
            )

        signals = outcome.get("coverage")
        return ExecutionResult(
            outcome=ExecutionOutcome.SUCCESS,
            latency_ms=latency_ms,
            coverage=frozenset(signals) if signals is not None else frozenset(),
        )
