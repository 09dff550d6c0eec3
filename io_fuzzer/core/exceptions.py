"""Custom exceptions for the mutation core.

This module defines the exception hierarchy for the fuzzer. Only
invalid-argument errors ever reach callers; degenerate inputs and internal
arithmetic edge cases are absorbed inside the mutators.
"""

from typing import Any


class FuzzerError(Exception):
    """Base exception for fuzzing operations.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for categorization
        context: Additional context information

    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class InvalidArgumentError(FuzzerError, ValueError):
    """Raised when a required argument is missing or out of range."""

    def __init__(
        self,
        argument: str,
        message: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or f"Invalid value for argument '{argument}'",
            error_code="INVALID_ARGUMENT",
            context={"argument": argument, **(context or {})},
        )
        self.argument = argument


class NoMutatorsRegisteredError(FuzzerError):
    """Raised when a mutator is requested from an engine that has none."""

    pass


class MutationError(FuzzerError):
    """Raised by mutator internals; never escapes the mutation boundary."""

    pass
