"""Custom exceptions for Lintel."""

from __future__ import annotations

from typing import Any


class LintelError(Exception):
    """Base exception for all Lintel errors."""

    code = "LINTEL_ERROR"


class ValidationError(LintelError):
    """Raised when validation fails."""

    code = "VALIDATION_ERROR"


class MissingReferenceError(ValidationError):
    """Raised when a project file references an ID that does not exist."""

    pass


class NotFoundError(LintelError):
    """Raised when a referenced work item, dependency, or milestone does not exist."""

    code = "NOT_FOUND"


class ConflictError(LintelError):
    """Raised when a mutation conflicts with existing state."""

    code = "CONFLICT"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class DuplicateDependencyError(ConflictError):
    """Raised when a dependency between the same ordered pair already exists."""

    code = "DUPLICATE_DEPENDENCY"


class CircularDependencyError(ConflictError):
    """Raised when adding a dependency would create a cycle."""

    code = "CIRCULAR_DEPENDENCY"

    def __init__(self, message: str, cycle_path: list[str]):
        super().__init__(message, {"cycle_path": list(cycle_path)})
        self.cycle_path = list(cycle_path)


class MilestoneConflictError(ConflictError):
    """Raised when a work item would both feed and be gated by one milestone."""

    code = "MILESTONE_LINK_CONFLICT"


class ParseError(LintelError):
    """Raised when YAML parsing fails."""

    code = "PARSE_ERROR"
