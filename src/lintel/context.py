"""Global application context and state management."""

from __future__ import annotations

from datetime import date
from pathlib import Path


class _Context:
    """Application context for managing global state."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.today: date | None = None


# Singleton instance
_context = _Context()


def get_config_path() -> Path | None:
    """Get the global config path."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    """Set the global config path."""
    _context.config_path = path


def get_today() -> date:
    """Get the reference date for scheduling (overridable for reproducible runs)."""
    if _context.today is not None:
        return _context.today
    return date.today()  # noqa: DTZ011


def set_today(today: date | None) -> None:
    """Override the reference date; None restores the system date."""
    _context.today = today
