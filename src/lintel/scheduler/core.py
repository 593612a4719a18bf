"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any


def _default_str_list() -> list[str]:
    return []


@dataclass
class ScheduledItem:
    """Dates computed for one work item by a scheduling call."""

    work_item_id: str
    previous_start_date: date | None  # As supplied
    previous_end_date: date | None  # As supplied
    scheduled_start_date: date  # Earliest start from forward pass
    scheduled_end_date: date  # Earliest finish from forward pass (inclusive)
    latest_start_date: date | None = None  # From backward pass; None in preview mode
    latest_finish_date: date | None = None  # From backward pass; None in preview mode
    total_float: int = 0  # Days of slack, clamped at 0
    is_critical: bool = False

    @property
    def dates_changed(self) -> bool:
        """True if the computed dates differ from the supplied ones."""
        return (
            self.scheduled_start_date != self.previous_start_date
            or self.scheduled_end_date != self.previous_end_date
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire form."""
        return {
            "workItemId": self.work_item_id,
            "previousStartDate": _iso(self.previous_start_date),
            "previousEndDate": _iso(self.previous_end_date),
            "scheduledStartDate": self.scheduled_start_date.isoformat(),
            "scheduledEndDate": self.scheduled_end_date.isoformat(),
            "latestStartDate": _iso(self.latest_start_date),
            "latestFinishDate": _iso(self.latest_finish_date),
            "totalFloat": self.total_float,
            "isCritical": self.is_critical,
        }


@dataclass
class ScheduleResult:
    """Complete result of a scheduling call.

    A non-empty ``cycle_nodes`` signals degraded output: the critical path is
    empty and only items outside (and not downstream of) the cycle are dated.
    """

    scheduled_items: list[ScheduledItem]
    critical_path: list[str] = field(default_factory=_default_str_list)
    warnings: list[str] = field(default_factory=_default_str_list)
    cycle_nodes: list[str] = field(default_factory=_default_str_list)

    @property
    def has_cycle(self) -> bool:
        return bool(self.cycle_nodes)

    def get_item(self, work_item_id: str) -> ScheduledItem | None:
        """Get the scheduled item for a work item ID."""
        for item in self.scheduled_items:
            if item.work_item_id == work_item_id:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire form (cycleNodes only when present)."""
        result: dict[str, Any] = {
            "scheduledItems": [item.to_dict() for item in self.scheduled_items],
            "criticalPath": list(self.critical_path),
            "warnings": list(self.warnings),
        }
        if self.cycle_nodes:
            result["cycleNodes"] = list(self.cycle_nodes)
        return result


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def effective_span(duration_days: int | None) -> int:
    """Number of calendar days an item occupies (at least one)."""
    if duration_days is None or duration_days < 1:
        return 1
    return duration_days


def compute_end_date(start: date, duration_days: int | None) -> date:
    """Inclusive end date for an item starting on ``start``.

    Zero or unset durations occupy a single day, so the end equals the start.
    """
    return start + timedelta(days=effective_span(duration_days) - 1)


def compute_start_date(end: date, duration_days: int | None) -> date:
    """Inverse of compute_end_date."""
    return end - timedelta(days=effective_span(duration_days) - 1)
