"""Data models for Lintel."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class DependencyType(str, Enum):
    """Which endpoint of the predecessor constrains which endpoint of the successor."""

    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


class WorkItemStatus(str, Enum):
    """Lifecycle status of a work item."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class Dependency:
    """A directed precedence edge between two work items.

    The lead/lag is a signed day offset applied to the constraint: positive
    values delay the successor (lag), negative values allow overlap (lead).
    """

    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lead_lag_days: int = 0

    @property
    def key(self) -> tuple[str, str]:
        """The ordered (predecessor, successor) pair identifying this edge."""
        return (self.predecessor_id, self.successor_id)

    def __str__(self) -> str:
        text = f"{self.predecessor_id} -> {self.successor_id} ({self.dependency_type.value}"
        if self.lead_lag_days:
            text += f", {self.lead_lag_days:+d}d"
        return text + ")"


@dataclass
class WorkItem:
    """A unit of construction work to be scheduled."""

    id: str
    title: str | None = None
    duration_days: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_after: date | None = None
    start_before: date | None = None
    status: WorkItemStatus = WorkItemStatus.NOT_STARTED

    @property
    def display_name(self) -> str:
        """Title if set, otherwise the ID."""
        return self.title or self.id

    @property
    def has_dates(self) -> bool:
        """True if either a start or an end date is stored."""
        return self.start_date is not None or self.end_date is not None


def _default_id_list() -> list[str]:
    return []


@dataclass
class Milestone:
    """A project checkpoint fed by contributing work items and gating dependents."""

    id: int
    title: str
    target_date: date
    is_completed: bool = False
    completed_at: date | None = None
    work_item_ids: list[str] = field(default_factory=_default_id_list)
    dependent_work_item_ids: list[str] = field(default_factory=_default_id_list)

    def projected_date(self, work_items: dict[str, WorkItem]) -> date | None:
        """Latest end date among contributing work items that have one."""
        projected: date | None = None
        for work_item_id in self.work_item_ids:
            work_item = work_items.get(work_item_id)
            if work_item is None or work_item.end_date is None:
                continue
            if projected is None or work_item.end_date > projected:
                projected = work_item.end_date
        return projected

    def is_late(self, work_items: dict[str, WorkItem]) -> bool:
        """True if not completed and contributors are projected past the target date."""
        if self.is_completed:
            return False
        projected = self.projected_date(work_items)
        return projected is not None and projected > self.target_date

    def effective_date(self, work_items: dict[str, WorkItem]) -> date:
        """Date dependents may start from.

        Completion date when completed, the projected date when running late,
        otherwise the target date.
        """
        if self.is_completed and self.completed_at is not None:
            return self.completed_at
        if self.is_late(work_items):
            projected = self.projected_date(work_items)
            assert projected is not None
            return projected
        return self.target_date


@dataclass
class ProjectMetadata:
    """Metadata for the project file."""

    name: str | None = None
    version: str = "1.0"


@dataclass(frozen=True)
class ProjectSnapshot:
    """Read-only view of a project's work items, dependencies, and milestones."""

    work_items: tuple[WorkItem, ...]
    dependencies: tuple[Dependency, ...]
    milestones: tuple[Milestone, ...] = ()

    @property
    def work_item_map(self) -> dict[str, WorkItem]:
        """Work items keyed by ID, in input order."""
        return {work_item.id: work_item for work_item in self.work_items}

    def get_work_item(self, work_item_id: str) -> WorkItem | None:
        """Get a work item by its ID."""
        for work_item in self.work_items:
            if work_item.id == work_item_id:
                return work_item
        return None

    def get_milestone(self, milestone_id: int) -> Milestone | None:
        """Get a milestone by its ID."""
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        return None
