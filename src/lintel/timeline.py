"""Timeline assembly: the read path that merges schedule, milestones, and date range."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from .logger import get_logger
from .scheduler.config import MilestoneConfig, ScheduleMode, SchedulingConfig, TimelineConfig
from .scheduler.service import SchedulingService

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Dependency, WorkItem
    from .scheduler.core import ScheduleResult
    from .scheduler.protocols import ProjectRepository

logger = get_logger()


@dataclass
class DateRange:
    """Span of stored dates across the project."""

    earliest: date
    latest: date


@dataclass
class TimelineMilestone:
    """A milestone with its derived dates."""

    id: int
    title: str
    target_date: date
    is_completed: bool
    completed_at: date | None
    work_item_ids: list[str]
    dependent_work_item_ids: list[str]
    projected_date: date | None
    effective_date: date
    is_late: bool


@dataclass
class Timeline:
    """Everything a timeline view needs in one read."""

    work_items: list[WorkItem]
    dependencies: list[Dependency]
    milestones: list[TimelineMilestone]
    schedule: ScheduleResult
    critical_path: list[str]
    cycle_nodes: list[str]
    warnings: list[str]
    date_range: DateRange | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        return {
            "workItems": [
                {
                    "id": wi.id,
                    "title": wi.title,
                    "durationDays": wi.duration_days,
                    "startDate": _iso(wi.start_date),
                    "endDate": _iso(wi.end_date),
                    "status": wi.status.value,
                }
                for wi in self.work_items
            ],
            "dependencies": [
                {
                    "predecessorId": dep.predecessor_id,
                    "successorId": dep.successor_id,
                    "dependencyType": dep.dependency_type.value,
                    "leadLagDays": dep.lead_lag_days,
                }
                for dep in self.dependencies
            ],
            "milestones": [
                {
                    "id": m.id,
                    "title": m.title,
                    "targetDate": m.target_date.isoformat(),
                    "isCompleted": m.is_completed,
                    "completedAt": _iso(m.completed_at),
                    "workItemIds": list(m.work_item_ids),
                    "dependentWorkItemIds": list(m.dependent_work_item_ids),
                    "projectedDate": _iso(m.projected_date),
                    "effectiveDate": m.effective_date.isoformat(),
                    "isLate": m.is_late,
                }
                for m in self.milestones
            ],
            "criticalPath": list(self.critical_path),
            "cycleNodes": list(self.cycle_nodes),
            "warnings": list(self.warnings),
            "dateRange": (
                {
                    "earliest": self.date_range.earliest.isoformat(),
                    "latest": self.date_range.latest.isoformat(),
                }
                if self.date_range
                else None
            ),
        }


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def compute_date_range(work_items: Iterable[WorkItem]) -> DateRange | None:
    """Earliest stored start and latest stored end across work items.

    When only one side exists anywhere it is used for both ends; with no
    dates at all there is no range.
    """
    starts = [wi.start_date for wi in work_items if wi.start_date is not None]
    ends = [wi.end_date for wi in work_items if wi.end_date is not None]
    earliest = min(starts) if starts else None
    latest = max(ends) if ends else None

    if earliest is None and latest is None:
        return None
    if earliest is None:
        earliest = latest
    if latest is None:
        latest = earliest
    assert earliest is not None and latest is not None
    return DateRange(earliest=earliest, latest=latest)


class TimelineService:
    """Builds a Timeline from the current store contents."""

    def __init__(
        self,
        store: ProjectRepository,
        config: TimelineConfig | None = None,
        today: date | None = None,
        scheduling_config: SchedulingConfig | None = None,
        milestone_config: MilestoneConfig | None = None,
    ):
        self.store = store
        self.config = config or TimelineConfig()
        self.today = today or date.today()  # noqa: DTZ011
        self.scheduling_config = scheduling_config or SchedulingConfig()
        self.milestone_config = milestone_config or MilestoneConfig()

    def get_timeline(self) -> Timeline:
        """Schedule every work item in full mode and assemble the timeline.

        The critical path is empty whenever a cycle was found, regardless of
        what the engine computed for the acyclic part of the graph.
        """
        snapshot = self.store.snapshot()
        result = SchedulingService(
            snapshot,
            current_date=self.today,
            config=self.scheduling_config,
            milestone_config=self.milestone_config,
        ).schedule(mode=ScheduleMode.FULL)

        critical_path = [] if result.cycle_nodes else list(result.critical_path)

        work_item_map = snapshot.work_item_map
        milestones = [
            TimelineMilestone(
                id=m.id,
                title=m.title,
                target_date=m.target_date,
                is_completed=m.is_completed,
                completed_at=m.completed_at,
                work_item_ids=list(m.work_item_ids),
                dependent_work_item_ids=list(m.dependent_work_item_ids),
                projected_date=m.projected_date(work_item_map),
                effective_date=m.effective_date(work_item_map),
                is_late=m.is_late(work_item_map),
            )
            for m in snapshot.milestones
        ]

        if self.config.include_undated:
            work_items = list(snapshot.work_items)
        else:
            work_items = [wi for wi in snapshot.work_items if wi.has_dates]

        logger.debug(
            f"Timeline: {len(work_items)} work items, {len(snapshot.dependencies)} dependencies, "
            f"{len(milestones)} milestones"
        )

        return Timeline(
            work_items=work_items,
            dependencies=list(snapshot.dependencies),
            milestones=milestones,
            schedule=result,
            critical_path=critical_path,
            cycle_nodes=list(result.cycle_nodes),
            warnings=list(result.warnings),
            date_range=compute_date_range(snapshot.work_items),
        )
