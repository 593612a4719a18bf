"""Milestone linkage and automatic re-scheduling."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from .exceptions import ConflictError, MilestoneConflictError, NotFoundError
from .logger import get_logger
from .models import WorkItemStatus
from .scheduler.config import MilestoneConfig, ScheduleMode, SchedulingConfig
from .scheduler.service import SchedulingService

if TYPE_CHECKING:
    from .models import Milestone, WorkItem
    from .scheduler.protocols import ProjectRepository

logger = get_logger()


@dataclass
class WorkItemMilestones:
    """Milestones a work item takes part in."""

    required: list[Milestone]  # Milestones gating the item (it is a dependent)
    linked: list[Milestone]  # Milestones the item contributes to


class MilestoneService:
    """Registers contributors and dependents of milestones.

    A work item may feed a milestone or be gated by it, never both. Every
    successful link change re-runs the full schedule so stored dates stay
    consistent with the new constraints.
    """

    def __init__(
        self,
        store: ProjectRepository,
        config: MilestoneConfig | None = None,
        today: date | None = None,
        scheduling_config: SchedulingConfig | None = None,
    ):
        self.store = store
        self.config = config or MilestoneConfig()
        self.today = today or date.today()  # noqa: DTZ011
        self.scheduling_config = scheduling_config or SchedulingConfig()

    def link_work_item(self, milestone_id: int, work_item_id: str) -> Milestone:
        """Register a work item as a contributor to a milestone.

        Raises:
            NotFoundError: Unknown milestone or work item
            ConflictError: Already a contributor
            MilestoneConflictError: Already a dependent of the same milestone
        """
        milestone = self._require_milestone(milestone_id)
        self._require_work_item(work_item_id)

        if work_item_id in milestone.work_item_ids:
            raise ConflictError(
                f"Work item '{work_item_id}' is already linked to milestone {milestone_id}",
                {"milestone_id": milestone_id, "work_item_id": work_item_id},
            )
        if work_item_id in milestone.dependent_work_item_ids:
            raise MilestoneConflictError(
                f"Work item '{work_item_id}' depends on milestone {milestone_id} "
                "and cannot also contribute to it",
                {"milestone_id": milestone_id, "work_item_id": work_item_id},
            )

        self.store.set_milestone_links(
            milestone_id,
            [*milestone.work_item_ids, work_item_id],
            list(milestone.dependent_work_item_ids),
        )
        logger.changes(f"Linked '{work_item_id}' to milestone {milestone_id}")
        return self._after_change(milestone_id)

    def unlink_work_item(self, milestone_id: int, work_item_id: str) -> Milestone:
        """Remove a contributor from a milestone.

        Raises:
            NotFoundError: Unknown milestone, or the item is not a contributor
        """
        milestone = self._require_milestone(milestone_id)
        if work_item_id not in milestone.work_item_ids:
            raise NotFoundError(
                f"Work item '{work_item_id}' is not linked to milestone {milestone_id}"
            )

        self.store.set_milestone_links(
            milestone_id,
            [wi_id for wi_id in milestone.work_item_ids if wi_id != work_item_id],
            list(milestone.dependent_work_item_ids),
        )
        logger.changes(f"Unlinked '{work_item_id}' from milestone {milestone_id}")
        return self._after_change(milestone_id)

    def add_dependent_work_item(self, milestone_id: int, work_item_id: str) -> Milestone:
        """Gate a work item on a milestone.

        Raises:
            NotFoundError: Unknown milestone or work item
            ConflictError: Already a dependent
            MilestoneConflictError: Already a contributor to the same milestone
        """
        milestone = self._require_milestone(milestone_id)
        self._require_work_item(work_item_id)

        if work_item_id in milestone.dependent_work_item_ids:
            raise ConflictError(
                f"Work item '{work_item_id}' already depends on milestone {milestone_id}",
                {"milestone_id": milestone_id, "work_item_id": work_item_id},
            )
        if work_item_id in milestone.work_item_ids:
            raise MilestoneConflictError(
                f"Work item '{work_item_id}' contributes to milestone {milestone_id} "
                "and cannot also depend on it",
                {"milestone_id": milestone_id, "work_item_id": work_item_id},
            )

        self.store.set_milestone_links(
            milestone_id,
            list(milestone.work_item_ids),
            [*milestone.dependent_work_item_ids, work_item_id],
        )
        logger.changes(f"'{work_item_id}' now depends on milestone {milestone_id}")
        return self._after_change(milestone_id)

    def remove_dependent_work_item(self, milestone_id: int, work_item_id: str) -> Milestone:
        """Stop gating a work item on a milestone.

        The re-schedule that follows never pulls the item earlier: its start
        date was already written back by the gated run, and a stored start is
        a floor for the forward pass. Clear the item's dates to let it move
        back.

        Raises:
            NotFoundError: Unknown milestone, or the item is not a dependent
        """
        milestone = self._require_milestone(milestone_id)
        if work_item_id not in milestone.dependent_work_item_ids:
            raise NotFoundError(
                f"Work item '{work_item_id}' does not depend on milestone {milestone_id}"
            )

        self.store.set_milestone_links(
            milestone_id,
            list(milestone.work_item_ids),
            [wi_id for wi_id in milestone.dependent_work_item_ids if wi_id != work_item_id],
        )
        logger.changes(f"'{work_item_id}' no longer depends on milestone {milestone_id}")
        return self._after_change(milestone_id)

    def get_dependent_work_items(self, milestone_id: int) -> list[WorkItem]:
        """Work items gated by a milestone, in registration order."""
        milestone = self._require_milestone(milestone_id)
        result: list[WorkItem] = []
        for work_item_id in milestone.dependent_work_item_ids:
            work_item = self.store.get_work_item(work_item_id)
            if work_item is not None:
                result.append(work_item)
        return result

    def get_work_item_milestones(self, work_item_id: str) -> WorkItemMilestones:
        """Milestones gating and fed by a work item."""
        self._require_work_item(work_item_id)
        snapshot = self.store.snapshot()
        return WorkItemMilestones(
            required=[m for m in snapshot.milestones if work_item_id in m.dependent_work_item_ids],
            linked=[m for m in snapshot.milestones if work_item_id in m.work_item_ids],
        )

    def effective_date(self, milestone_id: int) -> date:
        """Date dependents of the milestone may start from."""
        milestone = self._require_milestone(milestone_id)
        return milestone.effective_date(self.store.snapshot().work_item_map)

    def auto_reschedule(self) -> int:
        """Run a full schedule and write changed dates back to the store.

        Completed work items are never rewritten. Nothing is written when the
        graph contains a cycle.

        Returns:
            Number of work items whose dates were updated
        """
        snapshot = self.store.snapshot()
        service = SchedulingService(
            snapshot,
            current_date=self.today,
            config=self.scheduling_config,
            milestone_config=self.config,
        )
        result = service.schedule(mode=ScheduleMode.FULL)

        if result.has_cycle:
            logger.warning(
                f"Skipping re-schedule: circular dependency among {', '.join(result.cycle_nodes)}"
            )
            return 0

        work_items = snapshot.work_item_map
        updated = 0
        for item in result.scheduled_items:
            work_item = work_items[item.work_item_id]
            if work_item.status == WorkItemStatus.COMPLETED or not item.dates_changed:
                continue
            self.store.update_work_item_dates(
                item.work_item_id, item.scheduled_start_date, item.scheduled_end_date
            )
            logger.date_change(
                item.work_item_id,
                item.previous_start_date,
                item.previous_end_date,
                item.scheduled_start_date,
                item.scheduled_end_date,
            )
            updated += 1

        logger.changes(f"Re-scheduled {updated} work item(s)")
        return updated

    def _after_change(self, milestone_id: int) -> Milestone:
        if self.config.auto_reschedule:
            self.auto_reschedule()
        return self._require_milestone(milestone_id)

    def _require_milestone(self, milestone_id: int) -> Milestone:
        milestone = self.store.get_milestone(milestone_id)
        if milestone is None:
            raise NotFoundError(f"Milestone {milestone_id} not found")
        return milestone

    def _require_work_item(self, work_item_id: str) -> None:
        if self.store.get_work_item(work_item_id) is None:
            raise NotFoundError(f"Work item '{work_item_id}' not found")
