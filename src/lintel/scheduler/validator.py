"""Input validation and snapshot-to-engine conversion."""

from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING

from lintel.exceptions import ValidationError
from lintel.logger import get_logger
from lintel.models import Dependency, DependencyType

from .config import MilestoneConfig

logger = get_logger()

if TYPE_CHECKING:
    from lintel.models import ProjectSnapshot, WorkItem


class SchedulerInputValidator:
    """Extracts and validates scheduling inputs from a project snapshot.

    This ensures consistent input preparation for all scheduling contexts
    (timeline reads, milestone re-scheduling, the schedule command). Milestone
    links are folded into the graph here:

    - each contributor of a milestone gets a synthetic finish-to-start edge to
      each dependent of that milestone
    - each dependent's start_after is raised to the milestone's effective date
    """

    def __init__(self, milestone_config: MilestoneConfig | None = None):
        """Initialize validator with optional milestone configuration.

        Args:
            milestone_config: Controls effective-date gating of dependents
        """
        self.milestone_config = milestone_config or MilestoneConfig()

    def validate_work_items(self, snapshot: "ProjectSnapshot") -> None:
        """Reject inputs the engine cannot interpret.

        Raises:
            ValidationError: On a negative duration or a duplicate work item ID
        """
        seen: set[str] = set()
        for work_item in snapshot.work_items:
            if work_item.id in seen:
                raise ValidationError(f"Duplicate work item ID '{work_item.id}'")
            seen.add(work_item.id)
            if work_item.duration_days is not None and work_item.duration_days < 0:
                raise ValidationError(
                    f"Work item '{work_item.id}' has negative duration {work_item.duration_days}"
                )

    def milestone_dependencies(self, snapshot: "ProjectSnapshot") -> list[Dependency]:
        """Synthetic contributor-to-dependent edges for every milestone.

        Pairs already joined by a real edge, and contributor == dependent, are
        skipped.
        """
        existing = {dep.key for dep in snapshot.dependencies}
        synthetic: list[Dependency] = []
        for milestone in snapshot.milestones:
            for dependent_id in milestone.dependent_work_item_ids:
                for contributor_id in milestone.work_item_ids:
                    if contributor_id == dependent_id:
                        continue
                    key = (contributor_id, dependent_id)
                    if key in existing:
                        continue
                    existing.add(key)
                    synthetic.append(
                        Dependency(
                            predecessor_id=contributor_id,
                            successor_id=dependent_id,
                            dependency_type=DependencyType.FINISH_TO_START,
                            lead_lag_days=0,
                        )
                    )
        if synthetic:
            logger.debug(f"Milestone expansion added {len(synthetic)} synthetic dependencies")
        return synthetic

    def gated_work_items(self, snapshot: "ProjectSnapshot") -> list["WorkItem"]:
        """Work items with start_after raised to their gating milestones' effective dates."""
        if not self.milestone_config.gate_on_effective_date:
            return list(snapshot.work_items)

        work_item_map = snapshot.work_item_map
        gates: dict[str, date] = {}
        for milestone in snapshot.milestones:
            effective = milestone.effective_date(work_item_map)
            for dependent_id in milestone.dependent_work_item_ids:
                current = gates.get(dependent_id)
                if current is None or effective > current:
                    gates[dependent_id] = effective

        result: list[WorkItem] = []
        for work_item in snapshot.work_items:
            gate = gates.get(work_item.id)
            raises_floor = gate is not None and (
                work_item.start_after is None or gate > work_item.start_after
            )
            if raises_floor:
                logger.checks(f"  {work_item.id}: gated by milestone until {gate}")
                result.append(replace(work_item, start_after=gate))
            else:
                result.append(work_item)
        return result

    def extract_inputs(
        self, snapshot: "ProjectSnapshot"
    ) -> tuple[list["WorkItem"], list[Dependency]]:
        """Build engine inputs from a snapshot.

        Returns:
            Tuple of (work items, dependencies) ready for the CPM engine
        """
        self.validate_work_items(snapshot)
        work_items = self.gated_work_items(snapshot)
        dependencies = [*snapshot.dependencies, *self.milestone_dependencies(snapshot)]
        return (work_items, dependencies)
