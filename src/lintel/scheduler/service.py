"""High-level scheduling service."""

from datetime import date
from typing import TYPE_CHECKING

from .config import MilestoneConfig, ScheduleMode, SchedulingConfig
from .core import ScheduleResult
from .cpm import CPMScheduler
from .validator import SchedulerInputValidator

if TYPE_CHECKING:
    from lintel.models import ProjectSnapshot


class SchedulingService:
    """High-level service for scheduling a project snapshot.

    This service coordinates:
    - SchedulerInputValidator (snapshot validation and milestone expansion)
    - CPMScheduler (forward/backward pass and critical path)

    To provide a complete scheduling call over persisted project data.
    """

    def __init__(
        self,
        snapshot: "ProjectSnapshot",
        current_date: date | None = None,
        config: SchedulingConfig | None = None,
        milestone_config: MilestoneConfig | None = None,
    ):
        """Initialize scheduling service.

        Args:
            snapshot: Project snapshot to schedule
            current_date: Reference date for unanchored items (defaults to today)
            config: Optional engine configuration
            milestone_config: Optional milestone integration configuration
        """
        self.snapshot = snapshot
        self.current_date = current_date or date.today()  # noqa: DTZ011
        self.config = config or SchedulingConfig()
        self.validator = SchedulerInputValidator(milestone_config)

    def schedule(
        self,
        mode: ScheduleMode | None = None,
        anchor_work_item_id: str | None = None,
    ) -> ScheduleResult:
        """Schedule the snapshot.

        Args:
            mode: Scheduling mode (defaults to the configured default mode)
            anchor_work_item_id: Anchor for cascade mode

        Returns:
            ScheduleResult from the CPM engine
        """
        work_items, dependencies = self.validator.extract_inputs(self.snapshot)
        scheduler = CPMScheduler(
            work_items,
            dependencies,
            self.current_date,
            mode=mode or self.config.default_mode,
            anchor_work_item_id=anchor_work_item_id,
        )
        return scheduler.schedule()
