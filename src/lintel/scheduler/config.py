"""Configuration classes for the scheduling system."""

from enum import Enum

from pydantic import BaseModel, Field


class ScheduleMode(str, Enum):
    """Which items a scheduling call covers and how much it computes."""

    FULL = "full"  # Every item, forward + backward pass, critical path
    PREVIEW = "preview"  # Every item, forward pass only
    CASCADE = "cascade"  # Anchor item and everything downstream of it


class SchedulingConfig(BaseModel):
    """Configuration for the CPM engine."""

    default_mode: ScheduleMode = ScheduleMode.FULL
    # Hard bound on the incremental cycle search; deeper chains are rejected
    max_cycle_search_depth: int = Field(default=10_000, gt=0)


class MilestoneConfig(BaseModel):
    """Configuration for milestone constraint integration."""

    # Re-run the full schedule after every milestone link change
    auto_reschedule: bool = True
    # Dependents may not start before the milestone's effective date
    gate_on_effective_date: bool = True


class TimelineConfig(BaseModel):
    """Configuration for timeline assembly."""

    # Include work items with no stored dates in the timeline work item list
    include_undated: bool = False
