"""Scheduler package - Critical Path Method project scheduling.

This package provides:
- A dependency graph model with O(1) predecessor/successor lookup
- Incremental cycle detection for single-edge inserts, plus the full-graph
  check the engine runs on every call
- The CPM engine (forward pass, backward pass, critical path extraction)
- High-level SchedulingService for snapshot-based scheduling

Main entry points:
- schedule(): Run the CPM engine once over work items and dependencies
- SchedulingService: Schedule a ProjectSnapshot, folding in milestone links
- find_cycle_path(): Check a candidate edge before inserting it

Configuration:
- SchedulingConfig: Engine configuration (default mode, cycle search bound)
- MilestoneConfig: Milestone integration settings
- TimelineConfig: Timeline assembly settings
"""

# Configuration
from .config import MilestoneConfig, ScheduleMode, SchedulingConfig, TimelineConfig

# Core dataclasses
from .core import (
    ScheduledItem,
    ScheduleResult,
    compute_end_date,
    compute_start_date,
    effective_span,
)

# Engine
from .cpm import CPMScheduler, schedule

# Cycle detection
from .cycles import find_cycle_members, find_cycle_path, format_cycle_path, topological_order

# Graph model
from .graph import DependencyGraph

# Protocols
from .protocols import ProjectRepository

# High-level service
from .service import SchedulingService

# Input validation
from .validator import SchedulerInputValidator

__all__ = [
    # Core dataclasses
    "ScheduledItem",
    "ScheduleResult",
    "compute_end_date",
    "compute_start_date",
    "effective_span",
    # Configuration
    "ScheduleMode",
    "SchedulingConfig",
    "MilestoneConfig",
    "TimelineConfig",
    # Graph model
    "DependencyGraph",
    # Cycle detection
    "find_cycle_path",
    "format_cycle_path",
    "topological_order",
    "find_cycle_members",
    # Engine
    "CPMScheduler",
    "schedule",
    # Protocols
    "ProjectRepository",
    # High-level service
    "SchedulingService",
    # Input validation
    "SchedulerInputValidator",
]
