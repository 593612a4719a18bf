"""Unified configuration loader.

This module provides a single configuration file format (lintel_config.yaml)
that combines engine, milestone, and timeline settings. Every section is
optional; missing sections fall back to their defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .scheduler import MilestoneConfig, SchedulingConfig, TimelineConfig

CONFIG_FILENAME = "lintel_config.yaml"

KNOWN_SECTIONS = ("scheduler", "milestones", "timeline")


class UnifiedConfig(BaseModel):
    """Unified configuration for scheduling, milestones, and timelines."""

    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)
    milestones: MilestoneConfig = Field(default_factory=MilestoneConfig)
    timeline: TimelineConfig = Field(default_factory=TimelineConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from YAML file.

    Args:
        config_path: Path to lintel_config.yaml file

    Returns:
        UnifiedConfig with every section populated

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        raw: Any = yaml.safe_load(f)

    if raw is None:
        return UnifiedConfig()
    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a mapping at the root level")

    data: dict[str, Any] = raw  # type: ignore[assignment]
    unknown = sorted(str(key) for key in data if key not in KNOWN_SECTIONS)
    if unknown:
        raise ValueError(
            f"Unknown config section(s): {', '.join(unknown)}. "
            f"Valid sections: {', '.join(KNOWN_SECTIONS)}"
        )

    # Build each section only if present
    scheduler_config = SchedulingConfig()
    if data.get("scheduler") is not None:
        scheduler_config = SchedulingConfig.model_validate(data["scheduler"])

    milestone_config = MilestoneConfig()
    if data.get("milestones") is not None:
        milestone_config = MilestoneConfig.model_validate(data["milestones"])

    timeline_config = TimelineConfig()
    if data.get("timeline") is not None:
        timeline_config = TimelineConfig.model_validate(data["timeline"])

    return UnifiedConfig(
        scheduler=scheduler_config,
        milestones=milestone_config,
        timeline=timeline_config,
    )
