"""Pydantic schemas for project file validation."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import DependencyType, WorkItemStatus


class WorkItemSchema(BaseModel):
    """Schema for a single work item entry."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    duration_days: int | None = Field(default=None, ge=0)
    start_date: date | None = None
    end_date: date | None = None
    start_after: date | None = None
    start_before: date | None = None
    status: WorkItemStatus = WorkItemStatus.NOT_STARTED

    @model_validator(mode="after")
    def check_date_order(self) -> WorkItemSchema:
        """Reject an end date before the start date."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} is before start_date {self.start_date}")
        return self


class DependencySchema(BaseModel):
    """Schema for a dependency edge entry."""

    model_config = ConfigDict(extra="forbid")

    predecessor: str
    successor: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lead_lag_days: int = 0


class MilestoneSchema(BaseModel):
    """Schema for a milestone entry."""

    model_config = ConfigDict(extra="forbid")

    id: int
    title: str
    target_date: date
    is_completed: bool = False
    completed_at: date | None = None
    work_items: list[str] = Field(default_factory=list)
    dependents: list[str] = Field(default_factory=list)

    @field_validator("work_items", "dependents", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]


class MetadataSchema(BaseModel):
    """Schema for metadata YAML data."""

    name: str | None = None
    version: str = "1.0"

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version_to_string(cls, v: Any) -> str:
        """Ensure version is a string."""
        return str(v)


class ProjectFileSchema(BaseModel):
    """Schema for the entire project file."""

    metadata: MetadataSchema = Field(default_factory=MetadataSchema)
    work_items: dict[str, WorkItemSchema] = Field(default_factory=dict)
    dependencies: list[DependencySchema] = Field(default_factory=list)
    milestones: list[MilestoneSchema] = Field(default_factory=list)

    @field_validator("work_items", mode="before")
    @classmethod
    def empty_entries(cls, v: Any) -> Any:
        """Allow bare work item IDs with no fields (``id:`` in YAML)."""
        if isinstance(v, dict):
            entries: dict[Any, Any] = v  # type: ignore[assignment]
            return {str(k): ({} if entry is None else entry) for k, entry in entries.items()}
        return v
