"""YAML parser for Lintel project files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Dependency, Milestone, ProjectMetadata, WorkItem
from .schemas import ProjectFileSchema
from .store import InMemoryProjectStore


class ProjectFileParser:
    """Parser for project YAML files.

    This parser only handles YAML parsing and record creation. For loading
    with reference validation and config discovery, use load_project() from
    lintel.loader.
    """

    def parse_file(self, file_path: Path | str) -> InMemoryProjectStore:
        """Parse a YAML file into a project store."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> InMemoryProjectStore:
        """Parse loaded YAML data into a project store."""
        try:
            schema = ProjectFileSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        metadata = ProjectMetadata(name=schema.metadata.name, version=schema.metadata.version)

        work_items = [
            WorkItem(
                id=work_item_id,
                title=entry.title,
                duration_days=entry.duration_days,
                start_date=entry.start_date,
                end_date=entry.end_date,
                start_after=entry.start_after,
                start_before=entry.start_before,
                status=entry.status,
            )
            for work_item_id, entry in schema.work_items.items()
        ]

        dependencies = [
            Dependency(
                predecessor_id=entry.predecessor,
                successor_id=entry.successor,
                dependency_type=entry.type,
                lead_lag_days=entry.lead_lag_days,
            )
            for entry in schema.dependencies
        ]

        milestones = [
            Milestone(
                id=entry.id,
                title=entry.title,
                target_date=entry.target_date,
                is_completed=entry.is_completed,
                completed_at=entry.completed_at,
                work_item_ids=list(entry.work_items),
                dependent_work_item_ids=list(entry.dependents),
            )
            for entry in schema.milestones
        ]

        store = InMemoryProjectStore(metadata=metadata)
        for work_item in work_items:
            store.add_work_item(work_item)
        for milestone in milestones:
            if store.get_milestone(milestone.id) is not None:
                raise ValidationError(f"Duplicate milestone ID {milestone.id}")
            store.add_milestone(milestone)
        for dependency in dependencies:
            if store.get_dependency(dependency.predecessor_id, dependency.successor_id):
                raise ValidationError(
                    f"Duplicate dependency {dependency.predecessor_id} -> {dependency.successor_id}"
                )
            store.add_dependency(dependency)
        return store
