"""Pytest configuration and fixtures for lintel tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from lintel import context
from lintel.logger import reset_logger
from lintel.models import Dependency, DependencyType, Milestone, WorkItem, WorkItemStatus
from lintel.store import InMemoryProjectStore

TODAY = date(2026, 3, 1)


@pytest.fixture(autouse=True)
def clean_global_state() -> Iterator[None]:
    """Reset the logger and global context between tests for isolation."""
    reset_logger()
    context.set_config_path(None)
    context.set_today(None)
    yield
    reset_logger()
    context.set_config_path(None)
    context.set_today(None)


def d(value: str) -> date:
    """Shorthand for date.fromisoformat."""
    return date.fromisoformat(value)


def wi(  # noqa: PLR0913 - mirrors WorkItem fields
    work_item_id: str,
    duration: int | None = 1,
    *,
    start: str | None = None,
    end: str | None = None,
    start_after: str | None = None,
    start_before: str | None = None,
    status: WorkItemStatus = WorkItemStatus.NOT_STARTED,
    title: str | None = None,
) -> WorkItem:
    """Create a WorkItem with ISO date strings.

    Example:
        wi("A", 5, start="2026-03-01")
    """
    return WorkItem(
        id=work_item_id,
        title=title,
        duration_days=duration,
        start_date=d(start) if start else None,
        end_date=d(end) if end else None,
        start_after=d(start_after) if start_after else None,
        start_before=d(start_before) if start_before else None,
        status=status,
    )


def dep(
    predecessor_id: str,
    successor_id: str,
    dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    lag: int = 0,
) -> Dependency:
    """Create a Dependency edge ``predecessor_id -> successor_id``."""
    return Dependency(
        predecessor_id=predecessor_id,
        successor_id=successor_id,
        dependency_type=dependency_type,
        lead_lag_days=lag,
    )


def chain(*work_item_ids: str) -> list[Dependency]:
    """Finish-to-start edges linking the IDs in sequence."""
    return [dep(a, b) for a, b in zip(work_item_ids, work_item_ids[1:])]


def milestone(
    milestone_id: int,
    target: str,
    *,
    contributors: list[str] | None = None,
    dependents: list[str] | None = None,
    completed_at: str | None = None,
) -> Milestone:
    """Create a Milestone with ISO date strings."""
    return Milestone(
        id=milestone_id,
        title=f"Milestone {milestone_id}",
        target_date=d(target),
        is_completed=completed_at is not None,
        completed_at=d(completed_at) if completed_at else None,
        work_item_ids=list(contributors or []),
        dependent_work_item_ids=list(dependents or []),
    )


def dates(result: Any, work_item_id: str) -> tuple[date, date]:
    """Scheduled (start, end) of one item in a ScheduleResult."""
    item = result.get_item(work_item_id)
    assert item is not None, f"{work_item_id} was not scheduled"
    return (item.scheduled_start_date, item.scheduled_end_date)


@pytest.fixture
def store() -> InMemoryProjectStore:
    """Store with a small three-item chain F -> R -> P and one milestone.

    F: fixed start 2026-03-01, 10 days
    R: 5 days, finish-to-start after F
    P: 3 days, undated, no dependencies
    Milestone 1 (target 2026-03-20) has no links yet.
    """
    return InMemoryProjectStore(
        work_items=[
            wi("F", 10, start="2026-03-01", end="2026-03-10", title="Foundation"),
            wi("R", 5, title="Roof"),
            wi("P", 3, title="Paint"),
        ],
        dependencies=[dep("F", "R")],
        milestones=[milestone(1, "2026-03-20")],
    )


PROJECT_YAML = """\
metadata:
  name: Test House
  version: "1.0"

work_items:
  foundation:
    title: Foundation
    duration_days: 10
    start_date: 2026-03-01
  framing:
    title: Framing
    duration_days: 5
  roofing:
    title: Roofing
    duration_days: 3
  landscaping:
    title: Landscaping
    duration_days: 2

dependencies:
  - predecessor: foundation
    successor: framing
  - predecessor: framing
    successor: roofing
    type: finish_to_start
    lead_lag_days: 2

milestones:
  - id: 1
    title: Dried in
    target_date: 2026-03-25
    work_items: [roofing]
    dependents: []
"""


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    """A small valid project file on disk."""
    path = tmp_path / "project.yaml"
    path.write_text(PROJECT_YAML)
    return path
