"""In-memory project store.

Stands in for the persistence layer: it holds work items, dependencies and
milestones, hands out snapshots, and applies already-validated writes.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING

from .exceptions import NotFoundError
from .models import Dependency, Milestone, ProjectMetadata, ProjectSnapshot, WorkItem

if TYPE_CHECKING:
    from collections.abc import Iterable


class InMemoryProjectStore:
    """Dictionary-backed implementation of the ProjectRepository protocol."""

    def __init__(
        self,
        work_items: Iterable[WorkItem] = (),
        dependencies: Iterable[Dependency] = (),
        milestones: Iterable[Milestone] = (),
        metadata: ProjectMetadata | None = None,
    ):
        self.metadata = metadata or ProjectMetadata()
        self._work_items: dict[str, WorkItem] = {wi.id: wi for wi in work_items}
        self._dependencies: dict[tuple[str, str], Dependency] = {
            dep.key: dep for dep in dependencies
        }
        self._milestones: dict[int, Milestone] = {m.id: m for m in milestones}

    @classmethod
    def from_snapshot(
        cls, snapshot: ProjectSnapshot, metadata: ProjectMetadata | None = None
    ) -> InMemoryProjectStore:
        """Build a store holding copies of a snapshot's records."""
        return cls(
            [replace(wi) for wi in snapshot.work_items],
            snapshot.dependencies,
            [
                replace(
                    m,
                    work_item_ids=list(m.work_item_ids),
                    dependent_work_item_ids=list(m.dependent_work_item_ids),
                )
                for m in snapshot.milestones
            ],
            metadata,
        )

    def snapshot(self) -> ProjectSnapshot:
        """Return a read-only view; records are copied so later writes don't leak in."""
        return ProjectSnapshot(
            work_items=tuple(replace(wi) for wi in self._work_items.values()),
            dependencies=tuple(self._dependencies.values()),
            milestones=tuple(
                replace(
                    m,
                    work_item_ids=list(m.work_item_ids),
                    dependent_work_item_ids=list(m.dependent_work_item_ids),
                )
                for m in self._milestones.values()
            ),
        )

    def list_work_items(self) -> list[WorkItem]:
        return list(self._work_items.values())

    def get_work_item(self, work_item_id: str) -> WorkItem | None:
        return self._work_items.get(work_item_id)

    def add_work_item(self, work_item: WorkItem) -> None:
        self._work_items[work_item.id] = work_item

    def list_milestones(self) -> list[Milestone]:
        return list(self._milestones.values())

    def get_milestone(self, milestone_id: int) -> Milestone | None:
        return self._milestones.get(milestone_id)

    def add_milestone(self, milestone: Milestone) -> None:
        self._milestones[milestone.id] = milestone

    def list_dependencies(self) -> list[Dependency]:
        return list(self._dependencies.values())

    def get_dependency(self, predecessor_id: str, successor_id: str) -> Dependency | None:
        return self._dependencies.get((predecessor_id, successor_id))

    def add_dependency(self, dependency: Dependency) -> None:
        self._dependencies[dependency.key] = dependency

    def replace_dependency(self, dependency: Dependency) -> None:
        if dependency.key not in self._dependencies:
            raise NotFoundError(f"Dependency {dependency.key[0]} -> {dependency.key[1]} not found")
        self._dependencies[dependency.key] = dependency

    def remove_dependency(self, predecessor_id: str, successor_id: str) -> None:
        if self._dependencies.pop((predecessor_id, successor_id), None) is None:
            raise NotFoundError(f"Dependency {predecessor_id} -> {successor_id} not found")

    def set_milestone_links(
        self,
        milestone_id: int,
        work_item_ids: list[str],
        dependent_work_item_ids: list[str],
    ) -> None:
        milestone = self._milestones.get(milestone_id)
        if milestone is None:
            raise NotFoundError(f"Milestone {milestone_id} not found")
        milestone.work_item_ids = list(work_item_ids)
        milestone.dependent_work_item_ids = list(dependent_work_item_ids)

    def update_work_item_dates(self, work_item_id: str, start_date: date, end_date: date) -> None:
        work_item = self._work_items.get(work_item_id)
        if work_item is None:
            raise NotFoundError(f"Work item '{work_item_id}' not found")
        work_item.start_date = start_date
        work_item.end_date = end_date
