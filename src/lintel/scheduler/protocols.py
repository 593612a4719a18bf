"""Protocol definitions for the scheduling system."""

from datetime import date
from typing import Protocol

from lintel.models import Dependency, Milestone, ProjectSnapshot, WorkItem


class ProjectRepository(Protocol):
    """Persistence collaborator the services read snapshots from and write to.

    Implementations own storage and consistency. Services validate every
    mutation before calling a write method, so writes never need to roll back.
    """

    def snapshot(self) -> ProjectSnapshot:
        """Return a consistent read-only view of the whole project."""
        ...

    def get_work_item(self, work_item_id: str) -> WorkItem | None:
        """Get a work item by ID, or None."""
        ...

    def get_milestone(self, milestone_id: int) -> Milestone | None:
        """Get a milestone by ID, or None."""
        ...

    def list_dependencies(self) -> list[Dependency]:
        """All dependency edges in insertion order."""
        ...

    def get_dependency(self, predecessor_id: str, successor_id: str) -> Dependency | None:
        """Get the edge for an ordered pair, or None."""
        ...

    def add_dependency(self, dependency: Dependency) -> None:
        """Insert a new edge."""
        ...

    def replace_dependency(self, dependency: Dependency) -> None:
        """Replace the edge with the same ordered pair."""
        ...

    def remove_dependency(self, predecessor_id: str, successor_id: str) -> None:
        """Delete the edge for an ordered pair."""
        ...

    def set_milestone_links(
        self,
        milestone_id: int,
        work_item_ids: list[str],
        dependent_work_item_ids: list[str],
    ) -> None:
        """Replace a milestone's contributor and dependent lists."""
        ...

    def update_work_item_dates(self, work_item_id: str, start_date: date, end_date: date) -> None:
        """Write scheduled dates back to a work item."""
        ...
