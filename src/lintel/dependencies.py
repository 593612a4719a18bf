"""Dependency edge mutations guarded by the cycle detector."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .exceptions import (
    CircularDependencyError,
    DuplicateDependencyError,
    NotFoundError,
    ValidationError,
)
from .logger import get_logger
from .models import Dependency, DependencyType
from .scheduler.config import SchedulingConfig
from .scheduler.cycles import find_cycle_path, format_cycle_path
from .scheduler.graph import DependencyGraph

if TYPE_CHECKING:
    from .scheduler.protocols import ProjectRepository

logger = get_logger()


@dataclass
class WorkItemDependencies:
    """Edges touching one work item."""

    predecessors: list[Dependency]
    successors: list[Dependency]


class DependencyService:
    """Create, update, and delete dependency edges.

    Every mutation is fully validated against a snapshot before the store is
    written, so a rejected request leaves the store unchanged.
    """

    def __init__(self, store: ProjectRepository, config: SchedulingConfig | None = None):
        self.store = store
        self.config = config or SchedulingConfig()

    def create_dependency(
        self,
        successor_id: str,
        predecessor_id: str,
        dependency_type: DependencyType | str = DependencyType.FINISH_TO_START,
        lead_lag_days: int = 0,
    ) -> Dependency:
        """Insert a new edge ``predecessor_id -> successor_id``.

        Raises:
            NotFoundError: Either work item does not exist
            ValidationError: Self-referencing edge or invalid dependency type
            DuplicateDependencyError: The ordered pair is already linked
            CircularDependencyError: The edge would close a cycle
        """
        self._require_work_item(successor_id)
        self._require_work_item(predecessor_id)

        if predecessor_id == successor_id:
            raise ValidationError(f"Work item '{successor_id}' cannot depend on itself")

        if self.store.get_dependency(predecessor_id, successor_id) is not None:
            raise DuplicateDependencyError(
                f"Dependency {predecessor_id} -> {successor_id} already exists",
                {"predecessor_id": predecessor_id, "successor_id": successor_id},
            )

        dependency = Dependency(
            predecessor_id=predecessor_id,
            successor_id=successor_id,
            dependency_type=_coerce_type(dependency_type),
            lead_lag_days=lead_lag_days,
        )
        self._check_cycle(self._graph(), dependency)

        self.store.add_dependency(dependency)
        logger.changes(f"Added dependency {dependency}")
        return dependency

    def update_dependency(
        self,
        successor_id: str,
        predecessor_id: str,
        dependency_type: DependencyType | str | None = None,
        lead_lag_days: int | None = None,
    ) -> Dependency:
        """Change the type and/or lead/lag of an existing edge.

        The edge is re-checked against the graph with itself removed, so an
        update can never leave a cycle behind even if the store was edited
        out of band.

        Raises:
            NotFoundError: The edge does not exist
            ValidationError: Invalid dependency type
            CircularDependencyError: The edge is part of a cycle
        """
        existing = self.store.get_dependency(predecessor_id, successor_id)
        if existing is None:
            raise NotFoundError(f"Dependency {predecessor_id} -> {successor_id} not found")

        updated = existing
        if dependency_type is not None:
            updated = replace(updated, dependency_type=_coerce_type(dependency_type))
        if lead_lag_days is not None:
            updated = replace(updated, lead_lag_days=lead_lag_days)

        self._check_cycle(self._graph().without_edge(predecessor_id, successor_id), updated)

        if updated != existing:
            self.store.replace_dependency(updated)
            logger.changes(f"Updated dependency {existing} to {updated}")
        return updated

    def delete_dependency(self, successor_id: str, predecessor_id: str) -> None:
        """Remove an edge.

        Raises:
            NotFoundError: The edge does not exist
        """
        existing = self.store.get_dependency(predecessor_id, successor_id)
        if existing is None:
            raise NotFoundError(f"Dependency {predecessor_id} -> {successor_id} not found")
        self.store.remove_dependency(predecessor_id, successor_id)
        logger.changes(f"Removed dependency {existing}")

    def get_dependencies(self, work_item_id: str) -> WorkItemDependencies:
        """Predecessor and successor edges of a work item.

        Raises:
            NotFoundError: The work item does not exist
        """
        self._require_work_item(work_item_id)
        graph = self._graph()
        return WorkItemDependencies(
            predecessors=list(graph.incoming(work_item_id)),
            successors=list(graph.outgoing(work_item_id)),
        )

    def _require_work_item(self, work_item_id: str) -> None:
        if self.store.get_work_item(work_item_id) is None:
            raise NotFoundError(f"Work item '{work_item_id}' not found")

    def _graph(self) -> DependencyGraph:
        snapshot = self.store.snapshot()
        return DependencyGraph((wi.id for wi in snapshot.work_items), snapshot.dependencies)

    def _check_cycle(self, graph: DependencyGraph, dependency: Dependency) -> None:
        path = find_cycle_path(
            graph,
            dependency.predecessor_id,
            dependency.successor_id,
            max_depth=self.config.max_cycle_search_depth,
        )
        if path is None:
            return

        titles = {}
        for work_item_id in path:
            work_item = self.store.get_work_item(work_item_id)
            titles[work_item_id] = work_item.title if work_item else None
        logger.checks(f"Rejected {dependency}: cycle {' -> '.join(path)}")
        raise CircularDependencyError(
            f"Adding dependency {dependency.predecessor_id} -> {dependency.successor_id} "
            f"would create a circular dependency: {format_cycle_path(path, titles)}",
            path,
        )


def _coerce_type(dependency_type: DependencyType | str) -> DependencyType:
    try:
        return DependencyType(dependency_type)
    except ValueError:
        valid = ", ".join(t.value for t in DependencyType)
        raise ValidationError(
            f"Invalid dependency type '{dependency_type}'. Valid types: {valid}"
        ) from None
