"""Adjacency index over work items and dependency edges."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lintel.models import Dependency


class DependencyGraph:
    """Predecessor/successor lookup keyed by work item ID.

    Adjacency lists preserve edge insertion order so traversals are
    deterministic for identical input. No validation happens here; callers
    check edges before mutating the underlying store.
    """

    def __init__(self, work_item_ids: Iterable[str], dependencies: Iterable[Dependency]):
        self._node_ids: list[str] = []
        self._node_set: set[str] = set()
        for work_item_id in work_item_ids:
            if work_item_id not in self._node_set:
                self._node_ids.append(work_item_id)
                self._node_set.add(work_item_id)

        self._edges: dict[tuple[str, str], Dependency] = {}
        self._incoming: dict[str, list[Dependency]] = {}
        self._outgoing: dict[str, list[Dependency]] = {}
        for dep in dependencies:
            self._edges[dep.key] = dep
            self._incoming.setdefault(dep.successor_id, []).append(dep)
            self._outgoing.setdefault(dep.predecessor_id, []).append(dep)

    @property
    def node_ids(self) -> list[str]:
        """Work item IDs in input order."""
        return list(self._node_ids)

    def __contains__(self, work_item_id: object) -> bool:
        return work_item_id in self._node_set

    def __len__(self) -> int:
        return len(self._node_ids)

    def position(self) -> dict[str, int]:
        """Map of work item ID to its input position (for stable tie-breaks)."""
        return {work_item_id: index for index, work_item_id in enumerate(self._node_ids)}

    def incoming(self, work_item_id: str) -> list[Dependency]:
        """Edges where the item is the successor."""
        return self._incoming.get(work_item_id, [])

    def outgoing(self, work_item_id: str) -> list[Dependency]:
        """Edges where the item is the predecessor."""
        return self._outgoing.get(work_item_id, [])

    def predecessors(self, work_item_id: str) -> list[str]:
        """IDs of the items this item depends on."""
        return [dep.predecessor_id for dep in self.incoming(work_item_id)]

    def successors(self, work_item_id: str) -> list[str]:
        """IDs of the items that depend on this item."""
        return [dep.successor_id for dep in self.outgoing(work_item_id)]

    def has_edge(self, predecessor_id: str, successor_id: str) -> bool:
        return (predecessor_id, successor_id) in self._edges

    def get_edge(self, predecessor_id: str, successor_id: str) -> Dependency | None:
        return self._edges.get((predecessor_id, successor_id))

    @property
    def edges(self) -> list[Dependency]:
        """All edges in insertion order."""
        return list(self._edges.values())

    def restricted_to(self, work_item_ids: Iterable[str]) -> DependencyGraph:
        """Induced subgraph over the given IDs (input order preserved)."""
        keep = set(work_item_ids)
        return DependencyGraph(
            [work_item_id for work_item_id in self._node_ids if work_item_id in keep],
            [
                dep
                for dep in self._edges.values()
                if dep.predecessor_id in keep and dep.successor_id in keep
            ],
        )

    def without_edge(self, predecessor_id: str, successor_id: str) -> DependencyGraph:
        """Copy of this graph with one edge removed."""
        return DependencyGraph(
            self._node_ids,
            [dep for dep in self._edges.values() if dep.key != (predecessor_id, successor_id)],
        )

    def downstream_of(self, work_item_id: str) -> list[str]:
        """The item and every transitive successor, in breadth-first order."""
        visited: set[str] = set()
        order: list[str] = []
        queue = [work_item_id]
        while queue:
            current = queue.pop(0)
            if current in visited:
                continue
            visited.add(current)
            order.append(current)
            for succ_id in self.successors(current):
                if succ_id not in visited:
                    queue.append(succ_id)
        return order
