"""Cycle detection over the dependency graph.

Two entry points with different jobs:

- find_cycle_path() is the incremental guard run before a single edge is
  inserted. It searches backward from the candidate predecessor and reports
  one concrete offending path.
- topological_order() and find_cycle_members() are the full-graph check the
  CPM engine runs on every call, because milestone-derived edges and bulk
  imports never pass through the incremental guard.

Both are iterative with explicit stacks.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING

from lintel.exceptions import ValidationError
from lintel.logger import get_logger

if TYPE_CHECKING:
    from .graph import DependencyGraph

logger = get_logger()

DEFAULT_MAX_DEPTH = 10_000


def find_cycle_path(
    graph: DependencyGraph,
    predecessor_id: str,
    successor_id: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[str] | None:
    """Check whether adding ``predecessor_id -> successor_id`` would close a cycle.

    Walks backward along existing predecessor edges starting at
    ``predecessor_id`` ("what does the predecessor itself depend on"). Reaching
    ``successor_id`` means the new edge would lead back to the start.

    Args:
        graph: The current, acyclic dependency graph
        predecessor_id: Predecessor of the candidate edge
        successor_id: Successor of the candidate edge
        max_depth: Longest dependency chain the search will follow

    Returns:
        None if the edge is safe to insert, otherwise the offending path
        ``[predecessor_id, ..., successor_id]``. A self-edge always returns
        ``[predecessor_id, predecessor_id]``.

    Raises:
        ValidationError: If the search would exceed ``max_depth``
    """
    if predecessor_id == successor_id:
        return [predecessor_id, successor_id]

    visited: set[str] = {predecessor_id}
    path: list[str] = [predecessor_id]
    stack: list[Iterator[str]] = [iter(graph.predecessors(predecessor_id))]

    while stack:
        next_id = next(stack[-1], None)
        if next_id is None:
            stack.pop()
            path.pop()
            continue

        if next_id == successor_id:
            cycle = [*path, successor_id]
            logger.debug(f"Cycle search {predecessor_id} -> {successor_id}: found {cycle}")
            return cycle

        if next_id in visited:
            continue

        if len(path) >= max_depth:
            raise ValidationError(
                f"Dependency chain above '{predecessor_id}' exceeds maximum depth {max_depth}"
            )

        visited.add(next_id)
        path.append(next_id)
        stack.append(iter(graph.predecessors(next_id)))

    logger.debug(
        f"Cycle search {predecessor_id} -> {successor_id}: clear after {len(visited)} nodes"
    )
    return None


def format_cycle_path(path: list[str], titles: Mapping[str, str | None] | None = None) -> str:
    """Render a cycle path for display, quoting titles where they are known."""
    titles = titles or {}
    parts: list[str] = []
    for work_item_id in path:
        title = titles.get(work_item_id)
        parts.append(f'"{title}"' if title else work_item_id)
    return " -> ".join(parts)


def topological_order(graph: DependencyGraph) -> tuple[list[str], list[str]]:
    """Kahn's algorithm over every node in the graph.

    Ready nodes are released in input order, so the result is deterministic
    for identical input. Edges naming unknown nodes are ignored.

    Returns:
        Tuple of (sorted IDs, unresolved IDs). Unresolved IDs are the members
        of cycles plus everything downstream of them, in input order; the list
        is empty for an acyclic graph.
    """
    position = graph.position()
    in_degree = dict.fromkeys(graph.node_ids, 0)
    for node_id in graph.node_ids:
        for pred_id in graph.predecessors(node_id):
            if pred_id in in_degree:
                in_degree[node_id] += 1

    ready: list[tuple[int, str]] = [
        (position[node_id], node_id) for node_id, degree in in_degree.items() if degree == 0
    ]
    heapq.heapify(ready)
    ordered: list[str] = []

    while ready:
        _, node_id = heapq.heappop(ready)
        ordered.append(node_id)
        for succ_id in graph.successors(node_id):
            if succ_id not in in_degree:
                continue
            in_degree[succ_id] -= 1
            if in_degree[succ_id] == 0:
                heapq.heappush(ready, (position[succ_id], succ_id))

    resolved = set(ordered)
    unresolved = [node_id for node_id in graph.node_ids if node_id not in resolved]
    return (ordered, unresolved)


def find_cycle_members(graph: DependencyGraph, candidates: list[str]) -> list[str]:
    """Strongly connected component analysis (iterative Tarjan) over ``candidates``.

    Returns the candidates that sit on a cycle: members of a component with
    more than one node, or nodes with a self-edge. Nodes that are only
    downstream of a cycle are excluded. Output keeps the candidates' order.
    """
    candidate_set = set(candidates)
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    members: set[str] = set()
    counter = 0

    for root in candidates:
        if root in index_of:
            continue

        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: list[tuple[str, Iterator[str]]] = [(root, iter(graph.successors(root)))]

        while work:
            node_id, successors = work[-1]
            descended = False
            for succ_id in successors:
                if succ_id not in candidate_set:
                    continue
                if succ_id not in index_of:
                    index_of[succ_id] = lowlink[succ_id] = counter
                    counter += 1
                    stack.append(succ_id)
                    on_stack.add(succ_id)
                    work.append((succ_id, iter(graph.successors(succ_id))))
                    descended = True
                    break
                if succ_id in on_stack:
                    lowlink[node_id] = min(lowlink[node_id], index_of[succ_id])
            if descended:
                continue

            work.pop()
            if work:
                parent_id = work[-1][0]
                lowlink[parent_id] = min(lowlink[parent_id], lowlink[node_id])

            if lowlink[node_id] == index_of[node_id]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node_id:
                        break
                if len(component) > 1 or graph.has_edge(node_id, node_id):
                    members.update(component)

    return [node_id for node_id in candidates if node_id in members]
