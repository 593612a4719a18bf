"""Critical Path Method scheduler.

Pure computation: the same work items, dependencies, mode and reference date
always produce the same result. No I/O and no state survives a call.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from lintel.exceptions import NotFoundError, ValidationError
from lintel.logger import get_logger
from lintel.models import WorkItemStatus

from .config import ScheduleMode
from .constraints import backward_constraint, forward_constraint
from .core import (
    ScheduledItem,
    ScheduleResult,
    compute_end_date,
    compute_start_date,
    effective_span,
)
from .cycles import find_cycle_members, topological_order
from .graph import DependencyGraph

if TYPE_CHECKING:
    from lintel.models import Dependency, WorkItem

logger = get_logger()


@dataclass
class _Node:
    """Per-item CPM state."""

    item: WorkItem
    span: int
    es: date  # Earliest start
    ef: date  # Earliest finish (inclusive)
    ls: date | None = None  # Latest start
    lf: date | None = None  # Latest finish (inclusive)

    @property
    def total_float(self) -> int:
        assert self.ls is not None
        return (self.ls - self.es).days


class CPMScheduler:
    """Forward/backward pass scheduler over a work item snapshot.

    Full mode dates every item and extracts the critical path. Preview mode
    runs only the forward pass. Cascade mode schedules an anchor item plus
    everything downstream of it, treating upstream items outside that set as
    fixed at their stored dates.
    """

    def __init__(  # noqa: PLR0913 - mirrors the scheduling call contract
        self,
        work_items: Iterable[WorkItem],
        dependencies: Iterable[Dependency],
        today: date,
        mode: ScheduleMode = ScheduleMode.FULL,
        anchor_work_item_id: str | None = None,
    ):
        self.work_items: dict[str, WorkItem] = {}
        for work_item in work_items:
            self.work_items.setdefault(work_item.id, work_item)
        self.dependencies = list(dependencies)
        self.today = today
        self.mode = ScheduleMode(mode)
        self.anchor_work_item_id = anchor_work_item_id

    def schedule(self) -> ScheduleResult:
        """Run the scheduling call.

        Returns:
            ScheduleResult with scheduled items, critical path and warnings.
            A cycle anywhere in the scheduled set degrades the result (see
            ScheduleResult) rather than raising.

        Raises:
            ValidationError: Cascade mode without an anchor
            NotFoundError: Cascade anchor is not a known work item
        """
        warnings: list[str] = []
        full_graph = DependencyGraph(self.work_items.keys(), self.dependencies)
        scheduled_ids = self._select_ids(full_graph)

        if not scheduled_ids:
            return ScheduleResult(scheduled_items=[], warnings=warnings)

        graph = full_graph.restricted_to(scheduled_ids)
        order, unresolved = topological_order(graph)
        logger.debug(f"CPM {self.mode.value}: {len(order)} of {len(graph)} items ordered")

        cycle_nodes: list[str] = []
        if unresolved:
            cycle_nodes = find_cycle_members(graph, unresolved)
            warnings.append(
                "Circular dependency detected among work items "
                f"{', '.join(cycle_nodes)}; critical path analysis unavailable"
            )
            logger.warning(f"Dependency cycle detected: {', '.join(cycle_nodes)}")

        nodes = self._forward_pass(order, graph, full_graph, warnings)

        if cycle_nodes or self.mode == ScheduleMode.PREVIEW:
            return ScheduleResult(
                scheduled_items=self._build_items(order, nodes),
                critical_path=[],
                warnings=warnings,
                cycle_nodes=cycle_nodes,
            )

        self._backward_pass(order, graph, nodes)
        critical_path = self._extract_critical_path(order, graph, nodes)
        logger.checks(f"Critical path: {' -> '.join(critical_path)}")

        return ScheduleResult(
            scheduled_items=self._build_items(order, nodes),
            critical_path=critical_path,
            warnings=warnings,
        )

    def _select_ids(self, graph: DependencyGraph) -> list[str]:
        """Work item IDs covered by this call, in input order."""
        if self.mode != ScheduleMode.CASCADE:
            return graph.node_ids

        if not self.anchor_work_item_id:
            raise ValidationError("anchor_work_item_id is required for cascade mode")
        if self.anchor_work_item_id not in graph:
            raise NotFoundError(f"Anchor work item '{self.anchor_work_item_id}' not found")

        downstream = set(graph.downstream_of(self.anchor_work_item_id))
        return [work_item_id for work_item_id in graph.node_ids if work_item_id in downstream]

    def _forward_pass(
        self,
        order: list[str],
        graph: DependencyGraph,
        full_graph: DependencyGraph,
        warnings: list[str],
    ) -> dict[str, _Node]:
        """Compute earliest start/finish for every ordered item."""
        nodes: dict[str, _Node] = {}

        for work_item_id in order:
            item = self.work_items[work_item_id]
            span = effective_span(item.duration_days)

            if item.duration_days is None:
                warnings.append(
                    f"Work item '{work_item_id}' has no duration set; scheduled as a single day"
                )

            candidates: list[date] = []
            # A fixed start is a floor, never a ceiling
            if item.start_date is not None:
                candidates.append(item.start_date)

            for dep in graph.incoming(work_item_id):
                pred = nodes[dep.predecessor_id]
                candidates.append(
                    forward_constraint(
                        dep.dependency_type, pred.es, pred.ef, dep.lead_lag_days, span
                    )
                )

            if self.mode == ScheduleMode.CASCADE:
                candidates.extend(self._external_constraints(work_item_id, graph, full_graph, span))

            if not candidates:
                candidates.append(self.today)
            if item.start_after is not None:
                candidates.append(item.start_after)

            es = max(candidates)
            ef = compute_end_date(es, item.duration_days)
            nodes[work_item_id] = _Node(item=item, span=span, es=es, ef=ef)
            logger.checks(f"  {work_item_id}: earliest {es} .. {ef}")

            if item.start_before is not None and es > item.start_before:
                warnings.append(
                    f"Work item '{work_item_id}' scheduled start {es} exceeds "
                    f"start-before constraint {item.start_before}"
                )

            if item.status == WorkItemStatus.COMPLETED:
                start_moved = item.start_date is not None and es != item.start_date
                end_moved = item.end_date is not None and ef != item.end_date
                if start_moved or end_moved:
                    warnings.append(
                        f"Work item '{work_item_id}' is already completed; "
                        "its dates should not be changed by the scheduler"
                    )

        return nodes

    def _external_constraints(
        self,
        work_item_id: str,
        graph: DependencyGraph,
        full_graph: DependencyGraph,
        span: int,
    ) -> list[date]:
        """Constraints from predecessors outside the cascade set, via stored dates."""
        constraints: list[date] = []
        for dep in full_graph.incoming(work_item_id):
            if dep.predecessor_id in graph:
                continue
            pred = self.work_items.get(dep.predecessor_id)
            if pred is None or not pred.has_dates:
                continue
            if pred.start_date is not None:
                pred_start = pred.start_date
                pred_finish = pred.end_date or compute_end_date(pred_start, pred.duration_days)
            else:
                assert pred.end_date is not None
                pred_finish = pred.end_date
                pred_start = compute_start_date(pred_finish, pred.duration_days)
            constraints.append(
                forward_constraint(
                    dep.dependency_type, pred_start, pred_finish, dep.lead_lag_days, span
                )
            )
        return constraints

    def _backward_pass(
        self, order: list[str], graph: DependencyGraph, nodes: dict[str, _Node]
    ) -> None:
        """Compute latest start/finish, seeded at the overall project finish."""
        project_finish = max(node.ef for node in nodes.values())

        for work_item_id in reversed(order):
            node = nodes[work_item_id]
            lf = project_finish
            for dep in graph.outgoing(work_item_id):
                succ = nodes[dep.successor_id]
                assert succ.ls is not None and succ.lf is not None
                lf = min(
                    lf,
                    backward_constraint(
                        dep.dependency_type, succ.ls, succ.lf, dep.lead_lag_days, node.span
                    ),
                )
            node.lf = lf
            node.ls = compute_start_date(lf, node.item.duration_days)
            logger.debug(f"  {work_item_id}: latest {node.ls} .. {node.lf}")

    def _extract_critical_path(
        self, order: list[str], graph: DependencyGraph, nodes: dict[str, _Node]
    ) -> list[str]:
        """Single ordered chain of zero-slack items.

        The chain ends at the critical item with the latest finish and is
        traced back along driving edges (edges whose constraint set the
        successor's earliest start). Ties at either step go to the item with
        the later finish, then to the item listed first in the input.
        """
        position = graph.position()
        critical = [work_item_id for work_item_id in order if nodes[work_item_id].total_float <= 0]
        if not critical:
            return []

        current = min(critical, key=lambda i: (-nodes[i].ef.toordinal(), position[i]))
        critical_set = set(critical)
        chain = [current]
        seen = {current}

        while True:
            node = nodes[current]
            best: str | None = None
            for dep in graph.incoming(current):
                pred_id = dep.predecessor_id
                if pred_id not in critical_set or pred_id in seen:
                    continue
                pred = nodes[pred_id]
                driving = forward_constraint(
                    dep.dependency_type, pred.es, pred.ef, dep.lead_lag_days, node.span
                )
                if driving != node.es:
                    continue
                if best is None or (pred.ef, -position[pred_id]) > (
                    nodes[best].ef,
                    -position[best],
                ):
                    best = pred_id
            if best is None:
                break
            chain.append(best)
            seen.add(best)
            current = best

        chain.reverse()
        return chain

    def _build_items(self, order: list[str], nodes: dict[str, _Node]) -> list[ScheduledItem]:
        items: list[ScheduledItem] = []
        for work_item_id in order:
            node = nodes[work_item_id]
            has_latest = node.ls is not None
            total_float = node.total_float if has_latest else 0
            items.append(
                ScheduledItem(
                    work_item_id=work_item_id,
                    previous_start_date=node.item.start_date,
                    previous_end_date=node.item.end_date,
                    scheduled_start_date=node.es,
                    scheduled_end_date=node.ef,
                    latest_start_date=node.ls,
                    latest_finish_date=node.lf,
                    total_float=max(0, total_float),
                    is_critical=has_latest and total_float <= 0,
                )
            )
        return items


def schedule(  # noqa: PLR0913 - public scheduling call contract
    work_items: Iterable[WorkItem],
    dependencies: Iterable[Dependency],
    mode: ScheduleMode | str = ScheduleMode.FULL,
    today: date | str | None = None,
    anchor_work_item_id: str | None = None,
) -> ScheduleResult:
    """Run the CPM engine once over a snapshot.

    Args:
        work_items: Every work item to consider
        dependencies: Dependency edges; edges naming unknown items are ignored
        mode: "full", "preview" or "cascade"
        today: Reference date (date or YYYY-MM-DD) for items with nothing else
            to anchor them. Defaults to the system date.
        anchor_work_item_id: Required in cascade mode

    Returns:
        ScheduleResult
    """
    if today is None:
        reference = date.today()  # noqa: DTZ011
    elif isinstance(today, str):
        try:
            reference = date.fromisoformat(today)
        except ValueError as e:
            raise ValidationError(f"Invalid reference date '{today}': use YYYY-MM-DD") from e
    else:
        reference = today

    try:
        schedule_mode = ScheduleMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in ScheduleMode)
        raise ValidationError(f"Invalid schedule mode '{mode}'. Valid modes: {valid}") from None

    return CPMScheduler(
        work_items,
        dependencies,
        reference,
        mode=schedule_mode,
        anchor_work_item_id=anchor_work_item_id,
    ).schedule()
