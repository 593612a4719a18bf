"""Command-line interface for Lintel."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from . import context
from .dependencies import DependencyService
from .exceptions import LintelError
from .loader import Project, load_project
from .logger import changes_enabled, checks_enabled, debug_enabled, get_logger, setup_logger
from .milestones import MilestoneService
from .models import WorkItemStatus
from .scheduler import DependencyGraph, ScheduleMode, SchedulingService, topological_order
from .scheduler.cycles import find_cycle_members
from .timeline import TimelineService
from .writer import write_project_file

if TYPE_CHECKING:
    from .scheduler import ScheduleResult
    from .timeline import Timeline

app = typer.Typer(
    name="lintel",
    help="Critical Path Method scheduling for construction project work items",
    add_completion=False,
)

logger = get_logger()


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to unified config file (default: lintel_config.yaml)",
        ),
    ] = None,
    today: Annotated[
        str | None,
        typer.Option(
            "--today",
            help="Reference date for every command (YYYY-MM-DD). Defaults to the system date",
        ),
    ] = None,
) -> None:
    """Global options for lintel commands."""
    setup_logger(verbose)
    context.set_config_path(config)
    context.set_today(_parse_date_option(today, "today"))


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a date string from CLI option.

    Args:
        date_str: Date string in YYYY-MM-DD format or None
        option_name: Name of the option for error messages

    Returns:
        Parsed date object or None if date_str is None
    """
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid date format '{date_str}' for --{option_name}. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load(file: Path) -> Project:
    """Load a project file, exiting with an error message on failure."""
    try:
        return load_project(file)
    except LintelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: Invalid config: {e}", err=True)
        raise typer.Exit(1) from None


def _echo_warnings(warnings: list[str]) -> None:
    if warnings:
        typer.echo("\nWarnings:", err=True)
        for warning in warnings:
            typer.echo(f"  - {warning}", err=True)


def _display_schedule_results(
    project: Project, result: ScheduleResult, mode: ScheduleMode
) -> None:
    """Display schedule results to stdout."""
    typer.echo(f"Schedule Results ({mode.value} mode)")
    typer.echo("=" * 80)
    typer.echo("")

    for item in result.scheduled_items:
        work_item = project.store.get_work_item(item.work_item_id)
        name = work_item.display_name if work_item else item.work_item_id
        typer.echo(f"{name} ({item.work_item_id})")
        typer.echo(f"  Start:  {item.scheduled_start_date}")
        typer.echo(f"  End:    {item.scheduled_end_date}")
        if item.latest_start_date is not None:
            typer.echo(f"  Latest: {item.latest_start_date} .. {item.latest_finish_date}")
            typer.echo(f"  Float:  {item.total_float} day(s)")
        if item.is_critical:
            typer.echo("  (critical)")
        if item.dates_changed:
            typer.echo(f"  (was {item.previous_start_date} .. {item.previous_end_date})")
        typer.echo("")

    if result.critical_path:
        typer.echo(f"Critical path: {' -> '.join(result.critical_path)}")
    if result.cycle_nodes:
        typer.echo(f"Circular dependency among: {', '.join(result.cycle_nodes)}")


def _write_schedule(project: Project, result: ScheduleResult) -> int:
    """Write scheduled dates of non-completed items back to the project file."""
    updated = 0
    for item in result.scheduled_items:
        work_item = project.store.get_work_item(item.work_item_id)
        if work_item is None or work_item.status == WorkItemStatus.COMPLETED:
            continue
        if not item.dates_changed:
            continue
        project.store.update_work_item_dates(
            item.work_item_id, item.scheduled_start_date, item.scheduled_end_date
        )
        logger.date_change(
            item.work_item_id,
            item.previous_start_date,
            item.previous_end_date,
            item.scheduled_start_date,
            item.scheduled_end_date,
        )
        updated += 1
    write_project_file(project.path, project.store)
    return updated


@app.command()
def schedule(  # noqa: PLR0913 - CLI command needs multiple options
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    mode: Annotated[
        str | None,
        typer.Option(
            "--mode",
            "-m",
            help="Scheduling mode: 'full', 'preview', or 'cascade'. Overrides config",
        ),
    ] = None,
    anchor: Annotated[
        str | None,
        typer.Option("--anchor", "-a", help="Anchor work item ID (cascade mode)"),
    ] = None,
    today: Annotated[
        str | None,
        typer.Option(
            "--today",
            "-t",
            help="Reference date for unanchored items (YYYY-MM-DD). Defaults to today",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the schedule result as JSON"),
    ] = False,
    write: Annotated[
        bool,
        typer.Option("--write", help="Write scheduled dates back to the project file"),
    ] = False,
) -> None:
    """Run the CPM scheduler and display or persist results."""
    parsed_today = _parse_date_option(today, "today") or context.get_today()
    project = _load(file)

    schedule_mode = project.config.scheduler.default_mode
    if mode:
        try:
            schedule_mode = ScheduleMode(mode)
        except ValueError:
            typer.echo(
                f"Error: Invalid mode '{mode}'. "
                f"Available: {', '.join(m.value for m in ScheduleMode)}",
                err=True,
            )
            raise typer.Exit(1) from None

    service = SchedulingService(
        project.store.snapshot(),
        parsed_today,
        project.config.scheduler,
        project.config.milestones,
    )
    try:
        result = service.schedule(mode=schedule_mode, anchor_work_item_id=anchor)
    except LintelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _display_schedule_results(project, result, schedule_mode)

    if write:
        if result.has_cycle:
            typer.echo("Not writing dates: the dependency graph contains a cycle", err=True)
        else:
            updated = _write_schedule(project, result)
            typer.echo(f"Updated {updated} work item(s) in {file}", err=as_json)

    _echo_warnings(result.warnings)


def _display_timeline(timeline: Timeline) -> None:
    """Display a timeline summary to stdout."""
    if timeline.date_range:
        typer.echo(f"Date range: {timeline.date_range.earliest} .. {timeline.date_range.latest}")
    else:
        typer.echo("Date range: (no dated work items)")
    typer.echo("")

    typer.echo("Work items:")
    for work_item in timeline.work_items:
        typer.echo(
            f"  {work_item.id}: {work_item.start_date} .. {work_item.end_date} "
            f"[{work_item.status.value}]"
        )

    if timeline.milestones:
        typer.echo("")
        typer.echo("Milestones:")
        for milestone in timeline.milestones:
            flag = " (late)" if milestone.is_late else ""
            flag = " (completed)" if milestone.is_completed else flag
            typer.echo(
                f"  {milestone.id} {milestone.title}: target {milestone.target_date}, "
                f"effective {milestone.effective_date}{flag}"
            )

    typer.echo("")
    if timeline.cycle_nodes:
        typer.echo(f"Critical path unavailable: cycle among {', '.join(timeline.cycle_nodes)}")
    else:
        typer.echo(f"Critical path: {' -> '.join(timeline.critical_path) or '(none)'}")


@app.command()
def timeline(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    today: Annotated[
        str | None,
        typer.Option("--today", "-t", help="Reference date (YYYY-MM-DD). Defaults to today"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the timeline as JSON"),
    ] = False,
) -> None:
    """Show the project timeline: dates, milestones, critical path."""
    parsed_today = _parse_date_option(today, "today") or context.get_today()
    project = _load(file)

    service = TimelineService(
        project.store,
        project.config.timeline,
        parsed_today,
        project.config.scheduler,
        project.config.milestones,
    )
    result = service.get_timeline()

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _display_timeline(result)
    _echo_warnings(result.warnings)


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
) -> None:
    """Validate a project file and check the dependency graph for cycles."""
    project = _load(file)
    snapshot = project.store.snapshot()
    graph = DependencyGraph((wi.id for wi in snapshot.work_items), snapshot.dependencies)

    order, unresolved = topological_order(graph)
    if changes_enabled():
        typer.echo(f"Scheduling order: {' -> '.join(order) or '(none)'}")
    if checks_enabled():
        for work_item_id in order:
            predecessors = graph.predecessors(work_item_id)
            typer.echo(f"  {work_item_id} <- {', '.join(predecessors) or '(no predecessors)'}")
    if debug_enabled():
        typer.echo(json.dumps([str(dep) for dep in graph.edges], indent=2))

    if unresolved:
        members = find_cycle_members(graph, unresolved)
        typer.echo(f"Error: Circular dependency among: {', '.join(members)}", err=True)
        raise typer.Exit(1)

    typer.echo(
        f"OK: {len(snapshot.work_items)} work items, {len(snapshot.dependencies)} dependencies, "
        f"{len(snapshot.milestones)} milestones"
    )


@app.command("add-dependency")
def add_dependency(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    successor: Annotated[str, typer.Argument(help="Work item that depends on the predecessor")],
    predecessor: Annotated[str, typer.Argument(help="Work item the successor depends on")],
    dependency_type: Annotated[
        str,
        typer.Option(
            "--type",
            help="finish_to_start, start_to_start, finish_to_finish, or start_to_finish",
        ),
    ] = "finish_to_start",
    lag: Annotated[
        int,
        typer.Option("--lag", help="Lead/lag in days (negative for lead)"),
    ] = 0,
) -> None:
    """Add a dependency edge, rejecting duplicates and cycles."""
    project = _load(file)
    service = DependencyService(project.store, project.config.scheduler)
    try:
        dependency = service.create_dependency(successor, predecessor, dependency_type, lag)
    except LintelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    write_project_file(file, project.store)
    typer.echo(f"Added dependency {dependency}")


@app.command("remove-dependency")
def remove_dependency(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    successor: Annotated[str, typer.Argument(help="Successor work item ID")],
    predecessor: Annotated[str, typer.Argument(help="Predecessor work item ID")],
) -> None:
    """Remove a dependency edge."""
    project = _load(file)
    service = DependencyService(project.store, project.config.scheduler)
    try:
        service.delete_dependency(successor, predecessor)
    except LintelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    write_project_file(file, project.store)
    typer.echo(f"Removed dependency {predecessor} -> {successor}")


def _milestone_service(project: Project, today: str | None) -> MilestoneService:
    return MilestoneService(
        project.store,
        project.config.milestones,
        _parse_date_option(today, "today") or context.get_today(),
        project.config.scheduler,
    )


@app.command("link-milestone")
def link_milestone(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    milestone: Annotated[int, typer.Argument(help="Milestone ID")],
    work_item: Annotated[str, typer.Argument(help="Work item ID")],
    dependent: Annotated[
        bool,
        typer.Option("--dependent", help="Gate the work item on the milestone instead"),
    ] = False,
    today: Annotated[
        str | None,
        typer.Option("--today", "-t", help="Reference date for re-scheduling (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Register a work item as a milestone contributor (or dependent)."""
    project = _load(file)
    service = _milestone_service(project, today)
    try:
        if dependent:
            service.add_dependent_work_item(milestone, work_item)
        else:
            service.link_work_item(milestone, work_item)
    except LintelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    write_project_file(file, project.store)
    role = "dependent of" if dependent else "contributor to"
    typer.echo(f"'{work_item}' is now a {role} milestone {milestone}")


@app.command("unlink-milestone")
def unlink_milestone(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    milestone: Annotated[int, typer.Argument(help="Milestone ID")],
    work_item: Annotated[str, typer.Argument(help="Work item ID")],
    dependent: Annotated[
        bool,
        typer.Option("--dependent", help="Remove a dependent instead of a contributor"),
    ] = False,
    today: Annotated[
        str | None,
        typer.Option("--today", "-t", help="Reference date for re-scheduling (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Remove a work item from a milestone's contributors (or dependents)."""
    project = _load(file)
    service = _milestone_service(project, today)
    try:
        if dependent:
            service.remove_dependent_work_item(milestone, work_item)
        else:
            service.unlink_work_item(milestone, work_item)
    except LintelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    write_project_file(file, project.store)
    role = "dependent of" if dependent else "contributor to"
    typer.echo(f"'{work_item}' is no longer a {role} milestone {milestone}")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
