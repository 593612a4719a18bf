"""Project loading with config discovery and structural validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from . import context
from .exceptions import MissingReferenceError, ValidationError
from .logger import get_logger
from .parser import ProjectFileParser
from .store import InMemoryProjectStore
from .unified_config import CONFIG_FILENAME, UnifiedConfig, load_unified_config

logger = get_logger()


@dataclass
class Project:
    """A loaded project file together with the config that applies to it."""

    path: Path
    store: InMemoryProjectStore
    config: UnifiedConfig


def _discover_config(
    project_path: Path,
    config_path: Path | None = None,
) -> UnifiedConfig | None:
    """Discover unified config from various locations.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. project file directory / lintel_config.yaml
    4. Current directory / lintel_config.yaml
    """
    # 1. Explicit argument
    if config_path and config_path.exists():
        return load_unified_config(config_path)

    # 2. Global context
    ctx_config = context.get_config_path()
    if ctx_config and ctx_config.exists():
        return load_unified_config(ctx_config)

    # 3. Project file directory
    project_dir = Path(project_path).parent
    dir_config = project_dir / CONFIG_FILENAME
    if dir_config.exists():
        return load_unified_config(dir_config)

    # 4. Current directory
    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_unified_config(cwd_config)

    return None


def load_project(
    path: Path | str,
    config_path: Path | None = None,
    *,
    config: UnifiedConfig | None = None,
) -> Project:
    """Load and validate a project file.

    This is the main entry point for loading projects. It handles:
    1. Config discovery
    2. YAML parsing
    3. Validation (references, self edges, milestone overlap)

    Dependency cycles are deliberately loaded as-is: the scheduler reports
    them instead of refusing to run.

    Args:
        path: Path to the project YAML file
        config_path: Optional explicit path to config file
        config: Optional explicit unified config (overrides discovery)

    Returns:
        Loaded Project
    """
    path = Path(path)

    if config is None:
        config = _discover_config(path, config_path) or UnifiedConfig()

    store = ProjectFileParser().parse_file(path)
    validate_project(store)

    logger.debug(
        f"Loaded {path}: {len(store.list_work_items())} work items, "
        f"{len(store.list_dependencies())} dependencies, {len(store.list_milestones())} milestones"
    )
    return Project(path=path, store=store, config=config)


def validate_project(store: InMemoryProjectStore) -> None:
    """Validate reference integrity of a parsed project."""
    for dep in store.list_dependencies():
        if dep.predecessor_id == dep.successor_id:
            raise ValidationError(f"Work item '{dep.successor_id}' cannot depend on itself")
        if store.get_work_item(dep.predecessor_id) is None:
            raise MissingReferenceError(
                f"Dependency {dep.predecessor_id} -> {dep.successor_id} "
                f"references unknown work item: {dep.predecessor_id}"
            )
        if store.get_work_item(dep.successor_id) is None:
            raise MissingReferenceError(
                f"Dependency {dep.predecessor_id} -> {dep.successor_id} "
                f"references unknown work item: {dep.successor_id}"
            )

    for milestone in store.list_milestones():
        for work_item_id in [*milestone.work_item_ids, *milestone.dependent_work_item_ids]:
            if store.get_work_item(work_item_id) is None:
                raise MissingReferenceError(
                    f"Milestone {milestone.id} references unknown work item: {work_item_id}"
                )
        overlap = set(milestone.work_item_ids) & set(milestone.dependent_work_item_ids)
        if overlap:
            raise ValidationError(
                f"Milestone {milestone.id} lists {', '.join(sorted(overlap))} "
                "as both contributor and dependent"
            )
