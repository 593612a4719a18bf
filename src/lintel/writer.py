"""Project file writer.

Writes a store back into its project YAML file. An existing file is loaded
with ruamel.yaml and updated in place, so comments, key order and flow style
survive mutating CLI commands and schedule write-backs. Values are only
touched when they actually changed.
"""

from __future__ import annotations

import io
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from .models import DependencyType, WorkItemStatus

if TYPE_CHECKING:
    from .models import Dependency, Milestone, WorkItem
    from .store import InMemoryProjectStore

# Field defaults as ProjectFileParser applies them when a key is absent
_WORK_ITEM_DEFAULTS: dict[str, Any] = {
    "title": None,
    "duration_days": None,
    "start_date": None,
    "end_date": None,
    "start_after": None,
    "start_before": None,
    "status": WorkItemStatus.NOT_STARTED.value,
}
_DEPENDENCY_DEFAULTS: dict[str, Any] = {
    "type": DependencyType.FINISH_TO_START.value,
    "lead_lag_days": 0,
}
_MILESTONE_DEFAULTS: dict[str, Any] = {
    "is_completed": False,
    "completed_at": None,
}


def _work_item_data(work_item: WorkItem) -> dict[str, Any]:
    data: dict[str, Any] = {
        "title": work_item.title,
        "duration_days": work_item.duration_days,
        "start_date": work_item.start_date,
        "end_date": work_item.end_date,
        "start_after": work_item.start_after,
        "start_before": work_item.start_before,
        "status": work_item.status.value,
    }
    return {k: v for k, v in data.items() if v != _WORK_ITEM_DEFAULTS[k]}


def _dependency_data(dependency: Dependency) -> dict[str, Any]:
    return {
        "predecessor": dependency.predecessor_id,
        "successor": dependency.successor_id,
        "type": dependency.dependency_type.value,
        "lead_lag_days": dependency.lead_lag_days,
    }


def _milestone_data(milestone: Milestone) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": milestone.id,
        "title": milestone.title,
        "target_date": milestone.target_date,
        "is_completed": milestone.is_completed,
    }
    if milestone.completed_at is not None:
        data["completed_at"] = milestone.completed_at
    data["work_items"] = list(milestone.work_item_ids)
    data["dependents"] = list(milestone.dependent_work_item_ids)
    return data


def _to_node(value: Any) -> Any:
    """Convert plain dicts/lists to ruamel round-trip containers."""
    if isinstance(value, dict):
        node = CommentedMap()
        for key, item in value.items():  # pyright: ignore[reportUnknownVariableType]
            node[key] = _to_node(item)
        return node
    if isinstance(value, list):
        seq = CommentedSeq()
        seq.extend(_to_node(item) for item in value)  # pyright: ignore[reportUnknownVariableType]
        return seq
    return value


def _same(current: Any, value: Any) -> bool:
    # A quoted '2026-03-01' in the file loads as a string
    if isinstance(value, date) and isinstance(current, str):
        return current == value.isoformat()
    return bool(current == value)


def _set_field(node: Any, key: str, value: Any, default: Any = None) -> None:
    """Set ``node[key]`` only if the effective value changes."""
    if _same(node.get(key, default), value):
        return
    if value is None:
        node.pop(key, None)
    else:
        node[key] = _to_node(value)


def _set_list(node: Any, key: str, values: list[str]) -> None:
    """Replace a list's contents in place so its flow style is kept."""
    current = node.get(key)
    if current is None:
        if values:
            node[key] = _to_node(values)
        return
    if list(current) == values:
        return
    current.clear()
    current.extend(values)


def _section(data: Any, key: str, empty: Any) -> Any:
    section = data.get(key)
    if section is None:
        section = empty
        data[key] = section
    return section


def _merge_metadata(data: Any, store: InMemoryProjectStore) -> None:
    metadata = store.metadata
    node = data.get("metadata")
    if node is None:
        if metadata.name is None and metadata.version == "1.0":
            return
        node = _section(data, "metadata", CommentedMap())
    _set_field(node, "name", metadata.name)
    _set_field(node, "version", metadata.version, "1.0")


def _merge_work_items(data: Any, store: InMemoryProjectStore) -> None:
    section = _section(data, "work_items", CommentedMap())
    work_items = store.list_work_items()
    known = {wi.id for wi in work_items}

    for work_item_id in [k for k in section if k not in known]:
        del section[work_item_id]

    for work_item in work_items:
        fields = _work_item_data(work_item)
        node = section.get(work_item.id)
        if node is None:
            section[work_item.id] = _to_node(fields) if fields else None
            continue
        for key, default in _WORK_ITEM_DEFAULTS.items():
            _set_field(node, key, fields.get(key, default), default)


def _merge_dependencies(data: Any, store: InMemoryProjectStore) -> None:
    dependencies = {dep.key: dep for dep in store.list_dependencies()}
    if not dependencies and data.get("dependencies") is None:
        return
    section = _section(data, "dependencies", CommentedSeq())

    written: set[tuple[str, str]] = set()
    for index in reversed(range(len(section))):
        entry = section[index]
        key = (entry.get("predecessor"), entry.get("successor"))
        if key not in dependencies:
            del section[index]
            continue
        fields = _dependency_data(dependencies[key])
        for field_name, default in _DEPENDENCY_DEFAULTS.items():
            _set_field(entry, field_name, fields[field_name], default)
        written.add(key)

    for key, dependency in dependencies.items():
        if key not in written:
            section.append(_to_node(_dependency_data(dependency)))


def _merge_milestones(data: Any, store: InMemoryProjectStore) -> None:
    milestones = {m.id: m for m in store.list_milestones()}
    if not milestones and data.get("milestones") is None:
        return
    section = _section(data, "milestones", CommentedSeq())

    written: set[int] = set()
    for index in reversed(range(len(section))):
        entry = section[index]
        milestone = milestones.get(entry.get("id"))
        if milestone is None:
            del section[index]
            continue
        _set_field(entry, "title", milestone.title)
        _set_field(entry, "target_date", milestone.target_date)
        for field_name, default in _MILESTONE_DEFAULTS.items():
            _set_field(entry, field_name, getattr(milestone, field_name), default)
        _set_list(entry, "work_items", milestone.work_item_ids)
        _set_list(entry, "dependents", milestone.dependent_work_item_ids)
        written.add(milestone.id)

    for milestone_id, milestone in milestones.items():
        if milestone_id not in written:
            section.append(_to_node(_milestone_data(milestone)))


def write_project_file(path: Path | str, store: InMemoryProjectStore) -> None:
    """Write a store to a project YAML file.

    If the file exists it is updated in place; otherwise a new file is
    created. The document is rendered in memory first, so a failure never
    leaves a half-written file behind.

    Args:
        path: Path to write the project file
        store: Store holding the project records
    """
    path = Path(path)
    yaml_rt = YAML()
    yaml_rt.preserve_quotes = True  # type: ignore[assignment]
    # Sequences indented under their key, as in hand-written project files
    yaml_rt.indent(mapping=2, sequence=4, offset=2)  # type: ignore[no-untyped-call]

    data: Any = None
    if path.exists():
        with path.open(encoding="utf-8") as f:
            data = yaml_rt.load(f)  # type: ignore[no-untyped-call]
    if not isinstance(data, dict):
        data = CommentedMap()

    _merge_metadata(data, store)
    _merge_work_items(data, store)
    _merge_dependencies(data, store)
    _merge_milestones(data, store)

    buffer = io.StringIO()
    yaml_rt.dump(data, buffer)  # type: ignore[no-untyped-call]
    path.write_text(buffer.getvalue(), encoding="utf-8")
