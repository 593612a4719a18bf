"""Tests for project file parsing, loading, and writing."""

from pathlib import Path

import pytest

from lintel.exceptions import MissingReferenceError, ParseError, ValidationError
from lintel.loader import load_project
from lintel.models import DependencyType, WorkItemStatus
from lintel.parser import ProjectFileParser
from lintel.writer import write_project_file
from tests.conftest import d, dep


class TestProjectFileParser:
    """Test YAML parsing into a store."""

    def test_parse_file(self, project_file: Path) -> None:
        """Test that every section is parsed."""
        store = ProjectFileParser().parse_file(project_file)

        assert store.metadata.name == "Test House"
        assert [w.id for w in store.list_work_items()] == [
            "foundation",
            "framing",
            "roofing",
            "landscaping",
        ]
        foundation = store.get_work_item("foundation")
        assert foundation is not None
        assert foundation.title == "Foundation"
        assert foundation.duration_days == 10
        assert foundation.start_date == d("2026-03-01")
        assert foundation.status == WorkItemStatus.NOT_STARTED

        assert store.list_dependencies() == [
            dep("foundation", "framing"),
            dep("framing", "roofing", DependencyType.FINISH_TO_START, 2),
        ]

        milestone = store.get_milestone(1)
        assert milestone is not None
        assert milestone.title == "Dried in"
        assert milestone.target_date == d("2026-03-25")
        assert milestone.work_item_ids == ["roofing"]

    def test_bare_work_item(self) -> None:
        """Test that a work item with no fields is accepted."""
        store = ProjectFileParser().parse_data({"work_items": {"A": None}})

        work_item = store.get_work_item("A")
        assert work_item is not None
        assert work_item.duration_days is None

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file is a parse error."""
        with pytest.raises(ParseError, match="File not found"):
            ProjectFileParser().parse_file(tmp_path / "nope.yaml")

    def test_bad_yaml(self, tmp_path: Path) -> None:
        """Test that malformed YAML is a parse error."""
        path = tmp_path / "bad.yaml"
        path.write_text("work_items: [unclosed\n")

        with pytest.raises(ParseError, match="Failed to parse YAML"):
            ProjectFileParser().parse_file(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        """Test that a list at the root is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ParseError, match="dictionary"):
            ProjectFileParser().parse_file(path)

    def test_negative_duration(self) -> None:
        """Test schema validation of durations."""
        with pytest.raises(ValidationError, match="Invalid YAML structure"):
            ProjectFileParser().parse_data({"work_items": {"A": {"duration_days": -1}}})

    def test_unknown_field(self) -> None:
        """Test that misspelled work item fields are rejected."""
        with pytest.raises(ValidationError):
            ProjectFileParser().parse_data({"work_items": {"A": {"duraton_days": 3}}})

    def test_end_before_start(self) -> None:
        """Test that inverted dates are rejected."""
        with pytest.raises(ValidationError, match="before start_date"):
            ProjectFileParser().parse_data(
                {"work_items": {"A": {"start_date": "2026-03-05", "end_date": "2026-03-01"}}}
            )

    def test_invalid_dependency_type(self) -> None:
        """Test that unknown dependency types are rejected."""
        with pytest.raises(ValidationError):
            ProjectFileParser().parse_data(
                {
                    "work_items": {"A": {}, "B": {}},
                    "dependencies": [{"predecessor": "A", "successor": "B", "type": "soon"}],
                }
            )

    def test_duplicate_dependency(self) -> None:
        """Test that the same ordered pair may only appear once."""
        with pytest.raises(ValidationError, match="Duplicate dependency"):
            ProjectFileParser().parse_data(
                {
                    "work_items": {"A": {}, "B": {}},
                    "dependencies": [
                        {"predecessor": "A", "successor": "B"},
                        {"predecessor": "A", "successor": "B", "lead_lag_days": 1},
                    ],
                }
            )


class TestLoadProject:
    """Test loading with reference validation."""

    def _write(self, tmp_path: Path, text: str) -> Path:
        path = tmp_path / "project.yaml"
        path.write_text(text)
        return path

    def test_load(self, project_file: Path) -> None:
        """Test loading a valid project with default config."""
        project = load_project(project_file)

        assert project.path == project_file
        assert len(project.store.list_work_items()) == 4
        assert project.config.milestones.auto_reschedule

    def test_unknown_dependency_reference(self, tmp_path: Path) -> None:
        """Test that dependencies must name existing work items."""
        path = self._write(
            tmp_path,
            "work_items:\n  A: {}\ndependencies:\n  - {predecessor: A, successor: ghost}\n",
        )

        with pytest.raises(MissingReferenceError, match="ghost"):
            load_project(path)

    def test_self_dependency(self, tmp_path: Path) -> None:
        """Test that self edges are rejected at load time."""
        path = self._write(
            tmp_path,
            "work_items:\n  A: {}\ndependencies:\n  - {predecessor: A, successor: A}\n",
        )

        with pytest.raises(ValidationError, match="cannot depend on itself"):
            load_project(path)

    def test_unknown_milestone_reference(self, tmp_path: Path) -> None:
        """Test that milestones must name existing work items."""
        path = self._write(
            tmp_path,
            "work_items:\n  A: {}\n"
            "milestones:\n  - {id: 1, title: M, target_date: 2026-03-01, dependents: [ghost]}\n",
        )

        with pytest.raises(MissingReferenceError, match="ghost"):
            load_project(path)

    def test_milestone_overlap(self, tmp_path: Path) -> None:
        """Test that an item cannot both feed and depend on one milestone."""
        path = self._write(
            tmp_path,
            "work_items:\n  A: {}\n"
            "milestones:\n"
            "  - {id: 1, title: M, target_date: 2026-03-01, work_items: [A], dependents: [A]}\n",
        )

        with pytest.raises(ValidationError, match="both contributor and dependent"):
            load_project(path)

    def test_cycles_loaded_as_is(self, tmp_path: Path) -> None:
        """Test that an existing cycle does not block loading."""
        path = self._write(
            tmp_path,
            "work_items:\n  A: {}\n  B: {}\n"
            "dependencies:\n"
            "  - {predecessor: A, successor: B}\n"
            "  - {predecessor: B, successor: A}\n",
        )

        project = load_project(path)

        assert len(project.store.list_dependencies()) == 2

    def test_config_discovered_next_to_project(self, project_file: Path) -> None:
        """Test that lintel_config.yaml beside the project file is used."""
        (project_file.parent / "lintel_config.yaml").write_text(
            "milestones:\n  auto_reschedule: false\n"
        )

        project = load_project(project_file)

        assert not project.config.milestones.auto_reschedule


class TestWriteProjectFile:
    """Test writing projects back to YAML."""

    def test_round_trip(self, project_file: Path, tmp_path: Path) -> None:
        """Test that a written file parses back to the same records."""
        original = ProjectFileParser().parse_file(project_file)
        original.update_work_item_dates("framing", d("2026-03-11"), d("2026-03-15"))
        out = tmp_path / "out.yaml"

        write_project_file(out, original)
        reloaded = ProjectFileParser().parse_file(out)

        assert reloaded.snapshot() == original.snapshot()
        assert reloaded.metadata == original.metadata

    def test_written_layout(self, project_file: Path, tmp_path: Path) -> None:
        """Test the section order and field names of the written file."""
        out = tmp_path / "out.yaml"

        write_project_file(out, ProjectFileParser().parse_file(project_file))
        text = out.read_text()

        assert text.index("metadata:") < text.index("work_items:") < text.index("dependencies:")
        assert "lead_lag_days: 2" in text
        assert "dependents: []" in text

    def test_comments_and_layout_preserved(self, tmp_path: Path) -> None:
        """Test that updating an existing file keeps comments and flow style."""
        path = tmp_path / "project.yaml"
        path.write_text(COMMENTED_YAML)
        store = ProjectFileParser().parse_file(path)
        store.add_dependency(dep("A", "B"))
        store.update_work_item_dates("C", d("2026-03-03"), d("2026-03-05"))
        store.set_milestone_links(1, ["A", "B"], [])

        write_project_file(path, store)
        text = path.read_text()

        assert "# Site build plan" in text
        assert "# foundation" in text
        assert "# pour before framing" in text
        assert "A: {duration_days: 2}" in text
        assert "work_items: [A, B]" in text
        # Defaults the file leaves out are not added
        assert "is_completed" not in text
        assert "not_started" not in text
        assert ProjectFileParser().parse_file(path).snapshot() == store.snapshot()

    def test_removed_records_dropped(self, tmp_path: Path) -> None:
        """Test that edges removed from the store are removed from the file."""
        path = tmp_path / "project.yaml"
        path.write_text(COMMENTED_YAML)
        store = ProjectFileParser().parse_file(path)
        store.remove_dependency("A", "C")

        write_project_file(path, store)

        assert ProjectFileParser().parse_file(path).list_dependencies() == []
        assert "# Site build plan" in path.read_text()


COMMENTED_YAML = """\
# Site build plan
work_items:
  A: {duration_days: 2}  # foundation
  B:
    duration_days: 3
    status: completed
  C: {}

dependencies:
  - {predecessor: A, successor: C}  # pour before framing

milestones:
  - id: 1
    title: Dried in
    target_date: 2026-03-25
    work_items: [A]
"""
