"""Tests for the lintel CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from lintel.cli import app
from lintel.parser import ProjectFileParser
from tests.conftest import d

runner = CliRunner()

CYCLIC_YAML = """\
work_items:
  A: {duration_days: 2}
  B: {duration_days: 2}
  C: {duration_days: 2}
dependencies:
  - {predecessor: A, successor: B}
  - {predecessor: B, successor: A}
"""


def _start_date(path: Path, work_item_id: str) -> object:
    work_item = ProjectFileParser().parse_file(path).get_work_item(work_item_id)
    assert work_item is not None
    return work_item.start_date


class TestScheduleCommand:
    """Test the schedule command."""

    def test_text_output(self, project_file: Path) -> None:
        """Test the human-readable schedule listing."""
        result = runner.invoke(app, ["schedule", str(project_file), "--today", "2026-03-01"])

        assert result.exit_code == 0
        assert "Schedule Results (full mode)" in result.output
        assert "Framing (framing)" in result.output
        assert "Start:  2026-03-11" in result.output
        assert "Critical path: foundation -> framing -> roofing" in result.output

    def test_json_output(self, project_file: Path) -> None:
        """Test the camelCase JSON form."""
        result = runner.invoke(
            app, ["schedule", str(project_file), "--today", "2026-03-01", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["criticalPath"] == ["foundation", "framing", "roofing"]
        assert data["warnings"] == []
        roofing = next(i for i in data["scheduledItems"] if i["workItemId"] == "roofing")
        # Two days of lag after framing ends on 03-15
        assert roofing["scheduledStartDate"] == "2026-03-18"
        assert roofing["scheduledEndDate"] == "2026-03-20"
        assert roofing["isCritical"]
        landscaping = next(i for i in data["scheduledItems"] if i["workItemId"] == "landscaping")
        assert landscaping["totalFloat"] == 18

    def test_preview_mode(self, project_file: Path) -> None:
        """Test that preview mode skips the critical path."""
        result = runner.invoke(
            app, ["schedule", str(project_file), "--today", "2026-03-01", "--mode", "preview"]
        )

        assert result.exit_code == 0
        assert "Schedule Results (preview mode)" in result.output
        assert "Critical path:" not in result.output
        assert "Float:" not in result.output

    def test_write(self, project_file: Path) -> None:
        """Test writing scheduled dates back to the file."""
        result = runner.invoke(
            app, ["schedule", str(project_file), "--today", "2026-03-01", "--write"]
        )

        assert result.exit_code == 0
        assert f"Updated 4 work item(s) in {project_file}" in result.output
        assert _start_date(project_file, "framing") == d("2026-03-11")
        assert _start_date(project_file, "landscaping") == d("2026-03-01")

        rerun = runner.invoke(
            app, ["schedule", str(project_file), "--today", "2026-03-01", "--write"]
        )
        assert "Updated 0 work item(s)" in rerun.output

    def test_cycle_not_written(self, tmp_path: Path) -> None:
        """Test that a cyclic project is reported and left unchanged."""
        path = tmp_path / "project.yaml"
        path.write_text(CYCLIC_YAML)

        result = runner.invoke(app, ["schedule", str(path), "--today", "2026-03-01", "--write"])

        assert result.exit_code == 0
        assert "Circular dependency among: A, B" in result.output
        assert "Not writing dates" in result.output
        assert path.read_text() == CYCLIC_YAML

    def test_cascade_requires_anchor(self, project_file: Path) -> None:
        """Test that cascade mode without an anchor fails."""
        result = runner.invoke(app, ["schedule", str(project_file), "--mode", "cascade"])

        assert result.exit_code == 1
        assert "anchor_work_item_id is required" in result.output

    def test_invalid_mode(self, project_file: Path) -> None:
        """Test that unknown modes are rejected."""
        result = runner.invoke(app, ["schedule", str(project_file), "--mode", "fastest"])

        assert result.exit_code == 1
        assert "Invalid mode 'fastest'" in result.output

    def test_invalid_today(self, project_file: Path) -> None:
        """Test that malformed dates are rejected."""
        result = runner.invoke(app, ["schedule", str(project_file), "--today", "03/01/2026"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing project file is reported."""
        result = runner.invoke(app, ["schedule", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestTimelineCommand:
    """Test the timeline command."""

    def test_text_output(self, project_file: Path) -> None:
        """Test the timeline summary."""
        result = runner.invoke(app, ["timeline", str(project_file), "--today", "2026-03-01"])

        assert result.exit_code == 0
        assert "Date range: 2026-03-01 .. 2026-03-01" in result.output
        assert "foundation: 2026-03-01 .. None [not_started]" in result.output
        assert "1 Dried in: target 2026-03-25, effective 2026-03-25" in result.output
        assert "Critical path: foundation -> framing -> roofing" in result.output

    def test_json_output(self, project_file: Path) -> None:
        """Test the JSON timeline."""
        result = runner.invoke(
            app, ["timeline", str(project_file), "--today", "2026-03-01", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["criticalPath"] == ["foundation", "framing", "roofing"]
        assert [w["id"] for w in data["workItems"]] == ["foundation"]

    def test_cycle(self, tmp_path: Path) -> None:
        """Test that the critical path is reported unavailable on a cycle."""
        path = tmp_path / "project.yaml"
        path.write_text(CYCLIC_YAML)

        result = runner.invoke(app, ["timeline", str(path), "--today", "2026-03-01"])

        assert result.exit_code == 0
        assert "Critical path unavailable: cycle among A, B" in result.output


class TestCheckCommand:
    """Test the check command."""

    def test_valid(self, project_file: Path) -> None:
        """Test a clean project."""
        result = runner.invoke(app, ["check", str(project_file)])

        assert result.exit_code == 0
        assert "OK: 4 work items, 2 dependencies, 1 milestones" in result.output

    def test_cycle(self, tmp_path: Path) -> None:
        """Test that cycles fail the check."""
        path = tmp_path / "project.yaml"
        path.write_text(CYCLIC_YAML)

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == 1
        assert "Circular dependency among: A, B" in result.output

    def test_bad_reference(self, tmp_path: Path) -> None:
        """Test that load validation errors fail the check."""
        path = tmp_path / "project.yaml"
        path.write_text("work_items:\n  A: {}\ndependencies:\n  - {predecessor: A, successor: Z}\n")

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestDependencyCommands:
    """Test adding and removing dependencies."""

    def test_add(self, project_file: Path) -> None:
        """Test adding an edge persists it."""
        result = runner.invoke(
            app,
            [
                "add-dependency",
                str(project_file),
                "landscaping",
                "roofing",
                "--type",
                "start_to_start",
                "--lag",
                "2",
            ],
        )

        assert result.exit_code == 0
        assert "Added dependency roofing -> landscaping (start_to_start, +2d)" in result.output
        store = ProjectFileParser().parse_file(project_file)
        assert len(store.list_dependencies()) == 3

    def test_add_cycle_rejected(self, project_file: Path) -> None:
        """Test that a cycle-closing edge is refused and nothing is written."""
        before = project_file.read_text()

        result = runner.invoke(app, ["add-dependency", str(project_file), "foundation", "roofing"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "circular dependency" in result.output
        assert project_file.read_text() == before

    def test_add_duplicate_rejected(self, project_file: Path) -> None:
        """Test that an existing pair is refused."""
        result = runner.invoke(
            app, ["add-dependency", str(project_file), "framing", "foundation"]
        )

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_add_invalid_type(self, project_file: Path) -> None:
        """Test that unknown dependency types are refused."""
        result = runner.invoke(
            app,
            ["add-dependency", str(project_file), "landscaping", "roofing", "--type", "soon"],
        )

        assert result.exit_code == 1
        assert "Valid types" in result.output

    def test_remove(self, project_file: Path) -> None:
        """Test removing an edge."""
        result = runner.invoke(
            app, ["remove-dependency", str(project_file), "framing", "foundation"]
        )

        assert result.exit_code == 0
        assert "Removed dependency foundation -> framing" in result.output
        store = ProjectFileParser().parse_file(project_file)
        assert len(store.list_dependencies()) == 1

    def test_remove_missing(self, project_file: Path) -> None:
        """Test removing an edge that does not exist."""
        result = runner.invoke(
            app, ["remove-dependency", str(project_file), "landscaping", "roofing"]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestMilestoneCommands:
    """Test milestone link commands."""

    def test_link_contributor_reschedules(self, project_file: Path) -> None:
        """Test that linking writes the link and re-scheduled dates."""
        result = runner.invoke(
            app,
            ["link-milestone", str(project_file), "1", "framing", "--today", "2026-03-01"],
        )

        assert result.exit_code == 0
        assert "'framing' is now a contributor to milestone 1" in result.output
        store = ProjectFileParser().parse_file(project_file)
        milestone = store.get_milestone(1)
        assert milestone is not None
        assert milestone.work_item_ids == ["roofing", "framing"]
        assert _start_date(project_file, "framing") == d("2026-03-11")

    def test_link_dependent(self, project_file: Path) -> None:
        """Test that a dependent is gated on the milestone's target date."""
        result = runner.invoke(
            app,
            [
                "link-milestone",
                str(project_file),
                "1",
                "landscaping",
                "--dependent",
                "--today",
                "2026-03-01",
            ],
        )

        assert result.exit_code == 0
        assert "'landscaping' is now a dependent of milestone 1" in result.output
        assert _start_date(project_file, "landscaping") == d("2026-03-25")

    def test_link_conflict(self, project_file: Path) -> None:
        """Test that a contributor cannot also be a dependent."""
        result = runner.invoke(
            app, ["link-milestone", str(project_file), "1", "roofing", "--dependent"]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_unlink(self, project_file: Path) -> None:
        """Test removing a contributor."""
        result = runner.invoke(
            app,
            ["unlink-milestone", str(project_file), "1", "roofing", "--today", "2026-03-01"],
        )

        assert result.exit_code == 0
        assert "'roofing' is no longer a contributor to milestone 1" in result.output
        milestone = ProjectFileParser().parse_file(project_file).get_milestone(1)
        assert milestone is not None
        assert milestone.work_item_ids == []

    def test_unlink_unknown_milestone(self, project_file: Path) -> None:
        """Test that unknown milestones are reported."""
        result = runner.invoke(app, ["unlink-milestone", str(project_file), "7", "roofing"])

        assert result.exit_code == 1
        assert "Milestone 7" in result.output


def test_verbose_logs_write_back(project_file: Path) -> None:
    """Test that -v shows each written item."""
    result = runner.invoke(
        app, ["-v", "1", "schedule", str(project_file), "--today", "2026-03-01", "--write"]
    )

    assert result.exit_code == 0
    assert "framing: 2026-03-11 .. 2026-03-15" in result.output


def test_add_dependency_keeps_comments(tmp_path: Path) -> None:
    """Test that mutating commands keep the user's comments and layout."""
    path = tmp_path / "project.yaml"
    path.write_text(
        "# Site build plan\n"
        "work_items:\n"
        "  A: {duration_days: 2}  # foundation\n"
        "  B: {duration_days: 3}\n"
    )

    result = runner.invoke(app, ["add-dependency", str(path), "B", "A"])

    assert result.exit_code == 0
    text = path.read_text()
    assert "# Site build plan" in text
    assert "A: {duration_days: 2}  # foundation" in text
    assert "status" not in text
    store = ProjectFileParser().parse_file(path)
    assert [str(dep) for dep in store.list_dependencies()] == ["A -> B (finish_to_start)"]


def test_global_today_option(project_file: Path) -> None:
    """Test that --today before the command sets the reference date for it."""
    result = runner.invoke(app, ["--today", "2026-04-01", "schedule", str(project_file), "--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    landscaping = next(i for i in data["scheduledItems"] if i["workItemId"] == "landscaping")
    assert landscaping["scheduledStartDate"] == "2026-04-01"


def test_check_verbosity(project_file: Path) -> None:
    """Test the extra graph detail printed by check at higher verbosity."""
    quiet = runner.invoke(app, ["check", str(project_file)])
    changes = runner.invoke(app, ["-v", "1", "check", str(project_file)])
    checks = runner.invoke(app, ["-v", "2", "check", str(project_file)])

    assert "Scheduling order" not in quiet.output
    assert "Scheduling order: foundation -> framing -> roofing -> landscaping" in changes.output
    assert "roofing <- framing" not in changes.output
    assert "roofing <- framing" in checks.output
    assert "landscaping <- (no predecessors)" in checks.output
