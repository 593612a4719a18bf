"""Tests for scheduler debug output at different verbosity levels."""

import logging
from datetime import date
from io import StringIO

from lintel.dependencies import DependencyService
from lintel.logger import (
    CHANGES_LEVEL,
    changes_enabled,
    checks_enabled,
    debug_enabled,
    get_logger,
    reset_logger,
    setup_logger,
)
from lintel.scheduler import schedule
from lintel.store import InMemoryProjectStore
from tests.conftest import TODAY, chain, wi


def _run(verbosity: int) -> str:
    output_stream = StringIO()
    setup_logger(verbosity, stream=output_stream)

    try:
        schedule([wi("A", 2, start="2026-03-01"), wi("B", 3)], chain("A", "B"), today=TODAY)
        output = output_stream.getvalue()
    finally:
        reset_logger()

    return output


def test_verbosity_0_silent() -> None:
    """Test that verbosity 0 produces no output."""
    assert _run(0) == ""


def test_verbosity_2_shows_constraint_checks() -> None:
    """Test that verbosity 2 shows per-item earliest dates and the critical path."""
    output = _run(2)

    assert "A: earliest 2026-03-01 .. 2026-03-02" in output
    assert "B: earliest 2026-03-03 .. 2026-03-05" in output
    assert "Critical path: A -> B" in output
    # Backward pass details are debug only
    assert "latest" not in output


def test_verbosity_3_shows_backward_pass() -> None:
    """Test that verbosity 3 adds the backward pass."""
    output = _run(3)

    assert "CPM full: 2 of 2 items ordered" in output
    assert "B: latest 2026-03-03 .. 2026-03-05" in output


def test_verbosity_1_shows_graph_changes() -> None:
    """Test that dependency mutations are logged at verbosity 1."""
    store = InMemoryProjectStore([wi("A"), wi("B")])
    output_stream = StringIO()
    setup_logger(1, stream=output_stream)

    try:
        DependencyService(store).create_dependency("B", "A")
        output = output_stream.getvalue()
    finally:
        reset_logger()

    assert "Added dependency A -> B (finish_to_start)" in output
    assert "Critical path" not in output


def test_level_helpers() -> None:
    """Test the verbosity query helpers."""
    setup_logger(2, stream=StringIO())

    assert changes_enabled()
    assert checks_enabled()
    assert not debug_enabled()

    reset_logger()

    assert not changes_enabled()
    assert get_logger().level == logging.ERROR
    assert logging.getLevelName(CHANGES_LEVEL) == "CHANGES"


def test_date_change_messages() -> None:
    """Test the write-back message with and without previous dates."""
    output_stream = StringIO()
    setup_logger(1, stream=output_stream)

    try:
        logger = get_logger()
        logger.date_change("A", None, None, date(2026, 3, 1), date(2026, 3, 2))
        logger.date_change(
            "B", date(2026, 3, 1), date(2026, 3, 3), date(2026, 3, 4), date(2026, 3, 6)
        )
        output = output_stream.getvalue()
    finally:
        reset_logger()

    assert output.splitlines() == [
        "  A: 2026-03-01 .. 2026-03-02",
        "  B: 2026-03-01 .. 2026-03-03 -> 2026-03-04 .. 2026-03-06",
    ]


def test_date_change_silent_at_verbosity_0() -> None:
    """Test that write-back messages need verbosity 1."""
    output_stream = StringIO()
    setup_logger(0, stream=output_stream)

    try:
        get_logger().date_change("A", None, None, date(2026, 3, 1), date(2026, 3, 2))
        output = output_stream.getvalue()
    finally:
        reset_logger()

    assert output == ""
