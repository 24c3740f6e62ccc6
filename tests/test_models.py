"""Tests for pyrenice data models."""

from pathlib import Path

import pytest

from pyrenice.context import RunContext
from pyrenice.models import MatchResult, PriorityClass, RunOptions


def test_priority_class_order():
    """Test classes are declared from most to least favored."""
    assert [str(c) for c in PriorityClass] == [
        "RealTime",
        "High",
        "AboveNormal",
        "Normal",
        "BelowNormal",
        "Idle",
    ]


def test_run_options_creation():
    """Test RunOptions dataclass creation."""
    options = RunOptions(
        niceness=10,
        pids=(1, 2),
        patterns=("chrome",),
        watch=True,
        interval=3,
        dummy=True,
        verbose=True,
        log_file=Path("renice.log"),
    )

    assert options.niceness == 10
    assert options.pids == (1, 2)
    assert options.patterns == ("chrome",)
    assert options.interval == 3
    assert options.log_file == Path("renice.log")
    assert options.has_targets


def test_run_options_without_targets():
    """Test has_targets is false without pids or patterns."""
    assert not RunOptions(niceness=0).has_targets


def test_run_options_is_frozen():
    """Test that RunOptions is immutable (frozen)."""
    options = RunOptions()

    with pytest.raises(AttributeError):
        options.niceness = 5


def test_run_options_uses_slots():
    """Test that RunOptions uses __slots__."""
    assert not hasattr(RunOptions(), "__dict__")


def test_match_result_uses_slots():
    """Test that MatchResult uses __slots__."""
    result = MatchResult(pid=1, name="a", window_title="", command_line="a", is_match=True)

    assert not hasattr(result, "__dict__")


def test_run_context_is_not_shared():
    """Test each RunContext owns its own caches."""
    first = RunContext()
    second = RunContext()
    first.last_observed[1] = PriorityClass.IDLE

    assert second.last_observed == {}
    assert first.command_lines is not second.command_lines
