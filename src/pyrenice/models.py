"""Data models for pyrenice."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

DEFAULT_WATCH_INTERVAL_SECONDS = 5


class PriorityClass(Enum):
    """Scheduling priority classes, ordered from most to least favored."""

    REALTIME = "RealTime"
    HIGH = "High"
    ABOVE_NORMAL = "AboveNormal"
    NORMAL = "Normal"
    BELOW_NORMAL = "BelowNormal"
    IDLE = "Idle"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True, frozen=True)
class RunOptions:
    """Immutable configuration for a single run."""

    niceness: int | None = None
    pids: tuple[int, ...] = ()
    patterns: tuple[str, ...] = ()
    watch: bool = False
    interval: int = DEFAULT_WATCH_INTERVAL_SECONDS
    dummy: bool = False
    verbose: bool = False
    log_file: Path | None = None
    show_help: bool = False

    @property
    def has_targets(self) -> bool:
        """True when at least one pid or match pattern was given."""
        return bool(self.pids or self.patterns)


@dataclass(slots=True, frozen=True)
class MatchResult:
    """Outcome of testing one process against a pattern."""

    pid: int
    name: str
    window_title: str
    command_line: str
    is_match: bool
