"""State shared by the rounds of one run."""

import threading
from dataclasses import dataclass, field
from typing import Callable

from pyrenice.models import PriorityClass


class CommandLineCache:
    """
    Thread-safe pid -> command line cache.

    Lookups run outside the lock, so two threads may both load the same pid;
    the first stored value wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[int, str] = {}

    def get_or_load(self, pid: int, loader: Callable[[], str]) -> str:
        with self._lock:
            cached = self._entries.get(pid)
        if cached is not None:
            return cached

        value = loader()
        with self._lock:
            return self._entries.setdefault(pid, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(slots=True)
class RunContext:
    """Caches owned by a single run, passed to the resolver and distributor."""

    command_lines: CommandLineCache = field(default_factory=CommandLineCache)
    # Never pruned; grows with the number of distinct pids seen in dummy mode.
    last_observed: dict[int, PriorityClass] = field(default_factory=dict)
