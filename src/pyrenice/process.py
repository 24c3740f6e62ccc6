"""Access to live OS processes through psutil."""

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Protocol

import psutil

from pyrenice.errors import ProcessUnavailable
from pyrenice.models import PriorityClass
from pyrenice.scale import MAX_NICENESS, MIN_NICENESS, class_for, niceness_for

logger = logging.getLogger(__name__)

_PSUTIL_ERRORS = (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess)


class ProcessHandle(Protocol):
    """The small slice of a process that pyrenice reads and writes."""

    pid: int

    def name(self) -> str: ...

    def window_title(self) -> str: ...

    def command_line(self) -> str: ...

    def priority(self) -> PriorityClass: ...

    def set_priority(self, priority_class: PriorityClass) -> None: ...


class ProcessSource(Protocol):
    """Enumerates processes and looks them up by id."""

    def list_processes(self) -> list[ProcessHandle]: ...

    def get(self, pid: int) -> ProcessHandle: ...


@contextmanager
def _translate_errors(pid: int) -> Iterator[None]:
    """Re-raise psutil lookup failures as ProcessUnavailable."""
    try:
        yield
    except _PSUTIL_ERRORS as exc:
        raise ProcessUnavailable(pid, str(exc) or type(exc).__name__) from exc


def _windows_priorities() -> dict[PriorityClass, int]:
    return {
        PriorityClass.REALTIME: psutil.REALTIME_PRIORITY_CLASS,
        PriorityClass.HIGH: psutil.HIGH_PRIORITY_CLASS,
        PriorityClass.ABOVE_NORMAL: psutil.ABOVE_NORMAL_PRIORITY_CLASS,
        PriorityClass.NORMAL: psutil.NORMAL_PRIORITY_CLASS,
        PriorityClass.BELOW_NORMAL: psutil.BELOW_NORMAL_PRIORITY_CLASS,
        PriorityClass.IDLE: psutil.IDLE_PRIORITY_CLASS,
    }


class PsutilProcessHandle:
    """
    ProcessHandle backed by psutil.Process.

    On Windows priority classes map directly onto the OS priority classes.
    Elsewhere a class is written as its representative niceness and read back
    by quantizing the current niceness.
    """

    def __init__(self, process: psutil.Process) -> None:
        self._process = process
        self.pid = process.pid

    def name(self) -> str:
        with _translate_errors(self.pid):
            return self._process.name() or ""

    def window_title(self) -> str:
        # psutil does not expose window titles
        return ""

    def command_line(self) -> str:
        with _translate_errors(self.pid):
            return " ".join(self._process.cmdline())

    def priority(self) -> PriorityClass:
        with _translate_errors(self.pid):
            value = self._process.nice()

        if psutil.WINDOWS:
            for priority_class, os_value in _windows_priorities().items():
                if os_value == value:
                    return priority_class
            raise ProcessUnavailable(self.pid, f"unknown priority class {value!r}")

        # POSIX allows -20, which this scale folds into RealTime
        return class_for(min(max(int(value), MIN_NICENESS), MAX_NICENESS))

    def set_priority(self, priority_class: PriorityClass) -> None:
        if psutil.WINDOWS:
            value = _windows_priorities()[priority_class]
        else:
            value = niceness_for(priority_class)

        with _translate_errors(self.pid):
            self._process.nice(value)


class PsutilProcessSource:
    """
    ProcessSource over psutil.process_iter().

    Handles from the most recent listing are reused by get() so a round that
    lists and then updates processes works on the same process objects.
    """

    def __init__(self) -> None:
        self._known: dict[int, PsutilProcessHandle] = {}

    def list_processes(self) -> list[ProcessHandle]:
        handles = [PsutilProcessHandle(proc) for proc in psutil.process_iter()]
        self._known = {handle.pid: handle for handle in handles}
        logger.debug("listed %d processes", len(handles))
        return list(handles)

    def get(self, pid: int) -> ProcessHandle:
        known = self._known.get(pid)
        if known is not None:
            return known
        with _translate_errors(pid):
            return PsutilProcessHandle(psutil.Process(pid))


def current_pid() -> int:
    """Return the id of the running interpreter."""
    return os.getpid()
