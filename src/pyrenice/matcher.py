"""Turning match patterns into process ids."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from pyrenice.context import RunContext
from pyrenice.errors import InvalidArgument
from pyrenice.models import MatchResult
from pyrenice.process import ProcessHandle, ProcessSource, current_pid
from pyrenice.status import StatusLog

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 32


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a case-insensitive match pattern."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise InvalidArgument(f"-m requires a valid regular expression (got {pattern}: {exc})") from None


class ProcessMatcher:
    """
    Finds processes whose window title, name or command line match a pattern.

    Each candidate is evaluated in its own pool task because reading a command
    line can be slow. A process that cannot be inspected is not a match.
    """

    def __init__(
        self,
        context: RunContext,
        status_log: StatusLog,
        own_pid: int | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._context = context
        self._status_log = status_log
        self._own_pid = current_pid() if own_pid is None else own_pid
        self._max_workers = max(1, max_workers)

    def find_matching(self, pattern: str, processes: Sequence[ProcessHandle]) -> list[int]:
        """Return ids of the processes matching pattern, excluding our own."""
        self._status_log.verbose_log(f"Attempting to match processes with '{pattern}'")
        regex = compile_pattern(pattern)

        candidates = [proc for proc in processes if proc.pid != self._own_pid]
        if not candidates:
            return []

        workers = min(len(candidates), self._max_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ProcessMatcher") as pool:
            futures = [pool.submit(self._evaluate, regex, proc) for proc in candidates]
            results = [future.result() for future in futures]

        matched: list[int] = []
        for result in results:
            if result is None or not result.is_match:
                continue
            if result.window_title.strip():
                self._status_log.verbose_log(f"match: {result.command_line} ({result.window_title})")
            else:
                self._status_log.verbose_log(f"match: {result.command_line}")
            matched.append(result.pid)
        return matched

    def _evaluate(self, regex: re.Pattern[str], proc: ProcessHandle) -> MatchResult | None:
        try:
            command_line = self._context.command_lines.get_or_load(
                proc.pid, lambda: self._read_command_line(proc)
            )
            window_title = proc.window_title() or ""
            name = proc.name() or ""
            return MatchResult(
                pid=proc.pid,
                name=name,
                window_title=window_title,
                command_line=command_line,
                is_match=any(regex.search(text) for text in (window_title, name, command_line)),
            )
        except Exception as exc:
            logger.debug("skipping process %s: %s", proc.pid, exc)
            return None

    @staticmethod
    def _read_command_line(proc: ProcessHandle) -> str:
        try:
            return proc.command_line() or ""
        except Exception as exc:
            logger.debug("no command line for process %s: %s", proc.pid, exc)
            return ""


class ProcessResolver:
    """Combines explicit ids with pattern matches for one round."""

    def __init__(self, source: ProcessSource, matcher: ProcessMatcher, context: RunContext) -> None:
        self._source = source
        self._matcher = matcher
        self._context = context

    def resolve_ids(self, explicit_ids: Iterable[int], patterns: Sequence[str]) -> list[int]:
        """
        Return explicit ids followed by the matches of every pattern, in order.

        Duplicates are kept; applying a priority twice is harmless.
        """
        ids = list(explicit_ids)
        if not patterns:
            return ids

        # pids can be recycled between rounds
        self._context.command_lines.clear()
        processes = self._source.list_processes()
        for pattern in patterns:
            ids.extend(self._matcher.find_matching(pattern, processes))
        return ids
