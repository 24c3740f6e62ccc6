"""Applying (or reporting) a priority class across resolved process ids."""

import logging
from typing import Iterable

from pyrenice.context import RunContext
from pyrenice.models import PriorityClass
from pyrenice.process import ProcessHandle, ProcessSource
from pyrenice.status import StatusLog

logger = logging.getLogger(__name__)


class PriorityDistributor:
    """
    Applies a target priority class to processes one id at a time.

    A failure on one id is reported and counted but never stops the round.
    In dummy mode nothing is changed; the current class of each process is
    reported instead, with transitions between rounds called out.
    """

    def __init__(self, source: ProcessSource, context: RunContext, status_log: StatusLog) -> None:
        self._source = source
        self._context = context
        self._status_log = status_log

    def distribute_once(
        self,
        resolved_ids: Iterable[int],
        target_class: PriorityClass,
        dummy: bool = False,
        verbose: bool = False,
    ) -> bool:
        """
        Run one round over resolved_ids.

        Returns:
            True if at least one id could not be processed.
        """
        failed = False
        for pid in resolved_ids:
            try:
                process = self._source.get(pid)
                if dummy:
                    self._report(process)
                else:
                    self._apply(process, target_class, verbose)
            except Exception as exc:
                message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
                self._status_log.error(f"Can't set priority on {pid}: {message}")
                logger.debug("process %s failed", pid, exc_info=True)
                failed = True
        return failed

    def _report(self, process: ProcessHandle) -> None:
        current = process.priority()
        previous = self._context.last_observed.get(process.pid)

        if previous is None:
            self._status_log.status(f"{process.pid} has priority {current}")
        elif previous != current:
            self._status_log.log(f"{process.pid} priority changed from {previous} to {current}")
        else:
            self._status_log.status(f"{process.pid} priority unchanged ({current})")

        self._context.last_observed[process.pid] = current

    def _apply(self, process: ProcessHandle, target_class: PriorityClass, verbose: bool) -> None:
        current = process.priority()
        if current == target_class:
            if verbose:
                self._status_log.status(f"{process.pid} already has priority {target_class}")
            return

        process.set_priority(target_class)
        if verbose:
            self._status_log.log(f"{process.pid} priority {current} -> {target_class}")
