"""Continuous re-application of a priority class."""

import time
from typing import Callable

from pyrenice.distributor import PriorityDistributor
from pyrenice.matcher import ProcessResolver
from pyrenice.models import DEFAULT_WATCH_INTERVAL_SECONDS, PriorityClass, RunOptions
from pyrenice.scale import class_for
from pyrenice.status import StatusLog

MIN_INTERVAL_SECONDS = 1


class WatchLoop:
    """
    Re-resolves targets and distributes the target priority every interval.

    Runs until a round fails or the process is interrupted. Sleeping between
    rounds is the only place the loop waits.
    """

    def __init__(
        self,
        resolver: ProcessResolver,
        distributor: PriorityDistributor,
        status_log: StatusLog,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the WatchLoop.

        Args:
            resolver: Turns pids and patterns into the ids for a round.
            distributor: Applies the priority to those ids.
            status_log: Where the banner and round outcomes are reported.
            sleep: Called with the interval between rounds.
        """
        self._resolver = resolver
        self._distributor = distributor
        self._status_log = status_log
        self._sleep = sleep
        self._rounds = 0

    @property
    def rounds(self) -> int:
        """Number of rounds started so far."""
        return self._rounds

    def run(self, options: RunOptions) -> int:
        """Loop until a round fails; returns the exit code."""
        target_class = class_for(options.niceness)
        interval = max(MIN_INTERVAL_SECONDS, options.interval or DEFAULT_WATCH_INTERVAL_SECONDS)

        while True:
            if self._rounds == 0:
                self._status_log.log(self._banner(options, target_class, interval))
            self._rounds += 1

            ids = self._resolver.resolve_ids(options.pids, options.patterns)
            if not ids:
                self._status_log.status("no matching process ids found")

            failed = self._distributor.distribute_once(
                ids, target_class, dummy=options.dummy, verbose=options.verbose
            )
            if failed:
                self._status_log.error("one or more processes could not be updated; stopping")
                return 1

            self._sleep(interval)

    @staticmethod
    def _banner(options: RunOptions, target_class: PriorityClass, interval: int) -> str:
        if options.dummy:
            return f"watching processes every {interval}s (report only)"
        return f"watching processes every {interval}s (renice to {target_class})"
