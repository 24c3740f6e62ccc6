"""pyrenice - command line entry point."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, NoReturn, Sequence

from pyrenice.context import RunContext
from pyrenice.distributor import PriorityDistributor
from pyrenice.errors import InvalidArgument
from pyrenice.matcher import ProcessMatcher, ProcessResolver, compile_pattern
from pyrenice.models import DEFAULT_WATCH_INTERVAL_SECONDS, RunOptions
from pyrenice.process import ProcessSource, PsutilProcessSource
from pyrenice.scale import class_for, parse_niceness
from pyrenice.status import StatusLog
from pyrenice.watch import MIN_INTERVAL_SECONDS, WatchLoop

logger = logging.getLogger(__name__)

EPILOG = """\
niceness runs from 19 (lowest) to -19 (highest) and is mapped onto priority classes:
  -19         RealTime      (realtime, real-time, rt)
  -18 .. -10  High          (high)
   -9 .. -1   AboveNormal   (abovenormal, above-normal, above)
    0         Normal        (normal)
    1 .. 10   BelowNormal   (belownormal, below-normal, below)
   11 .. 19   Idle          (idle)
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise InvalidArgument(message)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = _ArgumentParser(
        prog="pyrenice",
        description="Set the scheduling priority of running processes.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="show this help and exit")
    parser.add_argument(
        "-w", "--watch", action="store_true", help="keep re-applying the priority every interval"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="report matches and priority changes"
    )
    parser.add_argument(
        "-d", "--dummy", action="store_true", help="only report current priorities, change nothing"
    )
    parser.add_argument(
        "-m",
        "--match",
        action="append",
        default=[],
        metavar="PATTERN",
        help="case-insensitive regex matched against process title, name and command line (repeatable)",
    )
    parser.add_argument(
        "-i",
        "--interval",
        metavar="SECONDS",
        help=f"watch interval in seconds (default {DEFAULT_WATCH_INTERVAL_SECONDS})",
    )
    parser.add_argument("-l", "--logfile", metavar="PATH", help="also append all output to PATH")
    parser.add_argument(
        "-n", "--nice", nargs="+", metavar="NICENESS", help="target niceness, number or name"
    )
    parser.add_argument(
        "-p",
        "--pid",
        action="extend",
        nargs="+",
        default=[],
        metavar="PID",
        help="process id to renice (repeatable)",
    )
    return parser


def parse_int(flag: str, token: str) -> int:
    """Parse an integer flag value."""
    try:
        return int(token)
    except ValueError:
        raise InvalidArgument(f"{flag} requires an integer argument (got {token})") from None


def parse_args(argv: Sequence[str]) -> RunOptions:
    """
    Parse command line arguments into RunOptions.

    Raises:
        InvalidArgument: On unknown flags, missing values, bad integers,
            bad niceness or bad patterns.
    """
    argv = list(argv)
    # help wins over anything else on the line, valid or not
    if "-h" in argv or "--help" in argv:
        return RunOptions(show_help=True)

    args = build_parser().parse_args(argv)
    if args.help:
        return RunOptions(show_help=True)

    # the last niceness given wins
    niceness = parse_niceness(args.nice[-1]) if args.nice else None

    pids = tuple(parse_int("-p", token) for token in args.pid)
    for pid in pids:
        if pid < 0:
            raise InvalidArgument(f"-p requires a process id (got {pid})")

    interval = DEFAULT_WATCH_INTERVAL_SECONDS
    if args.interval is not None:
        interval = parse_int("-i", args.interval)
        if interval < MIN_INTERVAL_SECONDS:
            raise InvalidArgument(f"-i requires at least {MIN_INTERVAL_SECONDS} second (got {interval})")

    for pattern in args.match:
        compile_pattern(pattern)

    return RunOptions(
        niceness=niceness,
        pids=pids,
        patterns=tuple(args.match),
        watch=args.watch,
        interval=interval,
        dummy=args.dummy,
        verbose=args.verbose,
        log_file=Path(args.logfile) if args.logfile else None,
    )


def run(
    options: RunOptions,
    source: ProcessSource | None = None,
    status_log: StatusLog | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Carry out a parsed command line; returns the exit code."""
    if status_log is None:
        status_log = StatusLog(options.log_file, verbose=options.verbose)

    if options.niceness is None:
        status_log.error("niceness not specified (use -n)")
        return 1
    if not options.has_targets:
        status_log.error("no process ids or match patterns specified (use -p or -m)")
        return 1

    try:
        target_class = class_for(options.niceness)
    except InvalidArgument as exc:
        status_log.error(str(exc))
        return 1

    if source is None:
        source = PsutilProcessSource()
    context = RunContext()
    resolver = ProcessResolver(source, ProcessMatcher(context, status_log), context)
    distributor = PriorityDistributor(source, context, status_log)

    try:
        if options.watch:
            return WatchLoop(resolver, distributor, status_log, sleep=sleep).run(options)

        ids = resolver.resolve_ids(options.pids, options.patterns)
        if not ids:
            status_log.log("no matching process ids found")
            return 0

        failed = distributor.distribute_once(
            ids, target_class, dummy=options.dummy, verbose=options.verbose
        )
        return 1 if failed else 0
    finally:
        status_log.after_status()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the pyrenice command."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    if argv is None:
        argv = sys.argv[1:]

    try:
        options = parse_args(argv)
    except InvalidArgument as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if options.show_help:
        build_parser().print_help()
        return 0

    try:
        return run(options)
    except InvalidArgument as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.debug("interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
