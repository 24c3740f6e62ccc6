"""Exceptions raised by pyrenice."""


class InvalidArgument(ValueError):
    """A command line value could not be used (bad integer, unknown flag, ...)."""


class InvalidNiceness(InvalidArgument):
    """A niceness value or name outside the supported scale."""


class ProcessUnavailable(Exception):
    """A process vanished or refused access while being inspected or updated."""

    def __init__(self, pid: int, message: str) -> None:
        super().__init__(message)
        self.pid = pid
        self.message = message
