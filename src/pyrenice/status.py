"""Console and log-file reporting with an overwritable status line."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, TextIO

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class StatusLog:
    """
    Reports progress without flooding the terminal.

    log() writes a permanent line, status() rewrites the current line in place
    so repeated "still the same" reports collapse into one. Every line, status
    or not, is appended to the log file when one is configured.
    """

    def __init__(
        self,
        log_file: Path | None = None,
        verbose: bool = False,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the StatusLog.

        Args:
            log_file: Optional file every line is appended to.
            verbose: Whether verbose_log() produces output.
            stdout: Stream for log and status lines. Default sys.stdout.
            stderr: Stream for errors. Default sys.stderr.
            clock: Source of timestamps.
        """
        self._log_file = log_file
        self._verbose = verbose
        self._stdout = stdout
        self._stderr = stderr
        self._clock = clock
        self._status_length = 0
        self._status_open = False

    @property
    def status_open(self) -> bool:
        """True while the last console output is an unterminated status line."""
        return self._status_open

    def log(self, message: str) -> None:
        """Write a permanent timestamped line."""
        self.after_status()
        line = self._stamp(message)
        self._write(self._out(), line + "\n")
        self._append(line)

    def verbose_log(self, message: str) -> None:
        """log() that only produces output in verbose mode."""
        if self._verbose:
            self.log(message)

    def status(self, message: str) -> None:
        """Overwrite the current console line with a timestamped message."""
        line = self._stamp(message)
        out = self._out()
        if self._status_open:
            self._write(out, "\r" + " " * self._status_length)
        self._write(out, "\r" + line)
        self._status_length = len(line)
        self._status_open = True
        self._append(line)

    def after_status(self) -> None:
        """Terminate an open status line so the next output starts fresh."""
        if not self._status_open:
            return
        self._write(self._out(), "\n")
        self._status_open = False
        self._status_length = 0

    def error(self, message: str) -> None:
        """Write a permanent timestamped line to stderr."""
        self.after_status()
        line = self._stamp(message)
        err = self._stderr if self._stderr is not None else sys.stderr
        self._write(err, line + "\n")
        self._append(line)

    def _out(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def _stamp(self, message: str) -> str:
        # command lines decoded with surrogateescape carry lone surrogates
        message = message.encode("utf-8", "backslashreplace").decode("utf-8")
        return f"{self._clock().strftime(TIMESTAMP_FORMAT)} {message}"

    @staticmethod
    def _write(stream: TextIO, text: str) -> None:
        try:
            stream.write(text)
        except UnicodeEncodeError:
            encoding = getattr(stream, "encoding", None) or "ascii"
            stream.write(text.encode(encoding, "backslashreplace").decode(encoding))
        stream.flush()

    def _append(self, line: str) -> None:
        if self._log_file is None:
            return
        try:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            with self._log_file.open("a", encoding="utf-8", errors="backslashreplace") as handle:
                handle.write(line + "\n")
        except OSError as exc:
            self.after_status()
            self._write(self._out(), f"unable to write to log file {self._log_file}: {exc}\n")
