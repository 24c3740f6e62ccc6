"""Tests for StatusLog."""

import io

from fakes import FIXED_TIME, make_status_log
from pyrenice.status import StatusLog

STAMP = "2024-01-02 03:04:05"


class TestConsole:
    """Tests for console output."""

    def test_log_writes_timestamped_line(self):
        """Test log() writes one permanent line."""
        status_log, stdout, _ = make_status_log()

        status_log.log("hello")

        assert stdout.getvalue() == f"{STAMP} hello\n"

    def test_status_overwrites_previous_line(self):
        """Test status() erases the previous status line before writing."""
        status_log, stdout, _ = make_status_log()

        status_log.status("a long status message")
        status_log.status("short")

        first = f"{STAMP} a long status message"
        assert stdout.getvalue() == f"\r{first}\r{' ' * len(first)}\r{STAMP} short"
        assert status_log.status_open

    def test_after_status_closes_open_line(self):
        """Test after_status() ends an open status line exactly once."""
        status_log, stdout, _ = make_status_log()

        status_log.status("working")
        status_log.after_status()
        status_log.after_status()

        assert stdout.getvalue() == f"\r{STAMP} working\n"
        assert not status_log.status_open

    def test_after_status_without_status_is_silent(self):
        """Test after_status() writes nothing when no status line is open."""
        status_log, stdout, _ = make_status_log()

        status_log.after_status()

        assert stdout.getvalue() == ""

    def test_log_after_status_starts_new_line(self):
        """Test log() does not collide with an open status line."""
        status_log, stdout, _ = make_status_log()

        status_log.status("working")
        status_log.log("done")

        assert stdout.getvalue() == f"\r{STAMP} working\n{STAMP} done\n"

    def test_error_goes_to_stderr(self):
        """Test error() writes to stderr and closes the status line."""
        status_log, stdout, stderr = make_status_log()

        status_log.status("working")
        status_log.error("broken")

        assert stdout.getvalue().endswith("\n")
        assert stderr.getvalue() == f"{STAMP} broken\n"

    def test_verbose_log(self):
        """Test verbose_log() only writes in verbose mode."""
        quiet, quiet_out, _ = make_status_log(verbose=False)
        loud, loud_out, _ = make_status_log(verbose=True)

        quiet.verbose_log("detail")
        loud.verbose_log("detail")

        assert quiet_out.getvalue() == ""
        assert loud_out.getvalue() == f"{STAMP} detail\n"

    def test_defaults_to_sys_streams(self, capsys):
        """Test output goes to sys.stdout and sys.stderr by default."""
        status_log = StatusLog()

        status_log.log("out")
        status_log.error("err")

        captured = capsys.readouterr()
        assert captured.out.endswith(" out\n")
        assert captured.err.endswith(" err\n")


class TestLogFile:
    """Tests for log file mirroring."""

    def test_every_line_is_mirrored(self, tmp_path):
        """Test log, status and error lines all reach the log file."""
        log_file = tmp_path / "renice.log"
        status_log, _, _ = make_status_log(log_file=log_file)

        status_log.log("one")
        status_log.status("two")
        status_log.status("three")
        status_log.error("four")

        assert log_file.read_text(encoding="utf-8").splitlines() == [
            f"{STAMP} one",
            f"{STAMP} two",
            f"{STAMP} three",
            f"{STAMP} four",
        ]

    def test_parent_directories_are_created(self, tmp_path):
        """Test missing parent directories are created on demand."""
        log_file = tmp_path / "nested" / "deeper" / "renice.log"
        status_log, _, _ = make_status_log(log_file=log_file)

        status_log.log("hello")

        assert log_file.exists()

    def test_appends_to_existing_file(self, tmp_path):
        """Test an existing log file is appended to, not truncated."""
        log_file = tmp_path / "renice.log"
        log_file.write_text("earlier\n", encoding="utf-8")
        status_log, _, _ = make_status_log(log_file=log_file)

        status_log.log("later")

        assert log_file.read_text(encoding="utf-8") == f"earlier\n{STAMP} later\n"

    def test_write_failure_is_reported_not_raised(self, tmp_path):
        """Test an unwritable log file is reported and output continues."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        log_file = blocker / "renice.log"
        status_log, stdout, _ = make_status_log(log_file=log_file)

        status_log.log("still printed")

        output = stdout.getvalue()
        assert f"{STAMP} still printed\n" in output
        assert f"unable to write to log file {log_file}" in output


class TestUnencodableText:
    """Tests for text the output streams cannot encode."""

    def test_lone_surrogate_reaches_console_and_file(self, tmp_path):
        """Test an undecodable command line byte is escaped, not raised."""
        log_file = tmp_path / "renice.log"
        status_log, stdout, _ = make_status_log(log_file=log_file)

        status_log.log("match: worker \udcff")

        assert stdout.getvalue() == f"{STAMP} match: worker \\udcff\n"
        assert log_file.read_text(encoding="utf-8") == f"{STAMP} match: worker \\udcff\n"

    def test_narrow_console_encoding(self):
        """Test characters outside the console encoding are backslash-escaped."""
        raw = io.BytesIO()
        stdout = io.TextIOWrapper(raw, encoding="ascii", newline="\n")
        status_log = StatusLog(stdout=stdout, clock=lambda: FIXED_TIME)

        status_log.status("caf\u00e9")
        status_log.after_status()

        assert raw.getvalue() == f"\r{STAMP} caf\\xe9\n".encode("ascii")
