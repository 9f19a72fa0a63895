"""Console reporting for extraction runs.

Progress lines go to stdout and overwrite each other with ``\\r``;
recoverable errors and fatal failures go to stderr with a label.
"""

import sys
from typing import Optional, Protocol, TextIO


class Reporter(Protocol):
    """Sink for user-facing run messages."""

    def progress(self, current: int, total: int, path: str) -> None:
        ...

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def fail(self, message: str) -> None:
        ...


class ConsoleReporter:
    """Reporter writing to the standard streams.

    Args:
        stdout: Stream for progress and info lines (default ``sys.stdout``).
        stderr: Stream for errors (default ``sys.stderr``).
    """

    # Pads a shorter progress line over the tail of a longer previous one
    PAD = " " * 29

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self._stdout = stdout
        self._stderr = stderr
        self._in_progress = False

    @property
    def out(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._stderr or sys.stderr

    def progress(self, current: int, total: int, path: str) -> None:
        self.out.write(f"\r{current}/{total} -- {path}{self.PAD}")
        self.out.flush()
        self._in_progress = True

    def info(self, message: str) -> None:
        self._end_progress_line()
        self.out.write(f"{message}\n")
        self.out.flush()

    def error(self, message: str) -> None:
        self._end_progress_line()
        self.err.write(f"Error: {message}\n")
        self.err.flush()

    def fail(self, message: str) -> None:
        self._end_progress_line()
        self.err.write(f"Failure: {message}\n")
        self.err.flush()

    def _end_progress_line(self) -> None:
        if self._in_progress:
            self.out.write("\n")
            self.out.flush()
            self._in_progress = False


__all__ = ["Reporter", "ConsoleReporter"]
