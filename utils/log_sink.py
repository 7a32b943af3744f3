"""Append-only observation log.

Each call to append() writes one complete block of lines with a single
write() while holding both an in-process lock and an exclusive flock on the
file, so overlapping runs (cron plus a manual run, or several threads) never
interleave partial lines. The file is opened in append mode and closed after
every block.
"""
import fcntl
import logging
import os
import threading
from pathlib import Path

from utils.formatters import format_timestamp, indent_raw

logger = logging.getLogger("netwatch.sink")

_locks = {}
_locks_guard = threading.Lock()


def _lock_for(path):
    with _locks_guard:
        return _locks.setdefault(str(path), threading.Lock())


def format_line(timestamp, target, message):
    return f"{format_timestamp(timestamp)} - {target} - {message}"


class LogSink:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path.resolve())

    def append(self, lines):
        """Append a block of lines atomically with respect to other writers."""
        if isinstance(lines, str):
            lines = [lines]
        block = "".join(line.rstrip("\n") + "\n" for line in lines)
        if not block:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = block.encode("utf-8")
        with self._lock:
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                try:
                    written = 0
                    while written < len(data):
                        written += os.write(fd, data[written:])
                finally:
                    fcntl.flock(fd, fcntl.LOCK_UN)
            finally:
                os.close(fd)

    def record(self, timestamp, target, message, raw=None):
        """Write one header line, followed by indented raw output if any."""
        lines = [format_line(timestamp, target, message)]
        lines.extend(indent_raw(raw))
        self.append(lines)
        return lines

    def __repr__(self):
        return f"LogSink({str(self.path)!r})"
