"""
Progress tracking for sequential downloads.
"""

import threading
import time
from typing import Optional

from .formatting import format_size


class ProgressTracker:
    """Base class for thread-safe progress tracking."""

    def __init__(self):
        self.lock = threading.Lock()
        self._closed = False
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        """Signal cancellation."""
        self._cancelled = True

    def write(self, msg: str):
        """Write a message (thread-safe)."""
        with self.lock:
            print(msg)

    def close(self):
        """Close the progress tracker."""
        with self.lock:
            self._closed = True


class DownloadProgress(ProgressTracker):
    """
    Tracks real transferred bytes across a batch of downloads.

    The downloader feeds bytes in as chunks arrive; a periodic tick renders
    the current file's progress without blocking the transfer.
    """

    def __init__(self, total_files: int, total_bytes: int = 0, quiet: bool = False):
        super().__init__()
        self.total_files = total_files
        self.total_bytes = total_bytes
        self.quiet = quiet
        self.completed_files = 0
        self.bytes_done = 0
        self.current_name: Optional[str] = None
        self.current_bytes = 0
        self.current_size = 0
        self.started_at = time.monotonic()

    def start_file(self, name: str, size: int = 0):
        with self.lock:
            self.current_name = name
            self.current_bytes = 0
            self.current_size = size

    def add_bytes(self, count: int):
        with self.lock:
            self.current_bytes += count
            self.bytes_done += count

    def finish_file(self):
        with self.lock:
            self.completed_files += 1
            self.current_name = None

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    @property
    def fraction(self) -> float:
        """Fraction of the current file transferred, 0.0 if size is unknown."""
        if self.current_size <= 0:
            return 0.0
        return min(1.0, self.current_bytes / self.current_size)

    def render(self) -> Optional[str]:
        """Status line for the file in flight, or None between files."""
        if self.current_name is None:
            return None
        position = f"[{self.completed_files + 1}/{self.total_files}]"
        done = format_size(self.current_bytes)
        if self.current_size > 0:
            return f"  {position} {self.current_name}: {done} / {format_size(self.current_size)} ({self.fraction * 100:.0f}%)"
        return f"  {position} {self.current_name}: {done}"

    def tick(self):
        """Print the current status line (called by the periodic tick task)."""
        if self.quiet:
            return
        line = self.render()
        if line:
            self.write(line)
