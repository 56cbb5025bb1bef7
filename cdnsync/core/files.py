"""
File system utilities for CDN Sync.
"""

import os
from pathlib import Path
from typing import Tuple


def file_exists(path: Path) -> bool:
    """Read-only existence check used by the download planner."""
    return path.is_file()


def dir_size(path: Path) -> Tuple[int, int]:
    """
    Count files and total bytes below a directory.

    Returns:
        Tuple of (file_count, total_size_bytes)
    """
    count = 0
    size = 0
    if not path.exists():
        return count, size

    def scan_dir(dir_path: Path):
        nonlocal count, size
        try:
            with os.scandir(dir_path) as entries:
                for entry in entries:
                    if entry.is_file(follow_symlinks=False):
                        try:
                            size += entry.stat(follow_symlinks=False).st_size
                            count += 1
                        except OSError:
                            pass
                    elif entry.is_dir(follow_symlinks=False):
                        scan_dir(Path(entry.path))
        except OSError:
            pass

    scan_dir(path)
    return count, size
