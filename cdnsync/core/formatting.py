"""
Formatting and path utilities for CDN Sync.
"""

from pathlib import Path, PurePosixPath
from typing import Union


# ============================================================================
# Remote path handling
# ============================================================================

def to_posix(path: Union[str, Path]) -> str:
    """
    Convert a path to a posix-style string (forward slashes).

    Works consistently across platforms - use this instead of str(path)
    when storing or comparing paths.
    """
    if isinstance(path, Path):
        return path.as_posix()
    return path.replace("\\", "/")


def clean_relative_path(path: str) -> str:
    """
    Normalize a provider path into a relative slash-separated path.

    Strips leading separators and collapses empty or "." segments:
    "/dist//./jquery.js" -> "dist/jquery.js"
    """
    parts = [p for p in to_posix(path).split("/") if p and p != "."]
    return "/".join(parts)


def join_remote_path(prefix: str, name: str) -> str:
    """Join a parent path and a child name without a leading separator."""
    return f"{prefix}/{name}" if prefix else name


def is_safe_relative_path(path: str) -> bool:
    """True if path is relative and has no ".." components."""
    if not path or path.startswith("/"):
        return False
    return ".." not in PurePosixPath(path).parts


def local_path_for(base: Path, remote_path: str) -> Path:
    """Map a relative remote path onto a local base directory."""
    return base.joinpath(*remote_path.split("/"))


# ============================================================================
# Size and duration formatting
# ============================================================================

def format_size(size_bytes: int) -> str:
    """Format bytes as human readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


def format_duration(seconds: float) -> str:
    """Format seconds as human readable duration."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    else:
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"


def pluralize(count: int, singular: str, plural: str) -> str:
    """Pick the singular or plural form for a count."""
    return singular if count == 1 else plural


def truncate(text: str, max_len: int) -> str:
    """Shorten text to max_len characters, ending in "..." when cut."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[:max_len - 3] + "..."
