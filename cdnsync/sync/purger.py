"""
Destination cleanup for CDN Sync.

Removes library destination directories listed in the manifest.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Tuple

from ..config import FrontendConfig

log = logging.getLogger(__name__)


def find_existing_destinations(config: FrontendConfig) -> Dict[str, Path]:
    """Map of library name -> destination directory, for those that exist."""
    return {
        name: path
        for name, path in config.library_destinations().items()
        if path.is_dir()
    }


def remove_destinations(destinations: Dict[str, Path], dry_run: bool = False) -> Tuple[List[str], List[str]]:
    """
    Delete destination directories.

    Args:
        destinations: Library name -> directory
        dry_run: Report what would be removed without deleting

    Returns:
        Tuple of (removed_names, failed_names)
    """
    removed = []
    failed = []
    for name, path in destinations.items():
        if dry_run:
            removed.append(name)
            continue
        try:
            shutil.rmtree(path)
            removed.append(name)
        except OSError as e:
            log.warning(f"Failed to remove {name} ({path}): {e}")
            failed.append(name)
    return removed, failed
