"""
Sync operations module.

Handles download planning, sequential downloading and destination cleanup.
"""

from .download_planner import DownloadTask, filter_files, matches_pattern, plan_downloads
from .downloader import DownloadEvent, DownloadSummary, FileDownloader
from .purger import find_existing_destinations, remove_destinations

__all__ = [
    # Download planning
    "DownloadTask",
    "filter_files",
    "matches_pattern",
    "plan_downloads",
    # Downloader
    "DownloadEvent",
    "DownloadSummary",
    "FileDownloader",
    # Cleanup
    "find_existing_destinations",
    "remove_destinations",
]
