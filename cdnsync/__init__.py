"""
CDN Sync - Fetch frontend library files from public CDNs.

This package resolves a manifest of libraries and versions against unpkg,
cdnjs or jsDelivr, caches provider metadata and downloaded files, and only
fetches what is missing locally.

Import from submodules directly:
    from cdnsync.config import FrontendConfig, Settings
    from cdnsync.cache import CacheStore
    from cdnsync.providers import build_providers
    from cdnsync.sync import plan_downloads, FileDownloader
    from cdnsync.app import SyncApp
"""


def _get_version():
    """Read version from VERSION file."""
    from pathlib import Path
    version_file = Path(__file__).parent.parent / "VERSION"
    if version_file.exists():
        return version_file.read_text().strip()
    return "0.0.0"


__version__ = _get_version()
