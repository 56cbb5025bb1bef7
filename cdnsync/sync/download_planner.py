"""
Download planning for CDN Sync.

Determines what files need to be downloaded by comparing provider file
lists to local state. Nothing is written here; the only disk access is a
read-only existence check.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

from ..config import FrontendConfig
from ..core.files import file_exists
from ..core.formatting import is_safe_relative_path, local_path_for
from ..exceptions import ConfigError
from ..providers.base import FileEntry, ProviderAdapter
from ..versions import validate_version

log = logging.getLogger(__name__)


@dataclass
class DownloadTask:
    """A file to be downloaded."""
    library: str
    version: str
    provider: str
    remote_path: str
    local_path: Path
    url: str
    size: int = 0
    integrity: Optional[str] = None


@dataclass
class _ResolvedLibrary:
    name: str
    version: str
    provider: str
    destination: Path
    patterns: List[str]


def matches_pattern(path: str, pattern: str) -> bool:
    """Exact match, or prefix match so "dist/" selects a whole directory."""
    return path == pattern or path.startswith(pattern)


def filter_files(files: Iterable[FileEntry], patterns: Optional[Sequence[str]]) -> List[FileEntry]:
    """Keep files matching any pattern. No patterns keeps everything."""
    if not patterns:
        return list(files)
    return [f for f in files if any(matches_pattern(f.path, p) for p in patterns)]


def _resolve_libraries(config: FrontendConfig, providers: Mapping[str, ProviderAdapter]) -> List[_ResolvedLibrary]:
    """Validate every manifest entry up front so bad config fails before any fetch."""
    resolved = []
    for name, lib in config.libraries.items():
        if not lib.version:
            raise ConfigError(f"Library '{name}' has no version")
        provider = config.resolve_provider(lib)
        if provider not in providers:
            raise ConfigError(f"No adapter registered for provider '{provider}'")
        resolved.append(_ResolvedLibrary(
            name=name,
            version=lib.version,
            provider=provider,
            destination=config.library_destination(name, lib),
            patterns=list(lib.files),
        ))
    return resolved


def plan_downloads(
    config: FrontendConfig,
    providers: Mapping[str, ProviderAdapter],
    path_exists: Callable[[Path], bool] = file_exists,
    force: bool = False,
    validate_versions: bool = False,
) -> List[DownloadTask]:
    """
    Plan which files need to be downloaded.

    For each library: fetch its file list from the resolved provider, apply
    the library's file patterns, and keep files whose local path does not
    exist yet (or every file when force is set).

    Args:
        config: Frontend manifest
        providers: Provider name -> adapter
        path_exists: Existence check for local files
        force: Re-download files that already exist locally
        validate_versions: Check each version against the provider's
            version list before fetching its files

    Returns:
        Tasks in manifest order, at most one per (library, remote path)

    Raises:
        ConfigError: Invalid manifest entry (raised before any network call)
        VersionNotFoundError: Version missing on its provider
        TransportError / DecodeError: Provider fetch failed
    """
    tasks: List[DownloadTask] = []

    for lib in _resolve_libraries(config, providers):
        adapter = providers[lib.provider]
        if validate_versions:
            validate_version(adapter, lib.name, lib.version)

        files = filter_files(adapter.fetch_file_list(lib.name, lib.version), lib.patterns)
        seen = set()

        for f in files:
            if f.path in seen:
                continue
            seen.add(f.path)

            if not is_safe_relative_path(f.path):
                log.warning(f"Skipping unsafe path from {lib.provider}: {lib.name}/{f.path}")
                continue

            local_path = local_path_for(lib.destination, f.path)
            if not force and path_exists(local_path):
                continue

            tasks.append(DownloadTask(
                library=lib.name,
                version=lib.version,
                provider=lib.provider,
                remote_path=f.path,
                local_path=local_path,
                url=f.url,
                size=f.size,
                integrity=f.integrity,
            ))

    return tasks
