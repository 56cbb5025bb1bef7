"""
Application controller for CDN Sync.

Builds the cache, HTTP client and provider adapters once from Settings and
hands the same instances to the planner and downloader.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .cache import CacheStats, CacheStore
from .config import FrontendConfig, Settings, resolve_provider
from .core.formatting import format_size, pluralize, truncate
from .providers import CdnClient, CdnClientConfig, PackageSearch, SearchResult, build_providers
from .sync import (
    DownloadEvent,
    DownloadSummary,
    DownloadTask,
    FileDownloader,
    find_existing_destinations,
    plan_downloads,
    remove_destinations,
)
from .versions import UpgradeReport, find_upgrades, sort_descending

log = logging.getLogger(__name__)


class SyncApp:
    """Main application controller."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[CdnClient] = None):
        self.settings = settings or Settings.from_env()
        self.cache = CacheStore(
            self.settings.cache_dir,
            ttl=self.settings.metadata_ttl,
            enabled=self.settings.cache_enabled,
            package_cache=self.settings.package_cache,
        )
        self.client = client or CdnClient(CdnClientConfig(timeout=self.settings.request_timeout))
        self.providers = build_providers(self.client, self.cache)
        self.searcher = PackageSearch(self.client)
        self.downloader = FileDownloader(
            cache=self.cache,
            chunk_size=self.settings.chunk_size,
            timeout=self.settings.request_timeout,
        )

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def plan(self, config: FrontendConfig, force: bool = False, validate_versions: bool = False) -> List[DownloadTask]:
        """Compute the download tasks for a manifest."""
        return plan_downloads(
            config,
            self.providers,
            force=force,
            validate_versions=validate_versions,
        )

    def sync(
        self,
        config: FrontendConfig,
        force: bool = False,
        dry_run: bool = False,
        validate_versions: bool = False,
    ) -> Optional[DownloadSummary]:
        """
        Download whatever the manifest needs that is missing locally.

        With validate_versions, each pinned version is checked against the
        provider's version list before its files are listed.

        Returns:
            DownloadSummary, or None for a dry run
        """
        if not config.libraries:
            print("No libraries configured. Nothing to sync.")
            return DownloadSummary()

        print(f"Resolving {len(config.libraries)} {pluralize(len(config.libraries), 'library', 'libraries')}...")
        tasks = self.plan(config, force=force, validate_versions=validate_versions)
        log.debug(f"Planning used {self.client.requests_made} metadata request(s)")

        if not tasks:
            print("✓ Everything is up to date")
            return DownloadSummary()

        if dry_run:
            self.print_plan(tasks)
            print("\n[DRY RUN] No files were downloaded.")
            return None

        def on_event(event: DownloadEvent):
            source = " (cached)" if event.from_cache else ""
            print(f"  ✓ [{event.index + 1}/{event.total}] {event.task.library}/{event.task.remote_path}{source}")

        summary = self.downloader.download_many(tasks, on_event=on_event)
        print()
        print(f"Downloaded {summary.downloaded} files ({format_size(summary.bytes_downloaded)}), "
              f"{summary.from_cache} from cache")
        return summary

    @staticmethod
    def print_plan(tasks: List[DownloadTask]):
        """Print planned tasks grouped by library."""
        current = None
        for task in tasks:
            if task.library != current:
                current = task.library
                print(f"\n{task.library}@{task.version} ({task.provider})")
            size = f" ({format_size(task.size)})" if task.size else ""
            print(f"  → {task.local_path}{size}")
        print(f"\nTotal: {len(tasks)} {pluralize(len(tasks), 'file', 'files')}")

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def list_versions(self, library: str, provider: str = "", limit: int = 20) -> List[str]:
        """Print and return a library's versions, newest first."""
        provider = resolve_provider(provider)
        print(f"Fetching versions for '{library}' from {provider}...\n")
        version_set = self.providers[provider].fetch_version_list(library)
        versions = sort_descending(version_set.versions)

        if not versions:
            print("No versions found for this package.")
            return versions

        latest = version_set.latest_version
        print(f"Package: {library}")
        print(f"CDN: {provider}")
        print(f"Latest: {latest or '-'}")
        print(f"Total versions: {len(versions)}\n")

        shown = versions[:limit] if limit > 0 else versions
        print(f"Showing {len(shown)} most recent versions:")
        print("-" * 40)
        for ver in shown:
            prefix = "→ " if ver == latest else "  "
            print(f"{prefix}{ver}")
        if len(versions) > len(shown):
            print(f"\n... and {len(versions) - len(shown)} more versions")
        return versions

    def check_upgrades(self, config: FrontendConfig) -> UpgradeReport:
        """Print which libraries have newer versions available."""
        report = find_upgrades(config, self.providers)

        if not report.upgrades:
            print("✓ All libraries are up to date!")
        else:
            print(f"Found {len(report.upgrades)} upgrade(s) available:\n")
            for u in report.upgrades:
                print(f"  • {u.library}: {u.current} → {u.latest} (from {u.provider})")

        if report.errors:
            print(f"\nErrors ({len(report.errors)}):")
            for msg in report.errors:
                print(f"  • {msg}")
        return report

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, source: str = "all", limit: int = 20, as_json: bool = False) -> List[SearchResult]:
        """Search cdnjs and/or npm and print the matches as a table or JSON."""
        results = self.searcher.search(query, source, limit)

        if as_json:
            print(json.dumps([r.to_dict() for r in results], indent=2))
        elif not results:
            print(f"No packages found matching '{query}'")
        else:
            self.print_search_results(results)
        return results

    @staticmethod
    def print_search_results(results: List[SearchResult]):
        """Print search results as a fixed-width table."""
        columns = [
            ("PACKAGE", 40, lambda r: r.name),
            ("VERSION", 15, lambda r: r.version),
            ("CDN", 20, lambda r: r.cdn),
            ("DESCRIPTION", 80, lambda r: r.description),
        ]
        widths = [
            min(cap, max([len(header)] + [len(get(r)) for r in results]))
            for header, cap, get in columns
        ]

        print("  ".join(header.ljust(w) for (header, _, _), w in zip(columns, widths)).rstrip())
        print("  ".join("─" * w for w in widths))
        for r in results:
            cells = [truncate(get(r), w).ljust(w) for (_, _, get), w in zip(columns, widths)]
            print("  ".join(cells).rstrip())
        print(f"\nFound {len(results)} package(s)")

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def clean(self, config: FrontendConfig, dry_run: bool = False) -> List[str]:
        """Remove library destination directories."""
        existing = find_existing_destinations(config)
        if not existing:
            print("No destination directories found. Nothing to clean.")
            return []

        removed, failed = remove_destinations(existing, dry_run=dry_run)
        verb = "Would remove" if dry_run else "Removed"
        for name in removed:
            print(f"✓ {verb} {name} ({existing[name]})")
        for name in failed:
            print(f"✗ Failed to remove {name} ({existing[name]})")
        return removed

    # ------------------------------------------------------------------
    # Cache maintenance
    # ------------------------------------------------------------------

    def cache_stats(self) -> CacheStats:
        stats = self.cache.stats()
        if not stats.enabled:
            print("Cache is disabled")
            return stats

        print("Cache Statistics:")
        print(f"  Directory:        {stats.cache_dir}")
        print(f"  Metadata TTL:     {stats.ttl / 3600:.1f}h")
        print(f"  Metadata entries: {stats.metadata_entries} ({stats.expired_entries} expired, {format_size(stats.metadata_size)})")
        if stats.package_cache:
            print(f"  Package files:    {stats.package_files} ({format_size(stats.package_size)})")
        print(f"  Total size:       {format_size(stats.total_size)}")
        return stats

    def cache_clear(self):
        self.cache.clear()
        print("✓ All cache cleared")

    def cache_clear_packages(self):
        self.cache.clear_packages()
        print("✓ Package cache cleared")

    def cache_clean(self) -> int:
        removed = self.cache.clear_expired()
        if removed:
            print(f"✓ Removed {removed} expired metadata {pluralize(removed, 'entry', 'entries')}")
        else:
            print("No expired metadata entries found")
        return removed


def load_config(path: Path) -> FrontendConfig:
    """Load the frontend manifest."""
    return FrontendConfig.load(path)
