#!/usr/bin/env python3
"""
CDN Sync - Fetch frontend libraries from unpkg, cdnjs or jsDelivr.

Reads a frontend manifest and downloads only the files that are missing
locally, caching provider metadata and downloaded files between runs.
"""

import argparse
import logging
import sys
from pathlib import Path

from cdnsync import __version__
from cdnsync.app import SyncApp, load_config
from cdnsync.config import Settings
from cdnsync.exceptions import CdnSyncError

DEFAULT_CONFIG = "frontend.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CDN Sync - Fetch frontend libraries from public CDNs"
    )
    parser.add_argument("--version", action="version", version=f"cdnsync {__version__}")
    parser.add_argument("-f", "--file", default=DEFAULT_CONFIG, help="Frontend manifest (YAML)")
    parser.add_argument("--no-cache", action="store_true", help="Bypass the metadata and package cache")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sync_p = sub.add_parser("sync", help="Download libraries missing locally")
    sync_p.add_argument("--force", action="store_true", help="Re-download files that already exist")
    sync_p.add_argument("--dry-run", action="store_true", help="Show what would be downloaded")
    sync_p.add_argument("--validate", action="store_true", help="Check each version exists before listing its files")

    versions_p = sub.add_parser("versions", help="List available versions for a package")
    versions_p.add_argument("package")
    versions_p.add_argument("--cdn", default="", help="unpkg, cdnjs or jsdelivr")
    versions_p.add_argument("--limit", type=int, default=20)

    search_p = sub.add_parser("search", help="Search for packages on cdnjs and npm")
    search_p.add_argument("query")
    search_p.add_argument("--cdn", default="all", help="all, cdnjs or npm")
    search_p.add_argument("--limit", type=int, default=20)
    search_p.add_argument("--json", action="store_true", help="Output results as JSON")

    sub.add_parser("upgrades", help="Show libraries with newer versions available")

    clean_p = sub.add_parser("clean", help="Remove library destination folders")
    clean_p.add_argument("--dry-run", action="store_true")

    cache_p = sub.add_parser("cache", help="Manage the metadata and package cache")
    cache_p.add_argument("action", choices=["stats", "clear", "clear-packages", "clean"])

    return parser


def main(argv=None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env(cache_enabled=False if args.no_cache else None)
    app = SyncApp(settings)

    try:
        if args.command == "sync":
            app.sync(
                load_config(Path(args.file)),
                force=args.force,
                dry_run=args.dry_run,
                validate_versions=args.validate,
            )
        elif args.command == "versions":
            app.list_versions(args.package, args.cdn, args.limit)
        elif args.command == "search":
            app.search(args.query, args.cdn, args.limit, as_json=args.json)
        elif args.command == "upgrades":
            app.check_upgrades(load_config(Path(args.file)))
        elif args.command == "clean":
            app.clean(load_config(Path(args.file)), dry_run=args.dry_run)
        elif args.command == "cache":
            {
                "stats": app.cache_stats,
                "clear": app.cache_clear,
                "clear-packages": app.cache_clear_packages,
                "clean": app.cache_clean,
            }[args.action]()
    except CdnSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(0)
