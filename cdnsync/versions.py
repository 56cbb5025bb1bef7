"""
Version ordering and upgrade checks for CDN Sync.

Provider adapters only extract raw version strings; ordering happens here.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Tuple

import semver

from .exceptions import CdnSyncError, VersionNotFoundError

log = logging.getLogger(__name__)


def parse_version(value: str) -> Optional[semver.Version]:
    """
    Parse a semantic version string, or return None if it is not one.

    A leading "v" and missing minor/patch parts are tolerated ("v1.2" ->
    1.2.0); prerelease and build suffixes follow semver.org.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return semver.Version.parse(text, optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


def sort_descending(versions: Iterable[str]) -> List[str]:
    """
    Sort version strings newest first.

    Strings that do not parse as versions are dropped without error, so the
    result can be shorter than the input. Ordering is semver precedence: releases
    sort ahead of their own prereleases ("1.0.0" > "1.0.0-beta"), and numeric
    prerelease identifiers sort below alphanumeric ones ("1.0.0-alpha" > "1.0.0-1").
    """
    parsed: List[Tuple[semver.Version, str]] = []
    dropped = 0
    for value in versions:
        version = parse_version(value)
        if version is None:
            dropped += 1
            continue
        parsed.append((version, value))

    if dropped:
        log.debug(f"Dropped {dropped} unparseable version string(s)")

    # Equal versions with different spellings ("1.0" vs "1.0.0") are ordered by the string
    parsed.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [value for _, value in parsed]


def latest_stable(versions: Iterable[str]) -> Optional[str]:
    """Highest non-prerelease version, else the highest prerelease, else None."""
    ordered = sort_descending(versions)
    for value in ordered:
        if parse_version(value).prerelease is None:
            return value
    return ordered[0] if ordered else None


def validate_version(adapter, library: str, version: str) -> None:
    """
    Check that a provider publishes the requested version.

    Raises:
        VersionNotFoundError: If the version is absent from the provider's list
    """
    version_set = adapter.fetch_version_list(library)
    if version not in version_set.versions:
        raise VersionNotFoundError(library, version, adapter.name)


@dataclass
class Upgrade:
    """A library whose configured version differs from the provider's latest."""
    library: str
    current: str
    latest: str
    provider: str


@dataclass
class UpgradeReport:
    """Result of checking every manifest library against its provider."""
    upgrades: List[Upgrade] = field(default_factory=list)
    up_to_date: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def find_upgrades(config, providers: Mapping) -> UpgradeReport:
    """
    Compare each library's configured version to its provider's "latest" tag.

    Per-library failures are collected in the report instead of aborting.
    """
    report = UpgradeReport()

    for name, lib in config.libraries.items():
        try:
            provider = config.resolve_provider(lib)
            version_set = providers[provider].fetch_version_list(name)
        except CdnSyncError as e:
            report.errors.append(f"{name}: {e}")
            continue

        latest = version_set.latest_version or latest_stable(version_set.versions)
        if not latest:
            report.errors.append(f"{name}: no versions found on {provider}")
            continue

        if lib.version == latest:
            report.up_to_date.append(f"{name}@{lib.version}")
        else:
            report.upgrades.append(Upgrade(
                library=name,
                current=lib.version,
                latest=latest,
                provider=provider,
            ))

    return report
