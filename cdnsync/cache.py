"""
Two-tier on-disk cache for CDN Sync.

Metadata tier: provider API responses keyed by a hash of
(provider, operation, library, version), expiring after a TTL. Expiry is
lazy - an expired entry is deleted when read. clear_expired() sweeps the
whole tier on demand.

Package tier: downloaded file bytes stored under
packages/{provider}/{library}/{version}/{path}. Entries never expire.

No file locking is done; a single process is assumed.
"""

import hashlib
import json
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

from .constants import METADATA_DIR_NAME, PACKAGES_DIR_NAME, DEFAULT_METADATA_TTL
from .core.files import dir_size
from .core.formatting import is_safe_relative_path, local_path_for

log = logging.getLogger(__name__)


def metadata_key(provider: str, kind: str, library: str, version: Optional[str] = None) -> str:
    """Build the opaque metadata cache key for one provider call."""
    parts = [provider, kind, library]
    if version is not None:
        parts.append(version)
    return json.dumps(parts)


@dataclass
class CacheStats:
    """Entry counts and sizes per tier."""
    enabled: bool
    cache_dir: Path
    ttl: float
    package_cache: bool
    metadata_entries: int = 0
    expired_entries: int = 0
    metadata_size: int = 0
    package_files: int = 0
    package_size: int = 0

    @property
    def total_size(self) -> int:
        return self.metadata_size + self.package_size


class CacheStore:
    """
    Persistent cache shared by the provider adapters and the downloader.

    A store built with enabled=False always misses and never writes, which
    is how cache bypass is expressed.
    """

    def __init__(
        self,
        root: Path,
        ttl: float = DEFAULT_METADATA_TTL,
        enabled: bool = True,
        package_cache: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.root = Path(root)
        self.metadata_dir = self.root / METADATA_DIR_NAME
        self.packages_dir = self.root / PACKAGES_DIR_NAME
        self.ttl = ttl
        self.enabled = enabled
        self.package_cache = package_cache
        self._clock = clock

        if enabled:
            self._ensure_dirs()

    def _ensure_dirs(self):
        self.metadata_dir.mkdir(parents=True, exist_ok=True)
        self.packages_dir.mkdir(parents=True, exist_ok=True)

    def _metadata_path(self, key: str) -> Path:
        hashed = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.metadata_dir / f"{hashed}.json"

    def _read_record(self, path: Path) -> Optional[dict]:
        """Load a metadata record, or None if missing or unreadable."""
        try:
            with open(path, encoding="utf-8") as f:
                record = json.load(f)
            float(record["timestamp"])
            float(record["ttl"])
            return record
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.debug(f"Ignoring corrupt cache record {path.name}: {e}")
            return None

    def _is_expired(self, record: dict) -> bool:
        return self._clock() - float(record["timestamp"]) > float(record["ttl"])

    # ------------------------------------------------------------------
    # Metadata tier
    # ------------------------------------------------------------------

    def get(self, key: str) -> Tuple[bool, Any]:
        """
        Look up a metadata entry.

        Returns:
            Tuple of (hit, value). Expired or corrupt entries are misses.
        """
        if not self.enabled:
            return False, None

        path = self._metadata_path(key)
        record = self._read_record(path)
        if record is None or "data" not in record:
            return False, None

        if self._is_expired(record):
            try:
                path.unlink()
            except OSError:
                pass
            log.debug(f"Cache entry expired: {key}")
            return False, None

        return True, record["data"]

    def set(self, key: str, value: Any) -> bool:
        """Store a JSON-serializable metadata value. Returns False if not written."""
        if not self.enabled:
            return False

        record = {
            "key": key,
            "data": value,
            "timestamp": self._clock(),
            "ttl": self.ttl,
        }
        try:
            payload = json.dumps(record)
        except (TypeError, ValueError) as e:
            log.warning(f"Cache value for {key} is not serializable: {e}")
            return False

        try:
            self.metadata_dir.mkdir(parents=True, exist_ok=True)
            with open(self._metadata_path(key), "w", encoding="utf-8") as f:
                f.write(payload)
        except OSError as e:
            log.warning(f"Cache write failed for {key}: {e}")
            return False
        return True

    def delete(self, key: str):
        """Drop a metadata entry (used when a cached payload fails to parse)."""
        try:
            self._metadata_path(key).unlink()
        except FileNotFoundError:
            pass

    def clear_expired(self) -> int:
        """Remove expired metadata entries. Package files are never expired."""
        if not self.enabled or not self.metadata_dir.exists():
            return 0

        removed = 0
        for path in self.metadata_dir.glob("*.json"):
            record = self._read_record(path)
            if record is None:
                continue
            if self._is_expired(record):
                try:
                    path.unlink()
                    removed += 1
                except OSError as e:
                    log.warning(f"Failed to remove expired cache file {path.name}: {e}")
        return removed

    # ------------------------------------------------------------------
    # Package tier
    # ------------------------------------------------------------------

    def package_path(self, provider: str, library: str, version: str, file_path: str) -> Path:
        """Location of a cached package file."""
        if not is_safe_relative_path(file_path):
            raise ValueError(f"Refusing unsafe package path: {file_path!r}")
        return local_path_for(self.packages_dir / provider / library / version, file_path)

    def get_package_file(self, provider: str, library: str, version: str, file_path: str) -> Tuple[bool, Optional[bytes]]:
        """Returns (hit, data) for a cached package file."""
        if not self.enabled or not self.package_cache:
            return False, None

        path = self.package_path(provider, library, version, file_path)
        try:
            return True, path.read_bytes()
        except FileNotFoundError:
            return False, None
        except OSError as e:
            log.debug(f"Ignoring unreadable package cache file {path}: {e}")
            return False, None

    def set_package_file(self, provider: str, library: str, version: str, file_path: str, data: bytes) -> bool:
        """Store package file bytes. Returns False if the tier is disabled."""
        if not self.enabled or not self.package_cache:
            return False

        path = self.package_path(provider, library, version, file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return True

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear(self):
        """Remove both tiers."""
        if not self.enabled:
            return
        log.info("Clearing all cache entries...")
        shutil.rmtree(self.root, ignore_errors=True)
        self._ensure_dirs()

    def clear_packages(self):
        """Remove only cached package files, keeping metadata."""
        if not self.enabled:
            return
        shutil.rmtree(self.packages_dir, ignore_errors=True)
        self.packages_dir.mkdir(parents=True, exist_ok=True)

    def stats(self) -> CacheStats:
        """Collect entry counts, sizes and the number of expired entries."""
        stats = CacheStats(
            enabled=self.enabled,
            cache_dir=self.root,
            ttl=self.ttl,
            package_cache=self.package_cache,
        )
        if not self.enabled:
            return stats

        if self.metadata_dir.exists():
            for path in self.metadata_dir.glob("*.json"):
                try:
                    stats.metadata_size += path.stat().st_size
                except OSError:
                    continue
                stats.metadata_entries += 1
                record = self._read_record(path)
                if record is not None and self._is_expired(record):
                    stats.expired_entries += 1

        if self.package_cache:
            stats.package_files, stats.package_size = dir_size(self.packages_dir)

        return stats
