"""
Provider adapter interface and canonical records.

Each CDN answers with a different JSON shape. Adapters turn those shapes
into FileEntry / VersionSet so the planner never branches on provider.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional
from urllib.parse import quote

from ..cache import CacheStore, metadata_key
from ..exceptions import DecodeError, TransportError, VersionNotFoundError
from .client import CdnClient

log = logging.getLogger(__name__)


@dataclass
class FileEntry:
    """One fetchable file. path is relative and never starts with "/"."""
    path: str
    url: str
    size: int = 0
    integrity: Optional[str] = None


@dataclass
class VersionSet:
    """Raw version strings plus tag -> version mapping (e.g. "latest")."""
    versions: set = field(default_factory=set)
    latest: dict = field(default_factory=dict)

    @property
    def latest_version(self) -> Optional[str]:
        return self.latest.get("latest")


class ProviderAdapter(ABC):
    """
    Uniform interface over one CDN.

    Subclasses supply URLs and parsers; fetching, caching and error
    translation live here. Raw responses are cached only after they parse,
    and a cached payload that no longer parses is dropped and refetched.
    """

    name: str = ""
    file_url_template: str = ""

    def __init__(self, client: CdnClient, cache: CacheStore):
        self.client = client
        self.cache = cache

    # -- provider specifics ------------------------------------------------

    @abstractmethod
    def file_list_url(self, library: str, version: str) -> str:
        """Metadata endpoint listing one version's files."""

    @abstractmethod
    def version_list_url(self, library: str) -> str:
        """Metadata endpoint listing all published versions."""

    @abstractmethod
    def parse_file_list(self, library: str, version: str, data: Any) -> List[FileEntry]:
        """Normalize a file-list response."""

    @abstractmethod
    def parse_version_list(self, data: Any) -> VersionSet:
        """Normalize a version-list response."""

    def version_list_headers(self) -> Optional[dict]:
        return None

    def file_url(self, library: str, version: str, path: str) -> str:
        """Absolute download URL for a file."""
        return self.file_url_template.format(library=library, version=version, path=quote(path))

    # -- public contract ---------------------------------------------------

    def fetch_file_list(self, library: str, version: str) -> List[FileEntry]:
        """
        List every file published for library@version.

        Raises:
            VersionNotFoundError: Provider returned 404 for this version
            TransportError: Any other HTTP failure
            DecodeError: Response did not have the expected shape
        """
        url = self.file_list_url(library, version)
        key = metadata_key(self.name, "files", library, version)
        try:
            return self._cached_fetch(key, url, lambda data: self.parse_file_list(library, version, data))
        except TransportError as e:
            if e.status == 404:
                raise VersionNotFoundError(library, version, self.name) from e
            raise

    def fetch_version_list(self, library: str) -> VersionSet:
        """List every version published for library."""
        url = self.version_list_url(library)
        key = metadata_key(self.name, "versions", library)
        return self._cached_fetch(key, url, self.parse_version_list, headers=self.version_list_headers())

    # -- internals ---------------------------------------------------------

    def _parse(self, url: str, data: Any, parser: Callable[[Any], Any]):
        try:
            return parser(data)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise DecodeError(url, f"unexpected {self.name} response shape ({e.__class__.__name__}: {e})") from e

    def _cached_fetch(self, key: str, url: str, parser: Callable[[Any], Any], headers: Optional[dict] = None):
        hit, cached = self.cache.get(key)
        if hit:
            try:
                return self._parse(url, cached, parser)
            except DecodeError:
                log.debug(f"Discarding unparseable cached response for {url}")
                self.cache.delete(key)

        data = self.client.get_json(url, headers=headers)
        result = self._parse(url, data, parser)
        self.cache.set(key, data)
        return result
