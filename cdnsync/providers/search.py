"""
Package search across the CDN catalogues.

cdnjs has its own library index; unpkg and jsDelivr both serve npm, so the
npm registry search stands in for them. Search results are never cached.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, List
from urllib.parse import urlencode

from ..constants import CDNJS_SEARCH_URL, NPM_SEARCH_URL, SEARCH_SOURCES
from ..exceptions import ConfigError, DecodeError
from .client import CdnClient

log = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """One package matching a search query."""
    name: str
    version: str
    cdn: str
    description: str = ""
    homepage: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class PackageSearch:
    """Queries the cdnjs and npm search endpoints through the shared client."""

    def __init__(self, client: CdnClient):
        self.client = client

    def search(self, query: str, source: str = "all", limit: int = 20) -> List[SearchResult]:
        """
        Search one catalogue, or both for "all".

        With "all", each catalogue contributes up to `limit` results, cdnjs first.

        Raises:
            ConfigError: Unknown source or empty query
            TransportError: Search endpoint failed
            DecodeError: Search endpoint returned an unexpected shape
        """
        source = (source or "all").strip().lower()
        if source not in SEARCH_SOURCES:
            raise ConfigError(f"Unsupported CDN for search: {source} (supported: {', '.join(SEARCH_SOURCES)})")
        if not query or not query.strip():
            raise ConfigError("Search query must not be empty")
        query = query.strip()

        results: List[SearchResult] = []
        if source in ("all", "cdnjs"):
            results.extend(self.search_cdnjs(query, limit))
        if source in ("all", "npm"):
            results.extend(self.search_npm(query, limit))
        return results

    def search_cdnjs(self, query: str, limit: int = 20) -> List[SearchResult]:
        params = {"search": query, "fields": "version,description,homepage"}
        if limit > 0:
            params["limit"] = limit
        url = f"{CDNJS_SEARCH_URL}?{urlencode(params)}"
        data = self.client.get_json(url)
        try:
            results = [self._from_cdnjs(item) for item in data["results"]]
        except (KeyError, TypeError, AttributeError) as e:
            raise DecodeError(url, f"unexpected cdnjs search response ({e.__class__.__name__}: {e})") from e
        return self._limited(results, limit)

    def search_npm(self, query: str, limit: int = 20) -> List[SearchResult]:
        params = {"text": query}
        if limit > 0:
            params["size"] = limit
        url = f"{NPM_SEARCH_URL}?{urlencode(params)}"
        data = self.client.get_json(url)
        try:
            results = [self._from_npm(item["package"]) for item in data["objects"]]
        except (KeyError, TypeError, AttributeError) as e:
            raise DecodeError(url, f"unexpected npm search response ({e.__class__.__name__}: {e})") from e
        return self._limited(results, limit)

    @staticmethod
    def _from_cdnjs(item: Any) -> SearchResult:
        return SearchResult(
            name=item["name"],
            version=item.get("version") or "",
            cdn="cdnjs",
            description=item.get("description") or "",
            homepage=item.get("homepage") or "",
        )

    @staticmethod
    def _from_npm(package: Any) -> SearchResult:
        links = package.get("links") or {}
        return SearchResult(
            name=package["name"],
            version=package.get("version") or "",
            cdn="npm",
            description=package.get("description") or "",
            homepage=links.get("homepage") or links.get("npm") or "",
        )

    @staticmethod
    def _limited(results: List[SearchResult], limit: int) -> List[SearchResult]:
        # Endpoints may ignore the size hint
        results = [r for r in results if r.name]
        return results[:limit] if limit > 0 else results
