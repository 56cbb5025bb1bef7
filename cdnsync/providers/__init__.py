"""
CDN provider adapters.

Each adapter converts one CDN's metadata responses into FileEntry and
VersionSet records behind the ProviderAdapter interface.
"""

from ..cache import CacheStore
from ..constants import PROVIDER_CDNJS, PROVIDER_JSDELIVR, PROVIDER_UNPKG
from .base import FileEntry, ProviderAdapter, VersionSet
from .cdnjs import CdnjsAdapter
from .client import CdnClient, CdnClientConfig
from .jsdelivr import JsdelivrAdapter
from .search import PackageSearch, SearchResult
from .unpkg import UnpkgAdapter

ADAPTERS = {
    PROVIDER_UNPKG: UnpkgAdapter,
    PROVIDER_CDNJS: CdnjsAdapter,
    PROVIDER_JSDELIVR: JsdelivrAdapter,
}


def build_providers(client: CdnClient, cache: CacheStore) -> dict[str, ProviderAdapter]:
    """Instantiate one adapter per provider, sharing the client and cache."""
    return {name: adapter_cls(client, cache) for name, adapter_cls in ADAPTERS.items()}


__all__ = [
    "ADAPTERS",
    "build_providers",
    "CdnClient",
    "CdnClientConfig",
    "FileEntry",
    "ProviderAdapter",
    "VersionSet",
    "UnpkgAdapter",
    "CdnjsAdapter",
    "JsdelivrAdapter",
    "PackageSearch",
    "SearchResult",
]
