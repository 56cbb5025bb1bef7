"""
Exceptions raised by CDN Sync.

Transport and decode errors abort the current operation. Validation errors
are raised before any network call. Cache corruption is never raised.
"""

from typing import Optional


class CdnSyncError(Exception):
    """Base exception for all application-specific errors."""


class TransportError(CdnSyncError):
    """Raised on connection failure or a non-2xx response."""

    def __init__(self, url: str, status: Optional[int] = None, detail: str = ""):
        self.url = url
        self.status = status
        self.detail = detail
        if status is not None:
            message = f"HTTP {status} from {url}"
        else:
            message = f"Request to {url} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DecodeError(CdnSyncError):
    """Raised when a provider response body cannot be decoded."""

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.detail = detail
        super().__init__(f"Malformed response from {url}" + (f": {detail}" if detail else ""))


class LocalWriteError(CdnSyncError):
    """Raised when a downloaded file cannot be written to its destination."""

    def __init__(self, path, detail: str = ""):
        self.path = path
        self.detail = detail
        super().__init__(f"Could not write {path}" + (f": {detail}" if detail else ""))


class ConfigError(CdnSyncError):
    """Raised for invalid manifest or settings values."""


class VersionNotFoundError(CdnSyncError):
    """Raised when a provider does not publish the requested version."""

    def __init__(self, library: str, version: str, provider: str):
        self.library = library
        self.version = version
        self.provider = provider
        super().__init__(f"Version '{version}' not found for '{library}' on {provider}")
