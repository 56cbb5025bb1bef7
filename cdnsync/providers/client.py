"""
HTTP client for CDN metadata APIs.

Handles all metadata HTTP interactions. Does NOT handle file downloads
(see FileDownloader for that).
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .. import __version__
from ..exceptions import DecodeError, TransportError

log = logging.getLogger(__name__)


@dataclass
class CdnClientConfig:
    """Configuration for CdnClient."""
    timeout: Optional[float] = None  # None = no client-side timeout
    user_agent: str = f"cdnsync/{__version__}"


class CdnClient:
    """
    Thin JSON-over-HTTP client shared by all provider adapters.

    One request at a time, no retries: any failure is raised to the caller.
    """

    def __init__(self, config: Optional[CdnClientConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or CdnClientConfig()
        self.session = session or requests.Session()
        self._requests_made = 0

    @property
    def requests_made(self) -> int:
        """Total HTTP requests issued by this client."""
        return self._requests_made

    def _get_headers(self, extra: Optional[dict] = None) -> dict:
        headers = {"User-Agent": self.config.user_agent, "Accept": "application/json"}
        if extra:
            headers.update(extra)
        return headers

    def get_json(self, url: str, headers: Optional[dict] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            TransportError: Connection failure or non-2xx status
            DecodeError: Body is not valid JSON
        """
        log.debug(f"GET {url}")
        try:
            response = self.session.get(url, headers=self._get_headers(headers), timeout=self.config.timeout)
        except requests.RequestException as e:
            raise TransportError(url, detail=str(e)) from e
        finally:
            self._requests_made += 1

        if not 200 <= response.status_code < 300:
            body = (response.text or "")[:200]
            raise TransportError(url, response.status_code, body)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(url, str(e)) from e
