"""
TTL-bounded memoization of idempotent remote reads.

Every provider request goes through ``HttpCache.cached_get``. Successful
responses are kept for a fixed time-to-live so that periodic update checks do
not hammer the provider APIs, while ``force`` (or the request scoped
``force_check`` flag) allows an on-demand refresh.
"""

import hashlib
import re
from datetime import timedelta
from typing import Any, Optional

import httpx

from ..models import DEFAULT_CACHE_TTL
from .cache_store import CacheStore, MemoryCacheStore
from .error_handler import UpgraderError, handle_api_error
from .logger import logger


def sanitize_cache_key(url: str) -> str:
    """
    Stable, storage-safe key for a URL.

    The readable part loses case and punctuation, so a short digest of the
    exact URL keeps distinct URLs apart.
    """
    url = url.strip()
    key = re.sub(r"[^a-z0-9_]+", "-", url.lower()).strip("-")
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:10]
    return f"{key}-{digest}"


class HttpCache:
    """
    Cached GET requests with a fixed time-to-live.

    Failures are never cached: a transport error, an HTTP error status or an
    undecodable JSON body is logged as a warning, remembered in
    ``last_error`` and reported as ``None``.
    """

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        client: Optional[httpx.Client] = None,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        force_check: bool = False,
    ):
        self.store = store if store is not None else MemoryCacheStore()
        self.client = client if client is not None else httpx.Client(follow_redirects=True)
        self.ttl = ttl
        # Request scoped override: when set, cached results are ignored
        self.force_check = force_check
        self.last_error: Optional[UpgraderError] = None

    def cached_get(self, url: str, response_type: str = "json", force: bool = False) -> Any:
        """
        Fetch ``url``, serving a cached payload when allowed.

        Args:
            url: Absolute URL to GET
            response_type: "json" to decode the body, anything else for text
            force: Skip the cache lookup

        Returns:
            Decoded payload, "" for an empty body, or None on failure
        """
        key = sanitize_cache_key(url)

        if not force and not self.force_check:
            entry = self.store.get(key)
            if entry is not None:
                logger.debug(f"Cache hit for {url}")
                return entry.payload

        logger.debug(f"Requesting {url}")
        try:
            payload = self._fetch(url, response_type)
        except UpgraderError as e:
            self.last_error = e
            logger.warning(f"There was an error getting the repo request: {e}")
            return None

        self.last_error = None
        self.store.set(key, payload, self.ttl)
        return payload

    @handle_api_error
    def _fetch(self, url: str, response_type: str) -> Any:
        response = self.client.get(url)
        response.raise_for_status()

        if not response.content:
            return ""

        if response_type == "json":
            return response.json()

        return response.text

    def invalidate(self, url: str) -> bool:
        return self.store.delete(sanitize_cache_key(url))

    def close(self) -> None:
        self.client.close()


__all__ = [
    "sanitize_cache_key",
    "HttpCache",
]
