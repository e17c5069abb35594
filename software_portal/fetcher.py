"""
Async HTTP layer for appdata feeds.

One ``AppdataClient`` session serves a whole aggregation run; each feed
fetch ends in a value (payload bytes, ``Absent`` or ``FetchError``), never
an exception, so sibling feeds are unaffected by a failing one.
"""

import asyncio
import logging
import xml.etree.ElementTree as ET
from typing import Optional
from urllib.parse import urljoin

import aiohttp

from software_portal import config
from software_portal.decoder import find_appdata_location
from software_portal.models import FeedSource
from software_portal.outcomes import Absent, FetchError, FetchOutcome

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_FOUND = 404


class AppdataClient:
    """Async mirror client with bounded per-request timeout and concurrency."""

    def __init__(self, timeout: float = config.REQUEST_TIMEOUT,
                 max_concurrent: int = config.MAX_CONCURRENT_REQUESTS):
        self.timeout = timeout
        self._sem = asyncio.Semaphore(max_concurrent)
        self._session: Optional[aiohttp.ClientSession] = None
        self._request_count = 0

    @property
    def request_count(self) -> int:
        return self._request_count

    async def __aenter__(self):
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        self._session = aiohttp.ClientSession(headers={"User-Agent": config.USER_AGENT}, timeout=timeout)
        return self

    async def __aexit__(self, *exc):
        if self._session:
            await self._session.close()
            self._session = None

    async def download(self, url: str) -> Optional[bytes]:
        """GET ``url``; None on 404, ClientResponseError on any other non-200."""
        async with self._sem:
            async with self._session.get(url) as resp:
                self._request_count += 1
                if resp.status == HTTP_NOT_FOUND:
                    return None
                if resp.status != HTTP_OK:
                    raise aiohttp.ClientResponseError(
                        resp.request_info, resp.history, status=resp.status,
                        message=f"Unexpected status {resp.status}",
                    )
                return await resp.read()

    async def resolve(self, source: FeedSource) -> Optional[str]:
        """Find the hashed appdata file name through the repository index."""
        index = await self.download(source.index_url)
        if index is None:
            return None
        href = find_appdata_location(index)
        if href is None:
            return None
        return urljoin(source.url.rstrip("/") + "/", href)

    async def fetch(self, source: FeedSource) -> FetchOutcome:
        try:
            url = source.url if source.is_direct else await self.resolve(source)
            if url is None:
                return Absent(source, "no appdata published")

            payload = await self.download(url)
            if payload is None:
                return Absent(source, f"{url} not found")
            logger.debug("Fetched %d bytes of %s appdata from %s", len(payload), source.component, url)
            return payload

        except asyncio.TimeoutError as e:
            return FetchError(source, f"Timeout after {self.timeout}s", e)
        except aiohttp.ClientResponseError as e:
            return FetchError(source, f"HTTP {e.status}", e)
        except aiohttp.ClientError as e:
            return FetchError(source, f"Connection failed: {e}", e)
        except ET.ParseError as e:
            return FetchError(source, f"Malformed repository index: {e}", e)
