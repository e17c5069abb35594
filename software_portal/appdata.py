"""
Appdata aggregation: the applications a project's repositories advertise.

    appdata = Appdata(cache)
    result = appdata.get("openSUSE:Factory")   # or: await appdata.aget(...)

On a cache miss every component feed is fetched and decoded in its own
task; the tasks are joined at one barrier and merged. Whatever fails is
logged and skipped, so the caller always gets a result, possibly empty.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from software_portal import config
from software_portal.cache import BaseCache
from software_portal.decoder import decode
from software_portal.fetcher import AppdataClient
from software_portal.locator import is_supported, locate, normalize_project
from software_portal.merger import merge
from software_portal.models import AppdataResult, FeedSource
from software_portal.outcomes import FAILURES, FeedOutcome, FetchError

logger = logging.getLogger(__name__)


class Appdata:

    def __init__(
        self,
        cache: BaseCache,
        mirror: str = config.MIRROR_BASE,
        timeout: float = config.REQUEST_TIMEOUT,
        expires_in: timedelta = config.APPDATA_CACHE_TTL,
        projects: Optional[Dict[str, str]] = None,
        components: Optional[List[str]] = None,
    ):
        self.cache = cache
        self.mirror = mirror
        self.timeout = timeout
        self.expires_in = expires_in
        self.projects = projects
        self.components = components

    @staticmethod
    def cache_key(project: str) -> str:
        return f"{config.APPDATA_CACHE_PREFIX}/{normalize_project(project)}"

    def get(self, project: str) -> AppdataResult:
        """Blocking variant of ``aget`` for callers without an event loop."""
        return asyncio.run(self.aget(project))

    async def aget(self, project: str) -> AppdataResult:
        key = normalize_project(project)

        async def compute():
            result = await self.collect(key)
            return result.to_summary()

        data = await self.cache.afetch(self.cache_key(key), self.expires_in, compute)
        return AppdataResult.from_summary(data)

    def sources(self, project: str) -> List[FeedSource]:
        return locate(project, mirror=self.mirror, projects=self.projects, components=self.components)

    async def collect(self, project: str) -> AppdataResult:
        """Uncached aggregation run for one project."""
        project = normalize_project(project)
        if not is_supported(project, self.projects):
            logger.info("No appdata feeds known for project %r", project)
            return AppdataResult(project=project)
        sources = self.sources(project)

        async with AppdataClient(timeout=self.timeout) as client:
            tasks = [self._fetch_and_decode(client, source) for source in sources]
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: List[Tuple[FeedSource, FeedOutcome]] = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, BaseException):
                outcome = FetchError(source, f"Unexpected error: {outcome}", outcome)
            results.append((source, outcome))

        result = merge(results, project=project)
        logger.info("Appdata for %s: %d apps from %s", project, len(result.apps), result.feeds)
        return result

    @staticmethod
    async def _fetch_and_decode(client: AppdataClient, source: FeedSource) -> FeedOutcome:
        outcome = await client.fetch(source)
        if isinstance(outcome, FAILURES):
            return outcome
        return await asyncio.to_thread(decode, outcome)
