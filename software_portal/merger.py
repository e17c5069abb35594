import logging
from typing import Iterable, Tuple

from software_portal.models import AppdataResult, FeedSource
from software_portal.outcomes import Absent, DecodeError, FeedOutcome, FetchError, outcome_label

logger = logging.getLogger(__name__)


def merge(per_feed_results: Iterable[Tuple[FeedSource, FeedOutcome]], project: str = "") -> AppdataResult:
    """
    Best-effort merge over whatever feeds succeeded.

    Records are taken in feed order and deduplicated by (pkgname, id); the
    first occurrence wins. Failed or absent feeds contribute nothing.
    """
    apps = []
    seen = set()
    feeds = {}

    for source, outcome in per_feed_results:
        feeds[source.component] = outcome_label(outcome)

        if isinstance(outcome, Absent):
            logger.info("Appdata for %s/%s absent: %s", project, source.component, outcome.reason)
            continue
        if isinstance(outcome, FetchError):
            logger.warning("Fetching appdata for %s/%s failed: %s", project, source.component, outcome.reason)
            continue
        if isinstance(outcome, DecodeError):
            logger.warning("Decoding appdata for %s/%s failed: %s", project, source.component, outcome.reason)
            continue

        dropped = 0
        for record in outcome:
            if record.key in seen:
                dropped += 1
                continue
            seen.add(record.key)
            apps.append(record)
        logger.debug("%s/%s: %d apps, %d duplicates dropped", project, source.component, len(outcome), dropped)

    return AppdataResult(apps=tuple(apps), project=project, feeds=feeds)
