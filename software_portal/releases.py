"""
Current distribution release, picked from the static release descriptor.

The descriptor is a YAML list of windows::

    - from: '2019-05-22 12:00:00 UTC'
      stable_version: '15.1'
      testing_version: '15.2'
      testing_state: 'Alpha'
      legacy_version: '15.0'

The window that started most recently is current. When none has started
yet the earliest planned one is shown instead.
"""

import logging
import os
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional

import yaml

from software_portal import config
from software_portal.cache import BaseCache
from software_portal.exceptions import DescriptorParseError
from software_portal.models import ReleaseSummary, ReleaseWindow

logger = logging.getLogger(__name__)

RELEASE_FIELDS = ("stable_version", "testing_version", "testing_state", "legacy_version")


def parse_instant(value) -> datetime:
    """YAML timestamp or ISO-8601 string -> aware datetime (naive means UTC)."""
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        instant = datetime.combine(value, time.min)
    elif isinstance(value, str):
        s = value.strip()
        if s.endswith(" UTC"):
            s = s[:-4] + "+00:00"
        elif s.endswith("Z"):
            s = s[:-1] + "+00:00"
        instant = datetime.fromisoformat(s)
    else:
        raise ValueError(f"Unsupported 'from' value: {value!r}")

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def parse_window(row: Dict) -> ReleaseWindow:
    if not isinstance(row, dict):
        raise ValueError(f"Release entry is not a mapping: {row!r}")
    if row.get("from") is None:
        raise ValueError("Release entry has no 'from' date")

    values = {}
    for name in RELEASE_FIELDS:
        value = row.get(name)
        values[name] = None if value is None else str(value)
    return ReleaseWindow(from_=parse_instant(row["from"]), **values)


def select_current(releases: List[ReleaseWindow], now: datetime) -> Optional[ReleaseWindow]:
    """``releases`` must be sorted by ``from_`` descending."""
    if not releases:
        return None
    started = [r for r in releases if r.from_ <= now]
    return started[0] if started else releases[-1]


class ReleaseSelector:

    def __init__(self, cache: BaseCache, path: str = config.RELEASES_FILE,
                 expires_in: timedelta = config.RELEASES_CACHE_TTL):
        self.cache = cache
        self.path = path
        self.expires_in = expires_in

    @property
    def cache_key(self) -> str:
        # one entry per descriptor file
        return f"{config.RELEASES_CACHE_KEY}/{os.path.abspath(self.path)}"

    def load_releases(self) -> List[ReleaseWindow]:
        """Release windows sorted newest first; cached for ``expires_in``."""
        rows = self.cache.fetch(self.cache_key, self.expires_in, self._read_descriptor)
        return [ReleaseWindow.from_summary(row) for row in rows]

    def current_release(self, now: Optional[datetime] = None) -> Optional[ReleaseSummary]:
        now = parse_instant(now) if now is not None else datetime.now(timezone.utc)
        current = select_current(self.load_releases(), now)
        if current is None:
            return None
        return current.summary()

    def _read_descriptor(self) -> List[Dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                rows = yaml.safe_load(f)
            if rows is None:
                rows = []
            if not isinstance(rows, list):
                raise ValueError(f"expected a list of releases, got {type(rows).__name__}")
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.error("Error while parsing releases file %s: %s", self.path, e)
            raise DescriptorParseError(self.path, str(e)) from e

        windows = []
        for row in rows:
            try:
                windows.append(parse_window(row))
            except (ValueError, TypeError) as e:
                logger.error("Error while parsing releases entry in %s: %s", self.path, e)

        windows.sort(key=lambda w: w.from_, reverse=True)
        return [w.to_summary() for w in windows]
