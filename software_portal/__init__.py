"""Application metadata and release information for the openSUSE software portal."""

from software_portal.appdata import Appdata
from software_portal.cache import FileCache, MemoryCache
from software_portal.exceptions import DescriptorParseError, PortalError
from software_portal.models import AppdataResult, ApplicationRecord, FeedSource, ReleaseSummary, ReleaseWindow
from software_portal.releases import ReleaseSelector

__version__ = "1.0.0"

__all__ = [
    "Appdata",
    "AppdataResult",
    "ApplicationRecord",
    "DescriptorParseError",
    "FeedSource",
    "FileCache",
    "MemoryCache",
    "PortalError",
    "ReleaseSelector",
    "ReleaseSummary",
    "ReleaseWindow",
]
