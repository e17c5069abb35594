"""
Runtime configuration for the software portal back-end.

Everything here is a plain module constant; deployments override the few
knobs that differ between hosts through environment variables.
"""

import os
from datetime import timedelta

# ─── Paths ─────────────────────────────────────────────────────────────────────

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.dirname(PACKAGE_DIR)
CACHE_DIR = os.environ.get("SOFTWARE_PORTAL_CACHE_DIR", os.path.join(REPO_ROOT, "cached-data"))
RELEASES_FILE = os.environ.get(
    "SOFTWARE_PORTAL_RELEASES_FILE", os.path.join(REPO_ROOT, "config", "releases.yml")
)

# ─── Remote mirror ─────────────────────────────────────────────────────────────

MIRROR_BASE = os.environ.get("SOFTWARE_PORTAL_MIRROR", "https://download.opensuse.org").rstrip("/")
REQUEST_TIMEOUT = float(os.environ.get("SOFTWARE_PORTAL_TIMEOUT", "20"))  # seconds, per request
MAX_CONCURRENT_REQUESTS = 8

USER_AGENT = "software-portal/1.0 (+https://software.opensuse.org)"

# ─── Cache windows ─────────────────────────────────────────────────────────────

APPDATA_CACHE_HOURS = 12
RELEASES_CACHE_MINUTES = 10

APPDATA_CACHE_TTL = timedelta(hours=APPDATA_CACHE_HOURS)
RELEASES_CACHE_TTL = timedelta(minutes=RELEASES_CACHE_MINUTES)

APPDATA_CACHE_PREFIX = "appdata"
RELEASES_CACHE_KEY = "software-portal/releases"

# ─── Distribution trees ────────────────────────────────────────────────────────

DISTRIBUTION_PREFIX = "opensuse:"

# Repository components that publish appdata, in merge priority order.
COMPONENTS = ["oss", "non-oss"]

# Normalized project -> repository URL template (relative to the mirror).
SUPPORTED_PROJECTS = {
    "factory": "tumbleweed/repo/{component}",
    "leap:15.0": "distribution/leap/15.0/repo/{component}",
    "leap:15.1": "distribution/leap/15.1/repo/{component}",
}

REPOMD_NAMESPACE = "http://linux.duke.edu/metadata/repo"
APPDATA_INDEX_TYPE = "appdata"
