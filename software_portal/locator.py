"""
Map a project identifier to the appdata feeds published for it.
"""

import re
from typing import Dict, List, Optional

from software_portal import config
from software_portal.models import FeedSource

_LEAP_SHORT = re.compile(r"^leap:?(\d+\.\d+)$")

_PACKAGE_NAME = re.compile(r"[^\W_][-+~\w.:@]*")
_PROJECT_NAME = re.compile(r"[^\W_][-+\w.:]+")


def normalize_project(project: str) -> str:
    """
    ``openSUSE:Leap:15.1`` -> ``leap:15.1``; ``openSUSE:Factory`` -> ``factory``.

    The short ``leap15.1`` spelling is accepted as well.
    """
    key = (project or "").strip().lower()
    if key.startswith(config.DISTRIBUTION_PREFIX):
        key = key[len(config.DISTRIBUTION_PREFIX):]
    m = _LEAP_SHORT.match(key)
    if m:
        key = f"leap:{m.group(1)}"
    return key


def locate(
    project: str,
    mirror: str = config.MIRROR_BASE,
    projects: Optional[Dict[str, str]] = None,
    components: Optional[List[str]] = None,
) -> List[FeedSource]:
    """One FeedSource per appdata-carrying component; empty for unknown projects."""
    projects = config.SUPPORTED_PROJECTS if projects is None else projects
    components = config.COMPONENTS if components is None else components

    template = projects.get(normalize_project(project))
    if template is None:
        return []

    base = mirror.rstrip("/")
    sources = []
    seen = set()
    for component in components:
        if component in seen:
            continue
        seen.add(component)
        sources.append(FeedSource(component=component, url=f"{base}/{template.format(component=component)}"))
    return sources


def is_supported(project: str, projects: Optional[Dict[str, str]] = None) -> bool:
    projects = config.SUPPORTED_PROJECTS if projects is None else projects
    return normalize_project(project) in projects


# ─── Identifier validation ─────────────────────────────────────────────────────


def valid_package_name(name: str) -> bool:
    return bool(name) and _PACKAGE_NAME.fullmatch(name) is not None


def valid_project_name(name: str) -> bool:
    return bool(name) and _PROJECT_NAME.fullmatch(name) is not None
