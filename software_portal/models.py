"""
Plain data carried between the appdata pipeline stages and the caller.

All records are frozen: once a merged result lands in the cache nobody
mutates it. ``to_summary`` produces the JSON-ready form that the cache
backends store and the CLI writes out.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

# ─── Appdata ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ApplicationRecord:
    """One application advertised by an appdata feed."""
    id: str
    pkgname: str
    name: str
    summary: Optional[str] = None
    description: Optional[str] = None
    icon_ref: Optional[str] = None
    categories: Tuple[str, ...] = ()
    homepage: Optional[str] = None
    screenshots: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, str]:
        return self.pkgname, self.id

    def to_summary(self) -> Dict:
        return {
            "id": self.id,
            "pkgname": self.pkgname,
            "name": self.name,
            "summary": self.summary,
            "description": self.description,
            "iconRef": self.icon_ref,
            "categories": list(self.categories),
            "homepage": self.homepage,
            "screenshots": list(self.screenshots),
        }

    @classmethod
    def from_summary(cls, data: Dict) -> "ApplicationRecord":
        return cls(
            id=data["id"],
            pkgname=data["pkgname"],
            name=data.get("name") or "",
            summary=data.get("summary"),
            description=data.get("description"),
            icon_ref=data.get("iconRef"),
            categories=tuple(data.get("categories") or ()),
            homepage=data.get("homepage"),
            screenshots=tuple(data.get("screenshots") or ()),
        )


@dataclass(frozen=True)
class FeedSource:
    """
    One remote appdata feed to retrieve.

    ``url`` is either the component repository base (the feed file name is
    then looked up in ``repodata/repomd.xml``) or a direct ``.xml.gz`` link.
    """
    component: str
    url: str

    @property
    def is_direct(self) -> bool:
        return self.url.endswith(".gz")

    @property
    def index_url(self) -> str:
        return f"{self.url.rstrip('/')}/repodata/repomd.xml"


@dataclass(frozen=True)
class AppdataResult:
    """Merged, deduplicated applications of one project."""
    apps: Tuple[ApplicationRecord, ...] = ()
    project: str = ""
    feeds: Dict[str, str] = field(default_factory=dict)  # component -> ok/absent/error

    def pkgnames(self) -> List[str]:
        """Distinct package names, first-seen order."""
        seen = set()
        names = []
        for app in self.apps:
            if app.pkgname not in seen:
                seen.add(app.pkgname)
                names.append(app.pkgname)
        return names

    def to_summary(self) -> Dict:
        return {
            "project": self.project,
            "feeds": dict(self.feeds),
            "totalCount": len(self.apps),
            "apps": [app.to_summary() for app in self.apps],
        }

    @classmethod
    def from_summary(cls, data: Dict) -> "AppdataResult":
        return cls(
            apps=tuple(ApplicationRecord.from_summary(a) for a in data.get("apps", [])),
            project=data.get("project", ""),
            feeds=dict(data.get("feeds") or {}),
        )


# ─── Releases ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReleaseSummary:
    stable_version: Optional[str] = None
    testing_version: Optional[str] = None
    testing_state: Optional[str] = None
    legacy_version: Optional[str] = None

    def to_summary(self) -> Dict:
        return {
            "stableVersion": self.stable_version,
            "testingVersion": self.testing_version,
            "testingState": self.testing_state,
            "legacyVersion": self.legacy_version,
        }


@dataclass(frozen=True)
class ReleaseWindow:
    """A release configuration that becomes active at ``from_``."""
    from_: datetime
    stable_version: Optional[str] = None
    testing_version: Optional[str] = None
    testing_state: Optional[str] = None
    legacy_version: Optional[str] = None

    def summary(self) -> ReleaseSummary:
        return ReleaseSummary(
            stable_version=self.stable_version,
            testing_version=self.testing_version,
            testing_state=self.testing_state,
            legacy_version=self.legacy_version,
        )

    def to_summary(self) -> Dict:
        return {
            "from": self.from_.isoformat(),
            "stable_version": self.stable_version,
            "testing_version": self.testing_version,
            "testing_state": self.testing_state,
            "legacy_version": self.legacy_version,
        }

    @classmethod
    def from_summary(cls, data: Dict) -> "ReleaseWindow":
        return cls(
            from_=datetime.fromisoformat(data["from"]),
            stable_version=data.get("stable_version"),
            testing_version=data.get("testing_version"),
            testing_state=data.get("testing_state"),
            legacy_version=data.get("legacy_version"),
        )
