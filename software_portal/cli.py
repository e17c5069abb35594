"""
Operator entry point.

Usage:
    software-portal appdata factory leap:15.1 [--output ./cached-data/appdata-export]
    software-portal release [--file config/releases.yml]
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from datetime import datetime, timezone
from typing import List, Optional

from software_portal import config
from software_portal.appdata import Appdata
from software_portal.cache import FileCache, MemoryCache
from software_portal.exceptions import DescriptorParseError
from software_portal.locator import valid_project_name
from software_portal.models import AppdataResult
from software_portal.releases import ReleaseSelector


def save_data(output_dir: str, result: AppdataResult, timestamp: str) -> str:
    out = {"lastUpdated": timestamp}
    out.update(result.to_summary())
    os.makedirs(output_dir, exist_ok=True)
    name = result.project.replace(":", "_") or "unknown"
    path = os.path.join(output_dir, f"{name}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(out, f, indent=2, ensure_ascii=False)
    print(f"  ✓ Saved {len(result.apps)} apps → {path}")
    return path


async def fetch_projects(appdata: Appdata, projects: List[str]) -> List[AppdataResult]:
    return list(await asyncio.gather(*[appdata.aget(p) for p in projects]))


def cmd_appdata(args) -> int:
    for project in args.projects:
        if not valid_project_name(project):
            print(f"ERROR: invalid project name: {project!r}", file=sys.stderr)
            return 2

    cache = MemoryCache() if args.no_cache else FileCache(args.cache_dir)
    appdata = Appdata(cache, mirror=args.mirror, timeout=args.timeout)
    timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    start = time.time()

    results = asyncio.run(fetch_projects(appdata, args.projects))

    for result in results:
        print(f"\n{'='*60}")
        print(f"APPDATA — {result.project.upper()}")
        print(f"{'='*60}")
        if not result.feeds:
            print("  (no feeds known for this project)")
        for component, status in result.feeds.items():
            print(f"  {component:<10} {status}")
        print(f"  {len(result.apps)} apps from {len(result.pkgnames())} packages")
        if args.output:
            save_data(args.output, result, timestamp)

    elapsed = time.time() - start
    print(f"\n✓ DONE in {elapsed:.1f}s")
    return 0


def cmd_release(args) -> int:
    selector = ReleaseSelector(MemoryCache(), path=args.file)
    try:
        current = selector.current_release()
    except DescriptorParseError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if current is None:
        print("No releases configured")
        return 0
    for key, value in current.to_summary().items():
        print(f"{key:<16} {value if value is not None else '-'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="software-portal", description=__doc__.strip().splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("appdata", help="fetch and merge appdata for projects")
    p.add_argument("projects", nargs="+", help="project, e.g. openSUSE:Factory or leap:15.1")
    p.add_argument("--cache-dir", default=config.CACHE_DIR)
    p.add_argument("--no-cache", action="store_true", help="do not read or write the on-disk cache")
    p.add_argument("--mirror", default=config.MIRROR_BASE)
    p.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT)
    p.add_argument("--output", help="directory to save one JSON summary per project")
    p.set_defaults(func=cmd_appdata)

    p = sub.add_parser("release", help="show the current release")
    p.add_argument("--file", default=config.RELEASES_FILE)
    p.set_defaults(func=cmd_release)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
