"""
Shared fixtures: appdata/repomd document builders and a stub mirror served
by a real local aiohttp server.
"""
import asyncio
import gzip
from xml.sax.saxutils import escape

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from software_portal.cache import MemoryCache

FACTORY_OSS = "tumbleweed/repo/oss"
FACTORY_NON_OSS = "tumbleweed/repo/non-oss"


def app_entry(pkgname, name=None, app_id=None, **extra):
    entry = {"pkgname": pkgname, "name": name or pkgname.title(), "id": app_id or f"{pkgname}.desktop"}
    entry.update(extra)
    return entry


def build_appdata_xml(apps):
    parts = ['<?xml version="1.0" encoding="UTF-8"?>', '<components origin="openSUSE" version="0.8">']
    for app in apps:
        parts.append('  <component type="desktop">')
        parts.append(f"    <id>{escape(app['id'])}</id>")
        if app.get("pkgname"):
            parts.append(f"    <pkgname>{escape(app['pkgname'])}</pkgname>")
        parts.append(f"    <name>{escape(app['name'])}</name>")
        parts.append(f'    <name xml:lang="de">{escape(app["name"])} (de)</name>')
        if app.get("summary"):
            parts.append(f"    <summary>{escape(app['summary'])}</summary>")
        if app.get("categories"):
            parts.append("    <categories>")
            for cat in app["categories"]:
                parts.append(f"      <category>{escape(cat)}</category>")
            parts.append("    </categories>")
        parts.append("  </component>")
    parts.append("</components>")
    return "\n".join(parts).encode("utf-8")


def build_appdata(apps):
    return gzip.compress(build_appdata_xml(apps))


def build_repomd(href, with_namespace=True, data_type="appdata"):
    xmlns = ' xmlns="http://linux.duke.edu/metadata/repo"' if with_namespace else ""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<repomd{xmlns}>\n"
        f'  <data type="primary"><location href="repodata/123-primary.xml.gz"/></data>\n'
        f'  <data type="{data_type}"><location href="{href}"/></data>\n'
        f"</repomd>\n"
    ).encode("utf-8")


def factory_oss_apps():
    """689 distinct package names, some packages shipping more than one app."""
    apps = [
        app_entry("0ad", "0 A.D."),
        app_entry("4pane", "4Pane"),
        app_entry("opera", "Opera", summary="Fast and secure web browser"),
        app_entry("steam", "Steam"),
    ]
    for i in range(685):
        apps.append(app_entry(f"pkg{i:03d}"))
    apps.append(app_entry("pkg000", "Pkg000 Settings", app_id="pkg000-settings.desktop"))
    apps.append(app_entry("steam", "Steam"))  # duplicate inside one feed
    return apps


def factory_non_oss_apps():
    return [
        app_entry("opera", "Opera", summary="Web browser (non-oss build)"),
        app_entry("steam", "Steam"),
        {"id": "orphan.desktop", "name": "Orphan"},  # no pkgname
    ]


class MirrorStub:
    """Serves published repositories; anything unknown is a 404."""

    def __init__(self):
        self.files = {}
        self.statuses = {}
        self.delays = {}
        self.requests = []

    def publish(self, repo, apps, digest="0123abcd", with_namespace=True):
        href = f"repodata/{digest}-appdata.xml.gz"
        self.files[f"/{repo}/repodata/repomd.xml"] = build_repomd(href, with_namespace)
        self.files[f"/{repo}/{href}"] = build_appdata(apps)
        return f"/{repo}/{href}"

    def publish_factory(self):
        self.publish(FACTORY_OSS, factory_oss_apps(), digest="aaaa1111")
        self.publish(FACTORY_NON_OSS, factory_non_oss_apps(), digest="bbbb2222")

    async def handle(self, request):
        path = request.path
        self.requests.append(path)
        if path in self.delays:
            await asyncio.sleep(self.delays[path])
        if path in self.statuses:
            return web.Response(status=self.statuses[path])
        if path not in self.files:
            return web.Response(status=404)
        return web.Response(body=self.files[path])

    def app(self):
        app = web.Application()
        app.router.add_route("GET", "/{tail:.*}", self.handle)
        return app

    def run(self, scenario):
        """Run ``scenario(mirror_url)`` against this stub on a fresh event loop."""
        async def main():
            async with TestServer(self.app()) as server:
                return await scenario(f"http://{server.host}:{server.port}")
        return asyncio.run(main())


@pytest.fixture
def mirror():
    return MirrorStub()


@pytest.fixture
def clock():
    """Settable clock for cache expiry tests."""
    class Clock:
        now = 1_000_000.0

        def __call__(self):
            return self.now

        def advance(self, seconds):
            self.now += seconds

    return Clock()


@pytest.fixture
def cache(clock):
    return MemoryCache(clock=clock)
