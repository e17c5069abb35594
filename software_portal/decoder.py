"""
Decode appdata feeds and the repomd.xml index that points at them.

An appdata feed is a gzip-compressed AppStream collection::

    <components origin="openSUSE-Tumbleweed" version="0.8">
      <component type="desktop">
        <id>opera.desktop</id>
        <pkgname>opera</pkgname>
        <name>Opera</name>
        ...
      </component>
    </components>
"""

import gzip
import logging
import xml.etree.ElementTree as ET
import zlib
from typing import List, Optional

from software_portal import config
from software_portal.locator import valid_package_name
from software_portal.models import ApplicationRecord
from software_portal.outcomes import DecodeError, DecodeOutcome

logger = logging.getLogger(__name__)

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
ROOT_TAGS = ("components", "applications")
APP_TAGS = ("component", "application")


def decode(payload: bytes) -> DecodeOutcome:
    """gzip + XML -> records, or a DecodeError describing why the feed is unusable."""
    try:
        raw = gzip.decompress(payload)
    except (OSError, EOFError, zlib.error) as e:
        return DecodeError(f"Cannot decompress feed: {e}", e)

    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        return DecodeError(f"Malformed appdata document: {e}", e)

    if _local_name(root.tag) not in ROOT_TAGS:
        return DecodeError(f"Unexpected appdata root element <{_local_name(root.tag)}>")

    records = []
    skipped = 0
    for node in root:
        if _local_name(node.tag) not in APP_TAGS:
            continue
        record = parse_application(node)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.debug("Skipped %d appdata entries without a valid pkgname", skipped)
    return records


def parse_application(node: ET.Element) -> Optional[ApplicationRecord]:
    pkgname = _text(node.find("pkgname"))
    if not valid_package_name(pkgname):
        return None

    app_id = _text(node.find("id")) or pkgname

    categories = []
    for cat in node.findall("categories/category"):
        text = _text(cat)
        # X- categories are vendor private
        if text and not text.startswith("X-") and text not in categories:
            categories.append(text)

    homepage = None
    for url in node.findall("url"):
        if url.get("type", "homepage") == "homepage" and _text(url):
            homepage = _text(url)
            break

    screenshots = []
    for image in node.findall("screenshots/screenshot/image"):
        text = _text(image)
        if text and image.get("type", "source") == "source":
            screenshots.append(text)

    return ApplicationRecord(
        id=app_id,
        pkgname=pkgname,
        name=_untranslated(node, "name") or app_id,
        summary=_untranslated(node, "summary"),
        description=_description(node),
        icon_ref=_icon(node),
        categories=tuple(categories),
        homepage=homepage,
        screenshots=tuple(screenshots),
    )


def find_appdata_location(index: bytes) -> Optional[str]:
    """
    Return the ``location/@href`` of the appdata entry in a repomd.xml
    document, or None when the repository does not publish one.

    Raises ET.ParseError on a malformed index.
    """
    root = ET.fromstring(index)
    ns = {"repo": config.REPOMD_NAMESPACE}

    data_elems = root.findall("repo:data", ns) or root.findall("data")
    for data_elem in data_elems:
        if data_elem.get("type") != config.APPDATA_INDEX_TYPE:
            continue
        location_elem = data_elem.find("repo:location", ns)
        if location_elem is None:
            location_elem = data_elem.find("location")
        if location_elem is None:
            continue
        href = location_elem.get("href")
        if href:
            return href
    return None


# ─── Helpers ───────────────────────────────────────────────────────────────────


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    if elem is None or elem.text is None:
        return None
    text = elem.text.strip()
    return text or None


def _untranslated(node: ET.Element, tag: str) -> Optional[str]:
    """Prefer the element without xml:lang, fall back to the first one."""
    elems = node.findall(tag)
    for elem in elems:
        if elem.get(XML_LANG) is None:
            return _text(elem)
    return _text(elems[0]) if elems else None


def _description(node: ET.Element) -> Optional[str]:
    desc = None
    for elem in node.findall("description"):
        if elem.get(XML_LANG) is None:
            desc = elem
            break
    if desc is None:
        return None

    parts = []
    for child in desc:
        tag = _local_name(child.tag)
        if tag == "p" and _text(child):
            parts.append(_text(child))
        elif tag in ("ul", "ol"):
            items = [f"- {_text(li)}" for li in child.findall("li") if _text(li)]
            if items:
                parts.append("\n".join(items))
    if not parts:
        return _text(desc)
    return "\n\n".join(parts)


def _icon(node: ET.Element) -> Optional[str]:
    icons = {}
    for icon in node.findall("icon"):
        text = _text(icon)
        if text:
            icons.setdefault(icon.get("type", "stock"), text)
    for kind in ("cached", "stock", "remote", "local"):
        if kind in icons:
            return icons[kind]
    return None
