# === FILE: site_mirror/parser/html_parser.py ===
"""HTML link discovery for SiteMirror.

:func:`links_from_html` walks every ``<a>`` element of a document, resolves its
``href`` against the target host and keeps the same-host, non-root paths.

* The returned paths have their leading ``/`` removed; a trailing ``/`` is
  kept (the page-set resolver normalises it).
* Anchors carrying *skip_attribute* (e.g. ``data-skip-sitemap``) are ignored.
* Malformed ``href`` values are skipped silently.

Order is document order with duplicates removed, so the result is stable for
tests and output ordering.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("links_from_html", "SKIP_SITEMAP_ATTR", "SKIP_FETCH_ATTR")

SKIP_SITEMAP_ATTR = "data-skip-sitemap"
SKIP_FETCH_ATTR = "data-skip-fetch"


def _same_host(url: str, target_host: str) -> bool:
    a, b = urlparse(url), urlparse(target_host)
    return a.scheme.lower() == b.scheme.lower() and a.netloc.lower() == b.netloc.lower()


def links_from_html(html: str, target_host: str, skip_attribute: Optional[str] = None) -> list[str]:
    """Return site-relative paths of all same-host links in *html*."""
    soup = BeautifulSoup(html, "html.parser")
    base = target_host.rstrip("/") + "/"
    seen: dict[str, None] = {}
    for tag in soup.find_all("a"):
        if not isinstance(tag, Tag):
            continue
        if skip_attribute and tag.has_attr(skip_attribute):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        try:
            resolved = urlparse(urljoin(base, href.strip()))
        except ValueError:
            continue
        if not _same_host(resolved.geturl(), target_host):
            continue
        if resolved.path in ("", "/"):
            continue
        seen.setdefault(resolved.path[1:], None)
    return list(seen)
