# site_mirror/crawler/assets.py
"""
Locates the three platform-hosted assets (stylesheet, script bundle, jQuery)
in the home page markup.

The platform always emits absolute URLs for these, so the patterns anchor on
scheme + host; relative references never match.
"""
from __future__ import annotations

import enum
import re
from typing import Dict, Pattern

from site_mirror.crawler.models import AssetTriple
from site_mirror.errors import AssetNotFoundError

__all__ = ("AssetKind", "ASSET_PATTERNS", "extract", "extract_all")

_HOST_CHARS = r"[0-9a-z\-._~]*"
_PLATFORM_HOSTS = r"(?:webflow\.com|website-files\.com)"
_ATTR_VALUE_END = r"[^\"'<>\s]*"


class AssetKind(str, enum.Enum):
    STYLESHEET = "stylesheet"
    SCRIPT = "script"
    LIBRARY = "library"


ASSET_PATTERNS: Dict[AssetKind, Pattern[str]] = {
    AssetKind.STYLESHEET: re.compile(
        r"<link\b[^>]*?\bhref\s*=\s*[\"']"
        rf"(https?://{_HOST_CHARS}{_PLATFORM_HOSTS}/{_ATTR_VALUE_END}?\.css)"
        r"[\"'][^>]*>",
        re.IGNORECASE | re.DOTALL,
    ),
    AssetKind.SCRIPT: re.compile(
        r"<script\b[^>]*?\bsrc\s*=\s*[\"']"
        rf"(https?://{_HOST_CHARS}{_PLATFORM_HOSTS}/{_ATTR_VALUE_END}?\.js)"
        r"[\"'][^>]*>(?:\s*</script\s*>)?",
        re.IGNORECASE | re.DOTALL,
    ),
    AssetKind.LIBRARY: re.compile(
        r"<script\b[^>]*?\bsrc\s*=\s*[\"']"
        rf"(https://{_HOST_CHARS}cloudfront\.net/js/jquery{_ATTR_VALUE_END}?\.js(?:\?[^\"'<>\s]*)?)"
        r"[\"'][^>]*>(?:\s*</script\s*>)?",
        re.IGNORECASE | re.DOTALL,
    ),
}


def extract(kind: AssetKind, homepage_html: str) -> str:
    """Return the first URL of *kind* in document order or raise AssetNotFoundError."""
    match = ASSET_PATTERNS[AssetKind(kind)].search(homepage_html)
    if match is None:
        raise AssetNotFoundError(AssetKind(kind).value)
    return match.group(1)


def extract_all(homepage_html: str) -> AssetTriple:
    return AssetTriple(
        stylesheet_url=extract(AssetKind.STYLESHEET, homepage_html),
        script_url=extract(AssetKind.SCRIPT, homepage_html),
        library_url=extract(AssetKind.LIBRARY, homepage_html),
    )
