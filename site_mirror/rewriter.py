# File: site_mirror/rewriter.py
"""site_mirror.rewriter: Переписывание HTML одной страницы под target host.

Порядок шагов фиксирован:

1. картинки с атрибутом-маркером скачиваются в каталог ассетов, и все вхождения
   их URL в странице заменяются относительным путём;
2. общий stylesheet очищается от правил, не используемых в HTML и JS страницы;
3. перед ``<html`` вставляется перевод строки (метка времени платформы остаётся
   на отдельной строке, diff в git чище);
4. ``<link>`` стилей заменяется на ``<style>`` с очищенным CSS и скриптом,
   перенаправляющим клиентские ``fetch`` к target host через прокси;
5. ``<script>`` бандла и jQuery заменяются на локальные ``script.js`` и ``jquery.js``.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Dict, List, Optional
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_mirror.crawler.assets import ASSET_PATTERNS, AssetKind
from site_mirror.crawler.fetcher import RetryingFetcher
from site_mirror.crawler.models import AssetTriple, Bundle, SiteDescriptor
from site_mirror.purge import PurgeFn, purge_css
from site_mirror.registry import ImageRegistry
from site_mirror.rendering import render

__all__ = ["ContentRewriter", "relative_prefix", "image_urls", "SCRIPT_FILE", "LIBRARY_FILE", "STYLESHEET_FILE"]

STYLESHEET_FILE = "style.css"
SCRIPT_FILE = "script.js"
LIBRARY_FILE = "jquery.js"

_IMAGE_URL_RE = re.compile(r"https?://[^\s\"'<>,()]+?\.[A-Za-z0-9]{2,5}(?=[\s\"'<>,()]|$)")
_HTML_OPEN_RE = re.compile(r"<html(?=[\s>])", re.IGNORECASE)

logger = logging.getLogger("SiteMirror")


def relative_prefix(path: str) -> str:
    """``./`` для страницы верхнего уровня, ``../`` × N для N разделителей в пути."""
    depth = path.count("/")
    return "../" * depth if depth else "./"


def image_urls(html: str, marker: str) -> List[str]:
    """Абсолютные URL с расширением файла в атрибутах ``<img>`` с маркером, в порядке документа."""
    soup = BeautifulSoup(html, "html.parser")
    found: Dict[str, None] = {}
    for tag in soup.find_all("img"):
        if not isinstance(tag, Tag) or not tag.has_attr(marker):
            continue
        for value in tag.attrs.values():
            text = " ".join(value) if isinstance(value, list) else str(value)
            for url in _IMAGE_URL_RE.findall(text):
                found.setdefault(url, None)
    return list(found)


def _file_name(url: str) -> str:
    return unquote(urlparse(url).path.rsplit("/", 1)[-1])


def _script_tag(src: str) -> str:
    return f'<script src="{src}" type="text/javascript"></script>'


class ContentRewriter:
    """Переписывает страницы одной сборки; общий реестр картинок и bundle передаются извне."""

    def __init__(
        self,
        site: SiteDescriptor,
        assets: AssetTriple,
        fetcher: RetryingFetcher,
        registry: ImageRegistry,
        bundle: Bundle,
        *,
        image_marker: str = "data-sb-process",
        assets_dir: str = "sb_assets",
        fetch_proxy: str = "https://cors-anywhere.herokuapp.com/",
        purge: Optional[PurgeFn] = None,
    ) -> None:
        self.site = site
        self.assets = assets
        self.fetcher = fetcher
        self.registry = registry
        self.bundle = bundle
        self.image_marker = image_marker
        self.assets_dir = assets_dir.strip("/")
        self.fetch_proxy = fetch_proxy
        self.purge: PurgeFn = purge or purge_css

    @classmethod
    def from_config(cls, config, assets: AssetTriple, fetcher: RetryingFetcher,
                    registry: ImageRegistry, bundle: Bundle) -> ContentRewriter:
        return cls(
            config.descriptor(),
            assets,
            fetcher,
            registry,
            bundle,
            image_marker=config.image_marker,
            assets_dir=config.assets_dir,
            fetch_proxy=config.fetch_proxy,
            purge=functools.partial(purge_css, safelist=config.css_safelist),
        )

    async def rewrite(self, path: str, html: str, stylesheet: str, script: str) -> str:
        html = await self.relocate_images(path, html)
        pruned = self.purge(stylesheet, [html, script])
        html = _HTML_OPEN_RE.sub("\n<html", html, count=1)
        return self.embed_assets(path, html, pruned)

    async def relocate_images(self, path: str, html: str) -> str:
        prefix = relative_prefix(path)
        replacements: Dict[str, str] = {}
        for url in image_urls(html, self.image_marker):
            name = _file_name(url)
            if not name or "/" in name or name in (".", ".."):
                logger.warning("Skipping image with unusable file name: %s", url)
                continue
            target = f"{self.assets_dir}/{name}"
            if self.registry.claim(url):
                logger.debug("Image %s -> %s", url, target)
                try:
                    data = await self.fetcher.fetch_bytes(url)
                except Exception:
                    self.registry.release(url)
                    raise
                self.bundle.add_image(target, data)
            self.registry.mark_seen(url)
            replacements[url] = f"{prefix}{target}"

        # longer URLs first so that a URL never clobbers another that extends it
        for url in sorted(replacements, key=len, reverse=True):
            html = html.replace(url, replacements[url])
        return html

    def fetch_patch(self) -> str:
        return render(
            "fetch_proxy.html.j2",
            target_host=self.site.target_host,
            proxy_base=f"{self.fetch_proxy}{self.site.dev_host}",
        )

    def embed_assets(self, path: str, html: str, pruned_css: str) -> str:
        prefix = relative_prefix(path)
        style_block = f"<style>{pruned_css}</style>{self.fetch_patch()}"
        html = ASSET_PATTERNS[AssetKind.STYLESHEET].sub(lambda _m: style_block, html, count=1)
        html = ASSET_PATTERNS[AssetKind.SCRIPT].sub(
            lambda _m: _script_tag(f"{prefix}{SCRIPT_FILE}"), html, count=1
        )
        html = ASSET_PATTERNS[AssetKind.LIBRARY].sub(
            lambda _m: _script_tag(f"{prefix}{LIBRARY_FILE}"), html, count=1
        )
        return html
