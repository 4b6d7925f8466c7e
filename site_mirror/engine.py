# File: site_mirror/engine.py
"""site_mirror.engine: Оркестрация сборки статического зеркала.

Фазы выполняются строго по порядку: главная страница → тройка ассетов →
robots.txt / sitemap.xml → манифест страниц → параллельная загрузка и
переписывание страниц. Переписывание начинается только после того, как
известны и ассеты, и манифест.
"""

from __future__ import annotations

import asyncio
import time
from typing import List, Optional, cast

from site_mirror.config import BuildConfig
from site_mirror.crawler.assets import extract_all
from site_mirror.crawler.fetcher import RetryingFetcher
from site_mirror.crawler.models import AssetTriple, Bundle, RewrittenPage
from site_mirror.logger import logger
from site_mirror.registry import ImageRegistry
from site_mirror.resolver import PageSetResolver
from site_mirror.rewriter import LIBRARY_FILE, SCRIPT_FILE, STYLESHEET_FILE, ContentRewriter

__all__ = ["SiteBuilder", "start_build", "BADGE_CSS", "INDEX_PAGE"]

BADGE_CSS = " .w-webflow-badge{display: none !important;}"
INDEX_PAGE = "index"


class SiteBuilder:
    """Собирает Bundle для одного сайта; один экземпляр на одну сборку."""

    def __init__(
        self,
        config: BuildConfig,
        fetcher: RetryingFetcher,
        registry: Optional[ImageRegistry] = None,
    ) -> None:
        self.config = config
        self.site = config.descriptor()
        self.fetcher = fetcher
        self.registry = registry if registry is not None else ImageRegistry()
        self.bundle = Bundle()
        self._semaphore = asyncio.Semaphore(config.concurrency)

    async def build(self) -> Bundle:
        start = time.monotonic()
        site = self.site.dev_host
        logger.info("Building the website: %s -> %s", site, self.site.target_host)

        index_html = await self._fetch_required(site)

        assets = extract_all(index_html)
        stylesheet, script, library = await self._fetch_assets(assets)
        self.bundle.add(STYLESHEET_FILE, stylesheet)
        self.bundle.add(SCRIPT_FILE, script)
        self.bundle.add(LIBRARY_FILE, library)

        await self._add_robots()
        self._add_passthrough_files()

        dev_sitemap = await self.fetcher.fetch_text(f"{site}/sitemap.xml", allow_not_found=True)
        sitemap, pages = PageSetResolver(self.site).resolve(dev_sitemap, index_html)
        self.bundle.add("sitemap.xml", sitemap)
        logger.info("Total pages: %d", len(pages))
        logger.debug("Pages: %s", pages)

        rewriter = ContentRewriter.from_config(
            self.config, assets, self.fetcher, self.registry, self.bundle
        )
        index_page = RewrittenPage(
            INDEX_PAGE, await rewriter.rewrite(INDEX_PAGE, index_html, stylesheet, script)
        )
        results = await asyncio.gather(
            *(self._build_page(rewriter, path, stylesheet, script) for path in pages)
        )
        for page in [index_page, *results]:
            self.bundle.add_page(page)

        logger.info(
            "Built %d pages, %d images in %.2f s",
            len(self.bundle.pages), len(self.bundle.images), time.monotonic() - start,
        )
        return self.bundle

    async def _fetch_required(self, url: str) -> str:
        # без allow_not_found fetch_text не возвращает None
        return cast(str, await self.fetcher.fetch_text(url))

    async def _fetch_assets(self, assets: AssetTriple) -> List[str]:
        logger.info("CSS url: %s", assets.stylesheet_url)
        logger.info("JS url: %s", assets.script_url)
        logger.info("Jquery url: %s", assets.library_url)
        stylesheet, script, library = await asyncio.gather(
            self._fetch_required(assets.stylesheet_url),
            self._fetch_required(assets.script_url),
            self._fetch_required(assets.library_url),
        )
        if self.config.hide_badge:
            stylesheet += BADGE_CSS
        return [stylesheet, script, library]

    async def _add_robots(self) -> None:
        if self.config.robots_txt:
            self.bundle.add("robots.txt", self.config.robots_txt)
            return
        robots = await self.fetcher.fetch_text(f"{self.site.dev_host}/robots.txt", allow_not_found=True)
        if robots:
            self.bundle.add("robots.txt", robots)

    def _add_passthrough_files(self) -> None:
        if self.config.redirects:
            self.bundle.add("_redirects", self.config.redirects)
        if self.config.headers:
            self.bundle.add("_headers", self.config.headers)

    async def _build_page(
        self, rewriter: ContentRewriter, path: str, stylesheet: str, script: str
    ) -> RewrittenPage:
        async with self._semaphore:
            try:
                html = await self._fetch_required(f"{self.site.dev_host}/{path}")
                return RewrittenPage(path, await rewriter.rewrite(path, html, stylesheet, script))
            except Exception as exc:
                logger.error("Failed getting page %s: %s", path, exc)
                raise


async def start_build(cfg: BuildConfig) -> Bundle:
    """
    Открывает HTTP-сессию и выполняет полную сборку.

    Parameters
    ----------
    cfg : BuildConfig
        Конфигурация сборки.

    Returns
    -------
    Bundle
        Отображение «относительный путь → содержимое» для записи на диск.
    """
    async with RetryingFetcher.from_config(cfg) as fetcher:
        return await SiteBuilder(cfg, fetcher).build()
