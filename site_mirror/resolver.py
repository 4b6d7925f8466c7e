# File: site_mirror/resolver.py
"""site_mirror.resolver: Сведение путей из sitemap.xml и ссылок главной страницы в один манифест."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from site_mirror.crawler.models import SiteDescriptor
from site_mirror.logger import logger
from site_mirror.parser.html_parser import SKIP_FETCH_ATTR, SKIP_SITEMAP_ATTR, links_from_html
from site_mirror.parser.sitemap_parser import NOT_FOUND_PAGE, generate_sitemap, paths_from_sitemap

__all__ = ["PageSetResolver", "normalize_manifest", "is_safe_path"]


_DOT_SEGMENTS = frozenset({".", ".."})


def is_safe_path(path: str) -> bool:
    """Путь страницы не должен содержать сегментов ``.`` и ``..``."""
    return not any(part in _DOT_SEGMENTS for part in path.split("/"))


def normalize_manifest(paths: Iterable[str]) -> List[str]:
    """Убирает крайние слеши, пустые пути, пути с ``.``/``..`` и дубликаты, сохраняя порядок."""
    result: Dict[str, None] = {}
    for raw in paths:
        path = raw.strip("/")
        if not path:
            continue
        if not is_safe_path(path):
            logger.warning("Skipping page path with dot segments: %s", raw)
            continue
        result.setdefault(path, None)
    return list(result)


class PageSetResolver:
    """Строит итоговый sitemap.xml и список страниц для загрузки.

    Две взаимоисключающие ветки:

    * sitemap на dev host отсутствует: sitemap генерируется из ссылок главной
      без ``data-skip-sitemap``, а загружаются все ссылки главной плюс ``404``;
    * sitemap есть: загружается объединение путей из него и ссылок главной без
      ``data-skip-fetch``, а сам sitemap отдаётся с заменой dev host на target host
      простой текстовой подстановкой.
    """

    def __init__(self, site: SiteDescriptor) -> None:
        self.site = site

    def resolve(self, dev_sitemap: Optional[str], homepage_html: str) -> Tuple[str, List[str]]:
        if dev_sitemap is None:
            return self._from_links(homepage_html)
        return self._from_sitemap(dev_sitemap, homepage_html)

    def _from_links(self, homepage_html: str) -> Tuple[str, List[str]]:
        target = self.site.target_host
        logger.info(
            "Sitemap not found at %s/sitemap.xml, generating it from the home page links "
            "(add '%s' to <a> to keep a page out of sitemap.xml)",
            self.site.dev_host, SKIP_SITEMAP_ATTR,
        )
        sitemap_links = normalize_manifest(links_from_html(homepage_html, target, SKIP_SITEMAP_ATTR))
        fetch_links = normalize_manifest(links_from_html(homepage_html, target))
        sitemap = generate_sitemap(target, [p for p in sitemap_links if p != NOT_FOUND_PAGE])
        pages = normalize_manifest([*fetch_links, NOT_FOUND_PAGE])
        return sitemap, pages

    def _from_sitemap(self, dev_sitemap: str, homepage_html: str) -> Tuple[str, List[str]]:
        from_sitemap = paths_from_sitemap(dev_sitemap)
        from_links = links_from_html(homepage_html, self.site.target_host, SKIP_FETCH_ATTR)
        pages = normalize_manifest([*from_sitemap, *from_links])
        sitemap = dev_sitemap.replace(self.site.dev_host, self.site.target_host)
        return sitemap, pages
