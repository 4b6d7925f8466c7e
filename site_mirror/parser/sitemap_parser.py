# File: site_mirror/parser/sitemap_parser.py
"""site_mirror.parser.sitemap_parser: Разбор sitemap.xml в пути страниц и генерация собственного sitemap."""

from __future__ import annotations

import re
from typing import Iterable, List

from lxml import etree

from site_mirror.logger import logger
from site_mirror.rendering import render

NOT_FOUND_PAGE = "404"

_HOST_PREFIX_RE = re.compile(r"^https?://[^/]+", re.IGNORECASE)


def parse_sitemap(xml_content: str) -> List[str]:
    """Разбирает XML content sitemap и возвращает список URL из тегов <loc>.

    Args:
        xml_content: строка с содержимым sitemap.xml.

    Returns:
        Список URL, найденных в <loc> тегах (пустой, если XML не разобрать).
    """
    if not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False)
    try:
        root = etree.fromstring(xml_content.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        logger.warning("Unparseable sitemap, no <loc> entries used: %s", exc)
        return []
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]


def url_to_path(url: str) -> str:
    """Убирает схему+хост и крайние слеши: ``https://dev.example/about/`` -> ``about``."""
    return _HOST_PREFIX_RE.sub("", url.strip()).strip("/")


def paths_from_sitemap(xml_content: str) -> List[str]:
    """Возвращает пути страниц из sitemap; главная отбрасывается, ``404`` всегда последний.

    Пример:
    ```python
    paths_from_sitemap(
        "<urlset><url><loc>https://dev.example/about/</loc></url>"
        "<url><loc>https://dev.example/</loc></url></urlset>"
    )
    # ['about', '404']
    ```
    """
    paths = [p for p in (url_to_path(u) for u in parse_sitemap(xml_content)) if p]
    unique = [p for p in dict.fromkeys(paths) if p != NOT_FOUND_PAGE]
    return [*unique, NOT_FOUND_PAGE]


def generate_sitemap(target_host: str, paths: Iterable[str]) -> str:
    """Собирает sitemap.xml: сначала главная, затем *paths* в переданном порядке."""
    host = target_host.rstrip("/")
    pages = [p.strip("/") for p in paths if p.strip("/")]
    return render("sitemap.xml.j2", locations=[f"{host}/"] + [f"{host}/{p}" for p in dict.fromkeys(pages)])
