# File: tests/conftest.py
import asyncio
from typing import Dict, List, Optional, Union

import pytest

from site_mirror.config import BuildConfig
from site_mirror.errors import FatalFetchError
from site_mirror.logger import configure

DEV = "https://dev-site.webflow.io"
TARGET = "https://www.example.com"

CSS_URL = "https://assets.website-files.com/5f1/css/dev-site.webflow.css"
JS_URL = "https://assets.website-files.com/5f1/js/webflow.js"
JQUERY_URL = "https://d3e54v103j8qbb.cloudfront.net/js/jquery-3.5.1.min.dc5e7f18c8.js?site=5f1"
IMG_URL = "https://uploads-ssl.webflow.com/5f1/cover%20photo.png"

HOME_HTML = f"""<!DOCTYPE html><!-- Last Published: Mon Oct 19 2026 --><html data-wf-page="p1" data-wf-site="5f1"><head>
<meta charset="utf-8"/><title>Home</title>
<link href="{CSS_URL}" rel="stylesheet" type="text/css"/>
</head><body class="body">
<div class="hero">
<a href="/about" class="nav-link">About</a>
<a href="/blog/first-post/">First post</a>
<a href="/thank-you" data-skip-sitemap>Thanks</a>
<a href="/external-page" data-skip-fetch>External</a>
<a href="https://twitter.com/example">Twitter</a>
<a href="/">Home</a>
<img src="{IMG_URL}" loading="lazy" data-sb-process alt=""/>
</div>
<script src="{JQUERY_URL}" type="text/javascript" integrity="sha256-9/aliU8dGd2tb6OSsuzixeV4y/faTqgFtohetphbbj0=" crossorigin="anonymous"></script>
<script src="{JS_URL}" type="text/javascript"></script>
</body></html>"""

PAGE_HTML = f"""<!DOCTYPE html><html data-wf-page="p2"><head>
<link href="{CSS_URL}" rel="stylesheet" type="text/css"/>
</head><body><div class="content"><img src="{IMG_URL}" data-sb-process/></div>
<script src="{JQUERY_URL}" type="text/javascript"></script>
<script src="{JS_URL}" type="text/javascript"></script>
</body></html>"""

STYLESHEET = (
    ".body{margin:0}.hero{color:red}.content{padding:1px}.unused-class{color:blue}"
    "@media (max-width:767px){.hero{color:green}.gone{display:none}}"
    "@font-face{font-family:Inter;src:url(inter.woff2)}"
)
SCRIPT = "var Webflow = {}; document.body.classList.add('w--open');"
JQUERY = "/*! jQuery */"


class FakeFetcher:
    """In-memory stand-in for RetryingFetcher: URL -> body, None means 404."""

    def __init__(self, routes: Dict[str, Optional[Union[str, bytes]]]) -> None:
        self.routes = routes
        self.calls: List[str] = []

    def _lookup(self, url: str, allow_not_found: bool):
        self.calls.append(url)
        body = self.routes.get(url)
        if body is None:
            if allow_not_found:
                return None
            raise FatalFetchError(url, 1)
        return body

    async def fetch_text(self, url: str, allow_not_found: bool = False) -> Optional[str]:
        await asyncio.sleep(0)
        body = self._lookup(url, allow_not_found)
        if isinstance(body, bytes):
            return body.decode("utf-8")
        return body

    async def fetch_bytes(self, url: str) -> bytes:
        await asyncio.sleep(0)
        body = self._lookup(url, False)
        return body if isinstance(body, bytes) else body.encode("utf-8")


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests bind the log handler to CliRunner streams; restore a clean one."""
    yield
    configure(level="INFO")


@pytest.fixture()
def build_config() -> BuildConfig:
    return BuildConfig(site=DEV, targetHost=TARGET, retry_times=1, retry_delay=0, concurrency=4)


@pytest.fixture()
def site_routes() -> Dict[str, Optional[Union[str, bytes]]]:
    return {
        DEV: HOME_HTML,
        CSS_URL: STYLESHEET,
        JS_URL: SCRIPT,
        JQUERY_URL: JQUERY,
        IMG_URL: b"\x89PNG-hero",
        f"{DEV}/robots.txt": None,
        f"{DEV}/sitemap.xml": None,
        f"{DEV}/about": PAGE_HTML,
        f"{DEV}/blog/first-post/": PAGE_HTML,
        f"{DEV}/blog/first-post": PAGE_HTML,
        f"{DEV}/thank-you": PAGE_HTML,
        f"{DEV}/external-page": PAGE_HTML,
        f"{DEV}/404": "<html><body>Not found</body></html>",
    }


@pytest.fixture()
def fake_fetcher(site_routes) -> FakeFetcher:
    return FakeFetcher(site_routes)
