# File: tests/test_engine.py
from __future__ import annotations

import pytest
from conftest import CSS_URL, DEV, IMG_URL, JQUERY, SCRIPT, TARGET, FakeFetcher
from site_mirror.config import BuildConfig
from site_mirror.crawler.models import Bundle, RewrittenPage
from site_mirror.engine import BADGE_CSS, SiteBuilder
from site_mirror.errors import AssetNotFoundError, FatalFetchError, UnsafePathError
from site_mirror.materializer import write_bundle
from site_mirror.parser.sitemap_parser import parse_sitemap
from site_mirror.report.json_report import build_summary


@pytest.mark.asyncio()
async def test_build_without_upstream_sitemap(build_config, fake_fetcher):
    bundle = await SiteBuilder(build_config, fake_fetcher).build()

    assert [p.path for p in bundle.pages] == [
        "index", "about", "blog/first-post", "thank-you", "external-page", "404",
    ]
    assert set(bundle.files) == {
        "style.css", "script.js", "jquery.js", "sitemap.xml", "sb_assets/cover photo.png",
        "index.html", "about.html", "blog/first-post.html", "thank-you.html",
        "external-page.html", "404.html",
    }
    assert bundle.files["style.css"].endswith(BADGE_CSS)
    assert bundle.files["script.js"] == SCRIPT
    assert bundle.files["jquery.js"] == JQUERY
    assert "robots.txt" not in bundle.files
    assert f"{TARGET}/thank-you" not in parse_sitemap(bundle.files["sitemap.xml"])

    # one image shared by every page is downloaded once
    assert fake_fetcher.calls.count(IMG_URL) == 1
    assert bundle.images == ["sb_assets/cover photo.png"]
    assert '"../sb_assets/cover photo.png"' in bundle.files["blog/first-post.html"]
    assert '"./sb_assets/cover photo.png"' in bundle.files["about.html"]


@pytest.mark.asyncio()
async def test_build_with_upstream_sitemap_and_robots(build_config, site_routes):
    site_routes[f"{DEV}/robots.txt"] = "User-agent: *\nDisallow:"
    site_routes[f"{DEV}/sitemap.xml"] = (
        f"<urlset><url><loc>{DEV}/</loc></url><url><loc>{DEV}/pricing/</loc></url></urlset>"
    )
    site_routes[f"{DEV}/pricing"] = "<html><body>Pricing</body></html>"
    fetcher = FakeFetcher(site_routes)

    bundle = await SiteBuilder(build_config, fetcher).build()

    assert [p.path for p in bundle.pages] == [
        "index", "pricing", "404", "about", "blog/first-post", "thank-you",
    ]
    assert bundle.files["robots.txt"] == "User-agent: *\nDisallow:"
    assert bundle.files["sitemap.xml"] == (
        f"<urlset><url><loc>{TARGET}/</loc></url><url><loc>{TARGET}/pricing/</loc></url></urlset>"
    )
    assert f"{DEV}/external-page" not in fetcher.calls


@pytest.mark.asyncio()
async def test_config_blocks_are_passed_through(fake_fetcher):
    cfg = BuildConfig(
        site=DEV,
        targetHost=TARGET,
        robotsTxt="User-agent: *\nDisallow: /private",
        redirects="/old /new 301",
        headers="/*\n  X-Frame-Options: DENY",
        hide_badge=False,
        retry_delay=0,
    )
    bundle = await SiteBuilder(cfg, fake_fetcher).build()
    assert bundle.files["robots.txt"] == "User-agent: *\nDisallow: /private"
    assert bundle.files["_redirects"] == "/old /new 301"
    assert bundle.files["_headers"].startswith("/*")
    assert not bundle.files["style.css"].endswith(BADGE_CSS)
    assert f"{DEV}/robots.txt" not in fake_fetcher.calls


@pytest.mark.asyncio()
async def test_missing_asset_aborts_before_pages(build_config, site_routes):
    site_routes[DEV] = '<html><body><a href="/about">About</a></body></html>'
    fetcher = FakeFetcher(site_routes)
    with pytest.raises(AssetNotFoundError):
        await SiteBuilder(build_config, fetcher).build()
    assert fetcher.calls == [DEV]


@pytest.mark.asyncio()
async def test_failing_page_fails_the_build(build_config, site_routes):
    site_routes[f"{DEV}/thank-you"] = None
    fetcher = FakeFetcher(site_routes)
    with pytest.raises(FatalFetchError) as exc_info:
        await SiteBuilder(build_config, fetcher).build()
    assert exc_info.value.url == f"{DEV}/thank-you"


@pytest.mark.asyncio()
async def test_missing_stylesheet_is_fatal(build_config, site_routes):
    site_routes[CSS_URL] = None
    with pytest.raises(FatalFetchError):
        await SiteBuilder(build_config, FakeFetcher(site_routes)).build()


@pytest.mark.asyncio()
async def test_materialize_and_summary(build_config, fake_fetcher, tmp_path):
    bundle = await SiteBuilder(build_config, fake_fetcher).build()
    out = tmp_path / "content"
    (out / "stale").mkdir(parents=True)

    written = write_bundle(bundle, out)

    assert not (out / "stale").exists()
    assert len(written) == len(bundle.files)
    assert (out / "blog" / "first-post.html").read_text(encoding="utf-8").count("../script.js") == 1
    assert (out / "sb_assets" / "cover photo.png").read_bytes() == b"\x89PNG-hero"

    summary = build_summary(bundle)
    assert summary["total_pages"] == 6
    assert summary["total_images"] == 1
    assert summary["files"]["sb_assets/cover photo.png"] == len(b"\x89PNG-hero")


def test_write_bundle_refuses_paths_outside_output(tmp_path):
    bundle = Bundle()
    bundle.add("style.css", ".a{b:c}")
    bundle.add_page(RewrittenPage("blog/../../escape", "<html></html>"))
    out = tmp_path / "content"

    with pytest.raises(UnsafePathError):
        write_bundle(bundle, out)

    assert not (tmp_path / "escape.html").exists()
    # checked before anything is written
    assert not (out / "style.css").exists()
