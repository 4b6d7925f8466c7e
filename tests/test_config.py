# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from site_mirror.config import BuildConfig, load_config
from site_mirror.crawler.models import SiteDescriptor
from site_mirror.errors import ConfigError


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,expect_exc",
    [
        ("site: https://dev.webflow.io/\ntargetHost: https://example.com/", None),
        (json.dumps({"site": "https://dev.webflow.io", "targetHost": "https://example.com"}), None),
        ("site: https://dev.webflow.io\ntarget_host: https://example.com", None),
        ("{}", ConfigError),
        ("site: https://dev.webflow.io", ConfigError),
        ("site: https://dev.webflow.io\ntargetHost: '/'", ConfigError),
        ("not: a: mapping", ValueError),
        ("::invalid yaml", TypeError),
    ],
)
def test_load_config_variants(tmp_path, content, expect_exc):
    suffix = ".yaml" if not content.strip().startswith("{") else ".json"
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, BuildConfig)
        assert cfg.site == "https://dev.webflow.io"
        assert cfg.target_host == "https://example.com"
        assert cfg.descriptor() == SiteDescriptor("https://dev.webflow.io", "https://example.com")


def test_optional_blocks_and_defaults(tmp_path):
    cfg_path = write_file(
        tmp_path,
        "site: https://dev.webflow.io\n"
        "targetHost: https://example.com\n"
        "robotsTxt: |\n  User-agent: *\n  Disallow:\n"
        "redirects: /old /new 301\n",
        ".yml",
    )
    cfg = load_config(cfg_path)
    assert cfg.robots_txt.startswith("User-agent: *")
    assert cfg.redirects == "/old /new 301"
    assert cfg.headers is None
    assert cfg.retry_times == 4
    assert cfg.retry_delay == 5.0
    assert cfg.assets_dir == "sb_assets"


def test_config_error_is_value_error(tmp_path):
    cfg_path = write_file(tmp_path, json.dumps({"site": "https://dev.webflow.io"}), ".json")
    with pytest.raises(ValueError) as exc_info:
        load_config(cfg_path)
    assert "target_host" in str(exc_info.value) or "targetHost" in str(exc_info.value)


def test_unknown_field_rejected(tmp_path):
    cfg_path = write_file(
        tmp_path, "site: https://a.io\ntargetHost: https://b.io\nunknown: 1", ".yaml"
    )
    with pytest.raises(ConfigError):
        load_config(cfg_path)


def test_unsupported_suffix(tmp_path):
    cfg_path = write_file(tmp_path, "site = 1", ".toml")
    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_site_descriptor_requires_both_hosts():
    with pytest.raises(ConfigError):
        SiteDescriptor("", "https://example.com")
    with pytest.raises(ConfigError):
        SiteDescriptor("https://dev.webflow.io", "")
