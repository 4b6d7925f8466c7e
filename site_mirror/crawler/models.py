"""
Data models for the SiteMirror build pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Union

from site_mirror.errors import ConfigError

Content = Union[str, bytes]


@dataclass(slots=True, frozen=True)
class SiteDescriptor:
    """Dev host and target host, both without a trailing slash."""

    dev_host: str
    target_host: str

    def __post_init__(self) -> None:
        if not self.dev_host or not self.target_host:
            raise ConfigError("both site and targetHost must be set")


@dataclass(slots=True, frozen=True)
class FetchedResource:
    """Holds the URL, body (text or binary) and content type of a fetched resource."""

    url: str
    body: Content
    content_type: str = ""


@dataclass(slots=True, frozen=True)
class AssetTriple:
    """Stylesheet, script bundle and utility-library URLs shared by every page."""

    stylesheet_url: str
    script_url: str
    library_url: str


@dataclass(slots=True, frozen=True)
class RewrittenPage:
    path: str
    html: str


@dataclass(slots=True)
class Bundle:
    """Relative file path -> content mapping handed to the materializer."""

    files: Dict[str, Content] = field(default_factory=dict)
    pages: List[RewrittenPage] = field(default_factory=list)
    images: List[str] = field(default_factory=list)

    def add(self, path: str, content: Content) -> None:
        self.files[path] = content

    def add_image(self, path: str, content: bytes) -> None:
        if path not in self.files:
            self.images.append(path)
        self.files[path] = content

    def add_page(self, page: RewrittenPage) -> None:
        self.pages.append(page)
        self.files[f"{page.path}.html"] = page.html
