# File: site_mirror/rendering.py
"""site_mirror.rendering: Jinja2-шаблоны пакета (sitemap.xml, патч fetch)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

_env = Environment(
    loader=PackageLoader("site_mirror", "templates"),
    autoescape=select_autoescape(["xml", "html", "j2"]),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def render(template_name: str, **context: Any) -> str:
    """Рендерит шаблон из site_mirror/templates."""
    return _env.get_template(template_name).render(**context)


__all__ = ["render"]
