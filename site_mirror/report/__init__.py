"""site_mirror.report: JSON-сводка по результатам сборки."""

from __future__ import annotations

from site_mirror.report.json_report import build_summary, render_json

__all__ = ["render_json", "build_summary"]
