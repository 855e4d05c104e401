"""site_spider.report: JSON and HTML report writers used by the CLI."""

from __future__ import annotations

from site_spider.report.html_report import render_html
from site_spider.report.json_report import render_json

__all__ = ["render_json", "render_html"]
