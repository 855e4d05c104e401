"""site_spider.report.html_report: HTML report rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_spider.aggregator import CrawlReport

TEMPLATE_NAME = "report.html.j2"


def render_html(
    report: CrawlReport,
    template_dir: Union[Path, str],
    output_path: Union[Path, str],
) -> Path:
    """Render the HTML report from the template and save it.

    Args:
        report: CrawlReport to render.
        template_dir: directory containing ``report.html.j2``.
        output_path: path of the resulting HTML file.

    Returns:
        Path of the saved HTML file.
    """
    template_dir = Path(template_dir)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "site": report.site,
        "summary": report.summary,
        "pages": report.pages,
        "external_hosts": report.external_hosts,
        "external_links": report.external_links,
        "skipped": report.skipped,
        "complete": report.complete,
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
