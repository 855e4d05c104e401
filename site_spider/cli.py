# === FILE: site_spider/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for SiteSpider.

Commands:
  crawl     Crawl the configured site and print/save the report
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --url URL           Override base_url from the config
  --depth INT         Override max_depth (-1: whole site)
  --json PATH         Save the JSON report to a file
  --html PATH         Save the HTML report to a file
  --template DIR      Directory with the Jinja2 template
  --pretty            Indent JSON printed to stdout
  --crawl-timeout SEC Stop after SEC seconds and report what was gathered

Example:
  site-spider --config configs/default.yaml crawl --depth 2 --json report.json
"""
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_spider import __version__
from site_spider.config import load_config
from site_spider.engine import Engine
from site_spider.errors import SpiderError
from site_spider.logger import DEFAULT_FORMAT, init_logging
from site_spider.report.html_report import render_html
from site_spider.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteSpider, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Path to the YAML/JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Format string for log records'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteSpider: breadth-first crawler for a single site."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'url', default=None, help='Seed URL (overrides base_url)')
@click.option(
    '--depth', '-d', 'depth',
    type=click.IntRange(min=-1),
    default=None,
    help='Maximum crawl depth, -1 for the whole site (overrides max_depth)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report to a file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report to a file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default='templates',
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory with the Jinja2 template'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON printed to stdout (2 spaces)'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Timeout for the whole crawl (seconds)'
)
@click.pass_context
def crawl(ctx, url, depth, json_output, html_output, template_dir, pretty, crawl_timeout):
    """Crawl the site and produce reports."""
    cfg = ctx.obj['config']
    overrides = {}
    if url is not None:
        overrides['base_url'] = url
    if depth is not None:
        overrides['max_depth'] = depth
    if overrides:
        try:
            # model_copy skips validation, so rebuild
            cfg = type(cfg)(**{**cfg.model_dump(mode="json"), **overrides})
        except ValidationError as e:
            print_error(f'Invalid override: {e}')

    try:
        report = Engine(cfg).start_crawl(timeout=crawl_timeout or None)
    except SpiderError as e:
        print_error(f'Cannot start crawl: {e}')

    if not report.complete:
        click.secho(
            f'Crawl did not finish within {crawl_timeout} seconds; the report is partial',
            fg='yellow', err=True
        )

    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    click.echo(report.summary)

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Failed to save HTML report: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
