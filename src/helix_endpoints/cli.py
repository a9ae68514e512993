"""CLI entry point for helix-endpoints."""

import fnmatch
import logging
from pathlib import Path

import click

from helix_endpoints.config import ConfigError, Settings, load_settings
from helix_endpoints.loader import DocumentCacheError, DocumentFetchError, load_document, parse_document
from helix_endpoints.parser.base import EndpointRecord
from helix_endpoints.parser.helix import extract_endpoints
from helix_endpoints.writer import FORMATS, write_records


def _filter_endpoints(endpoints: list[EndpointRecord], patterns: tuple[str, ...]) -> list[EndpointRecord]:
    """Keep endpoints matching any "METHOD path" or "path" glob pattern."""
    if not patterns:
        return endpoints

    def matches(ep: EndpointRecord, pattern: str) -> bool:
        method, _, path = pattern.strip().rpartition(" ")
        if method and ep.endpoint_spec.http_method.upper() != method.upper():
            return False
        return fnmatch.fnmatch(ep.endpoint_spec.path, path.lstrip("/"))

    return [ep for ep in endpoints if any(matches(ep, p) for p in patterns)]


def _load_settings(config: Path | None) -> Settings:
    try:
        return load_settings(config)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def _load_html(settings: Settings, refresh: bool) -> str:
    try:
        return load_document(
            settings.reference_url,
            cache_path=settings.cache_path,
            refresh=refresh,
            timeout=settings.timeout,
        )
    except (DocumentFetchError, DocumentCacheError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Helix Endpoints: extract the Twitch Helix API reference into a table."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("-c", "--config", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML settings file.")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output file path (defaults to the configured output_path).")
@click.option("--format", "fmt", default="csv", type=click.Choice(FORMATS), help="Output format.")
@click.option("--refresh", is_flag=True, help="Re-download the reference page instead of using the cache.")
@click.option("-e", "--endpoint", "patterns", multiple=True, help='Only keep endpoints matching "METHOD path" or "path" (glob).')
def extract(config: Path | None, output: Path | None, fmt: str, refresh: bool, patterns: tuple[str, ...]):
    """Extract endpoint records from the reference page and write them out."""
    settings = _load_settings(config)
    html = _load_html(settings, refresh)

    endpoints = extract_endpoints(
        parse_document(html),
        reference_url=settings.reference_url,
        helix_base=settings.helix_base_url,
    )
    click.echo(f"Found {len(endpoints)} endpoints.")

    if patterns:
        endpoints = _filter_endpoints(endpoints, patterns)
        click.echo(f"Selected {len(endpoints)} endpoints.")

    output = output or settings.output_path
    write_records(endpoints, output, fmt=fmt)
    click.echo(f"Endpoints saved to {output}")


@main.command()
@click.option("-c", "--config", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML settings file.")
def fetch(config: Path | None):
    """Download the reference page into the local cache."""
    settings = _load_settings(config)
    html = _load_html(settings, refresh=True)
    click.echo(f"Cached {len(html)} characters to {settings.cache_path}")
