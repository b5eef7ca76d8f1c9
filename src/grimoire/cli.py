"""Command-line entry point: ``grimoire build-index`` and ``grimoire search``."""

from __future__ import annotations

import asyncio
from typing import NoReturn

import click
from pydantic import ValidationError

from grimoire import __version__
from grimoire.config import Settings
from grimoire.errors import GrimoireError
from grimoire.logging_config import setup_logging
from grimoire.output import format_dropped_sources, format_results
from grimoire.search import DEFAULT_LIMIT
from grimoire.service import IndexService


def _make_service(ctx: click.Context) -> IndexService:
    if ctx.obj is None:
        try:
            settings = Settings()
        except ValidationError as exc:
            raise click.ClickException(f"Invalid configuration:\n{exc}") from exc
        setup_logging(settings.logging)
        ctx.obj = IndexService(settings)
    return ctx.obj


def _fail(exc: GrimoireError) -> NoReturn:
    click.echo(f"Error: {exc.message}", err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="grimoire")
def cli() -> None:
    """Search skills across registries using a local index."""


@cli.command("build-index")
@click.option("--force", is_flag=True, help="Rebuild even if the index is fresh.")
@click.option("--quiet", is_flag=True, help="Suppress progress output.")
@click.pass_context
def build_index_cmd(ctx: click.Context, force: bool, quiet: bool) -> None:
    """Build the local search index from all registries.

    The index is considered fresh for 24 hours. After that it is rebuilt
    automatically on the next search.
    """
    service = _make_service(ctx)
    try:
        index = asyncio.run(service.build(force=force, quiet=quiet))
    except GrimoireError as exc:
        for line in format_dropped_sources(service.dropped_sources):
            click.echo(line, err=True)
        _fail(exc)

    for line in format_dropped_sources(service.dropped_sources):
        click.echo(line, err=True)

    if quiet:
        return
    if not service.rebuilt:
        ttl = service.settings.cache.ttl_hours
        click.echo(f"Index is fresh (< {ttl}h old). Use --force to rebuild.")
        return
    click.echo("Index built")
    click.echo(f"  {len(index.registries)} registries")
    click.echo(f"  {len(index.skills)} skills")
    click.echo(f"  Saved to {service.cache.path}")


@cli.command("search")
@click.argument("query", nargs=-1)
@click.option("--rebuild", is_flag=True, help="Force rebuild of the index before searching.")
@click.option("--online", is_flag=True, help="Fetch fresh registry data (implies --rebuild).")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed skill info.")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=DEFAULT_LIMIT,
    show_default=True,
    help="Maximum number of results.",
)
@click.pass_context
def search_cmd(
    ctx: click.Context,
    query: tuple[str, ...],
    rebuild: bool,
    online: bool,
    json_output: bool,
    verbose: bool,
    limit: int,
) -> None:
    """Search the local skill index.

    Examples:

        grimoire search docker

        grimoire search "git commit"

        grimoire search --verbose testing
    """
    text = " ".join(query)
    if not text.strip():
        raise click.UsageError("No search query provided.")

    service = _make_service(ctx)
    try:
        outcome = asyncio.run(service.search(text, rebuild=rebuild, online=online, limit=limit))
    except GrimoireError as exc:
        for line in format_dropped_sources(service.dropped_sources):
            click.echo(line, err=True)
        _fail(exc)

    for line in format_dropped_sources(outcome.dropped_sources):
        click.echo(line, err=True)

    if not json_output:
        cache_note = " (cached)" if outcome.from_cache else ""
        click.echo(f"Search completed in {outcome.elapsed_ms}ms{cache_note}\n")
    click.echo(format_results(outcome.results, json_output=json_output, verbose=verbose))

    if outcome.persist_error is not None:
        click.echo(f"Error: {outcome.persist_error}", err=True)
        raise SystemExit(1)
