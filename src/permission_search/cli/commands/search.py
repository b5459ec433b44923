"""Search CLI commands.

Each invocation starts a session against ``--catalog``, runs one search cycle
and prints a rich table or the export JSON.
"""

from pathlib import Path
from typing import Annotated, List, Optional

import typer
from loguru import logger

from permission_search.cli.app import app
from permission_search.cli.commands.command_utils import (
    CatalogOption,
    console,
    entries_table,
    filter_changes,
    get_config,
    open_session,
    results_table,
    run_async,
)
from permission_search.config import PermissionSearchConfig
from permission_search.models import SearchOptions


async def _run_search(
    catalog: Path,
    query: str,
    changes: dict[str, list[str]],
    options: SearchOptions,
    context: Optional[str],
    output_format: str,
    config: PermissionSearchConfig,
) -> None:
    extra = {"context": context} if context else {}
    async with open_session(catalog, config, options=options, **extra) as session:
        if changes:
            session.update_filters(**changes)
        session.search(query)
        await session.flush()

        state = session.state
        if query.strip():
            session.add_to_history(query, len(state.results))

        if output_format == "json":
            typer.echo(session.export_results())
            return

        if not state.results:
            console.print(f"[yellow]No permissions matched '{query}'.[/yellow]")
            return

        title = f"Results for '{query}'" if query.strip() else "Popular permissions"
        console.print(results_table(state.results, title))
        console.print(f"\n{len(state.results)} result(s)")


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Free-text query; empty browses by popularity")] = "",
    catalog: Path = CatalogOption,
    resource: Annotated[
        Optional[List[str]], typer.Option("--resource", "-r", help="Restrict to resource")
    ] = None,
    action: Annotated[
        Optional[List[str]], typer.Option("--action", "-a", help="Restrict to action")
    ] = None,
    scope: Annotated[
        Optional[List[str]], typer.Option("--scope", "-s", help="Restrict to scope")
    ] = None,
    category: Annotated[
        Optional[List[str]], typer.Option("--category", help="Restrict to category")
    ] = None,
    sort_by: Annotated[
        Optional[str],
        typer.Option(help="relevance, alphabetical, category or popularity"),
    ] = None,
    sort_order: Annotated[Optional[str], typer.Option(help="asc or desc")] = None,
    limit: Annotated[Optional[int], typer.Option(help="Maximum number of results")] = None,
    context: Annotated[
        Optional[str], typer.Option(help="Ranking context, e.g. role-creation")
    ] = None,
    output_format: Annotated[
        str, typer.Option("--format", help="Output format: table or json")
    ] = "table",
):
    """Search the permission catalog.

    Examples:

    permission-search search "approve" --catalog permissions.json

    permission-search search staff -c permissions.json --resource user --format json
    """
    config = get_config(ctx)
    options = config.search_options()
    if sort_by is not None:
        if sort_by not in ("relevance", "alphabetical", "category", "popularity"):
            raise typer.BadParameter(f"Unknown sort mode: {sort_by}", param_hint="--sort-by")
        options.sort_by = sort_by  # type: ignore[assignment]
    if sort_order is not None:
        if sort_order not in ("asc", "desc"):
            raise typer.BadParameter(f"Unknown sort order: {sort_order}", param_hint="--sort-order")
        options.sort_order = sort_order  # type: ignore[assignment]
    if limit is not None:
        options.max_results = limit

    changes = filter_changes(resource, action, scope, category)
    logger.debug(f"search query='{query}' filters={changes}")
    run_async(_run_search(catalog, query, changes, options, context, output_format, config))


async def _show_snapshot(catalog: Path, config: PermissionSearchConfig, which: str) -> None:
    async with open_session(catalog, config) as session:
        if which == "popular":
            entries = session.get_popular_permissions()
            title = "Popular permissions"
        else:
            entries = session.get_recent_permissions()
            title = "Recent permissions"

        if not entries:
            console.print("[yellow]No permissions to show.[/yellow]")
            return
        console.print(entries_table(entries, title))


@app.command()
def popular(ctx: typer.Context, catalog: Path = CatalogOption):
    """Show the most popular permissions in the catalog."""
    run_async(_show_snapshot(catalog, get_config(ctx), "popular"))


@app.command()
def recent(ctx: typer.Context, catalog: Path = CatalogOption):
    """Show permissions on commonly revisited resources."""
    run_async(_show_snapshot(catalog, get_config(ctx), "recent"))
