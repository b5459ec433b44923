"""utility functions for commands"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Coroutine, Iterable, Optional

import typer
from rich.console import Console
from rich.table import Table

from permission_search.catalog import JsonFileCatalogProvider
from permission_search.config import PermissionSearchConfig
from permission_search.errors import PermissionSearchError
from permission_search.models import IndexEntry, SearchResult
from permission_search.session import SearchSession, SearchStatus
from permission_search.stores import JsonFileSearchStore

console = Console()

CatalogOption = typer.Option(
    ...,
    "--catalog",
    "-c",
    help="Path to a JSON permission catalog",
    envvar="PERMISSION_SEARCH_CATALOG",
    exists=True,
    dir_okay=False,
)


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a coroutine, turning engine errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except PermissionSearchError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def get_config(ctx: typer.Context) -> PermissionSearchConfig:
    if isinstance(ctx.obj, PermissionSearchConfig):
        return ctx.obj
    return PermissionSearchConfig()  # pragma: no cover


@asynccontextmanager
async def open_session(
    catalog: Path, config: PermissionSearchConfig, **kwargs: Any
) -> AsyncIterator[SearchSession]:
    """Start a session against a catalog file and persist searches on exit.

    CLI sessions run without debounce since every query is final.
    """
    session = SearchSession.from_config(
        JsonFileCatalogProvider(catalog),
        config,
        store=JsonFileSearchStore(config.store_path),
        debounce_seconds=0,
        **kwargs,
    )
    await session.start()
    if session.state.status == SearchStatus.ERROR:
        session.close()
        raise PermissionSearchError(session.state.error or "Failed to load permissions")

    try:
        yield session
        await session.persist()
    finally:
        session.close()


def results_table(results: Iterable[SearchResult], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Permission", style="cyan")
    table.add_column("Display Name")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Matched")

    for result in results:
        entry = result.permission
        table.add_row(
            entry.name,
            entry.display_name,
            entry.category,
            f"{result.score:.2f}",
            ", ".join(result.matched_fields),
        )
    return table


def entries_table(entries: Iterable[IndexEntry], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Permission", style="cyan")
    table.add_column("Display Name")
    table.add_column("Category")
    table.add_column("Popularity", justify="right")

    for entry in entries:
        table.add_row(entry.name, entry.display_name, entry.category, str(entry.popularity))
    return table


def filter_changes(
    resources: Optional[list[str]] = None,
    actions: Optional[list[str]] = None,
    scopes: Optional[list[str]] = None,
    categories: Optional[list[str]] = None,
) -> dict[str, list[str]]:
    """Filter updates for the options that were actually given."""
    changes = {
        "resources": resources,
        "actions": actions,
        "scopes": scopes,
        "categories": categories,
    }
    return {key: value for key, value in changes.items() if value}
