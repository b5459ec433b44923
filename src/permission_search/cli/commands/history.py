"""History and saved-search CLI commands.

Registered as `permission-search history` and the `permission-search saved`
subcommand group. History and saved searches live in the JSON store under the
configured data directory.
"""

from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.table import Table

from permission_search.cli.app import app
from permission_search.cli.commands.command_utils import (
    CatalogOption,
    console,
    filter_changes,
    get_config,
    open_session,
    results_table,
    run_async,
)
from permission_search.history import SavedSearchStore, SearchHistory
from permission_search.models import SearchFilters
from permission_search.stores import JsonFileSearchStore

saved_app = typer.Typer(help="Manage saved searches")
app.add_typer(saved_app, name="saved")


# --- History ---


async def _run_history(store: JsonFileSearchStore, clear: bool, limit: int) -> None:
    entries, saved = await store.load()

    if clear:
        await store.save([], saved)
        console.print("[green]Search history cleared.[/green]")
        return

    history = SearchHistory(entries=entries)
    if not len(history):
        console.print("[yellow]No search history.[/yellow]")
        return

    table = Table(title="Search History")
    table.add_column("Query", style="cyan")
    table.add_column("Results", justify="right")
    table.add_column("When")
    for entry in list(history)[:limit]:
        table.add_row(entry.query, str(entry.result_count), entry.timestamp.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@app.command()
def history(
    ctx: typer.Context,
    clear: bool = typer.Option(False, "--clear", help="Delete all search history"),
    limit: int = typer.Option(20, help="Number of entries to show"),
):
    """Show recent searches, newest first."""
    config = get_config(ctx)
    run_async(_run_history(JsonFileSearchStore(config.store_path), clear, limit))


# --- Saved Searches ---


@saved_app.command("list")
def list_saved(ctx: typer.Context):
    """List saved searches, most recently used first."""
    config = get_config(ctx)

    async def _list() -> None:
        _, saved = await JsonFileSearchStore(config.store_path).load()
        searches = SavedSearchStore(saved).ordered()
        if not searches:
            console.print("[yellow]No saved searches.[/yellow]")
            return

        table = Table(title="Saved Searches")
        table.add_column("Name", style="cyan")
        table.add_column("Query")
        table.add_column("Filters")
        table.add_column("Uses", justify="right")
        for saved_search in searches:
            table.add_row(
                saved_search.name,
                saved_search.query,
                "custom" if saved_search.has_filters else "-",
                str(saved_search.use_count),
            )
        console.print(table)

    run_async(_list())


@saved_app.command("add")
def add_saved(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name for the saved search")],
    query: Annotated[str, typer.Argument(help="Query to save")] = "",
    description: Annotated[Optional[str], typer.Option(help="Optional description")] = None,
    resource: Annotated[Optional[List[str]], typer.Option("--resource", "-r")] = None,
    action: Annotated[Optional[List[str]], typer.Option("--action", "-a")] = None,
    scope: Annotated[Optional[List[str]], typer.Option("--scope", "-s")] = None,
    category: Annotated[Optional[List[str]], typer.Option("--category")] = None,
):
    """Save a query and filters for later reuse."""
    config = get_config(ctx)
    filters = SearchFilters(**filter_changes(resource, action, scope, category))

    async def _add() -> None:
        store = JsonFileSearchStore(config.store_path)
        entries, saved = await store.load()
        searches = SavedSearchStore(saved)
        if searches.find_by_name(name.strip()) is not None:
            console.print(f"[red]Error: a saved search named '{name}' already exists[/red]")
            raise typer.Exit(1)
        searches.add(name, query, filters, description)
        await store.save(entries, list(searches))
        console.print(f"[green]Saved search '{name.strip()}'.[/green]")

    run_async(_add())


@saved_app.command("delete")
def delete_saved(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name of the saved search")],
):
    """Delete a saved search."""
    config = get_config(ctx)

    async def _delete() -> None:
        store = JsonFileSearchStore(config.store_path)
        entries, saved = await store.load()
        searches = SavedSearchStore(saved)
        target = searches.find_by_name(name)
        if target is None:
            console.print(f"[red]Error: no saved search named '{name}'[/red]")
            raise typer.Exit(1)
        searches.delete(target.id)
        await store.save(entries, list(searches))
        console.print(f"[green]Deleted saved search '{name}'.[/green]")

    run_async(_delete())


@saved_app.command("run")
def run_saved(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name of the saved search")],
    catalog: Path = CatalogOption,
):
    """Run a saved search against a catalog and record its use."""
    config = get_config(ctx)

    async def _run() -> None:
        async with open_session(catalog, config) as session:
            target = next((s for s in session.state.saved_searches if s.name == name), None)
            if target is None:
                console.print(f"[red]Error: no saved search named '{name}'[/red]")
                raise typer.Exit(1)

            session.load_saved_search(target)
            await session.flush()
            results = session.state.results
            if not results:
                console.print(f"[yellow]Saved search '{name}' returned no results.[/yellow]")
                return
            console.print(results_table(results, f"Saved search '{name}'"))

    run_async(_run())
