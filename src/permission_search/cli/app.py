from typing import Optional

import typer

from permission_search.config import ConfigManager
from permission_search.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import permission_search

        typer.echo(f"permission-search version: {permission_search.__version__}")
        raise typer.Exit()


app = typer.Typer(name="permission-search")


@app.callback()
def app_callback(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level",
        envvar="PERMISSION_SEARCH_LOG_LEVEL",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Search, rank and export permissions from a permission catalog."""
    config = ConfigManager().config
    setup_logging(level=(log_level or config.log_level).upper())
    ctx.obj = config
