"""Main CLI entry point for permission-search."""  # pragma: no cover

from permission_search.cli.app import app  # pragma: no cover

# Register commands
from permission_search.cli.commands import history, search  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
