"""permission-search - ranked, filterable search over permission catalogs."""

__version__ = "0.1.0"
