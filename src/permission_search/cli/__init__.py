"""Command line interface for permission-search."""
