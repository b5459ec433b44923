"""
Custom exceptions for permission search.
"""


class PermissionSearchError(Exception):
    """Base exception for all permission search errors."""

    pass


class CatalogLoadError(PermissionSearchError):
    """Raised when the catalog provider fails to return permissions."""

    pass


class ScoringError(PermissionSearchError):
    """Raised when a single index entry cannot be scored."""

    def __init__(self, entry_name: str, cause: Exception | None = None):
        self.entry_name = entry_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to score permission '{entry_name}'{detail}")


class SearchValidationError(PermissionSearchError):
    """Raised when a write operation is rejected before any state changes."""

    pass


class StoreError(PermissionSearchError):
    """Raised when history or saved searches cannot be loaded or persisted."""

    pass
