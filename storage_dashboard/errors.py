"""Error taxonomy for the storage dashboard.

Errors that reach the HTTP layer carry their status code and a short
machine-readable type; the exception handler in main renders them as
``{"error": <message>, "type": <error_type>}``.

ParseError and DeletionError are recovered where they occur (one value,
one workspace directory) and never reach a response on their own.
"""

from fastapi import status


class StorageDashboardError(Exception):
    """Base class for all dashboard errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "internal_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(StorageDashboardError):
    """Raised when the workspace storage path is not configured."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "configuration_error"


class InvalidRequestError(StorageDashboardError):
    """Raised for malformed request parameters."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "invalid_request"


class NotFoundError(StorageDashboardError):
    """Raised when a file, key or directory does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class DatabaseNotFoundError(NotFoundError):
    """Raised when a database file does not exist."""

    error_type = "database_not_found"


class EntryNotFoundError(NotFoundError):
    """Raised when a key is not present in a database table."""

    error_type = "entry_not_found"


class WorkspaceRootNotFoundError(NotFoundError):
    """Raised when the configured workspace storage directory is missing."""

    error_type = "workspace_root_not_found"


class StorageUnavailableError(StorageDashboardError):
    """Raised by the health check when the workspace storage is not accessible."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_type = "storage_unavailable"


class QueryError(StorageDashboardError):
    """Raised when SQLite cannot open or query a database file."""

    error_type = "query_failed"


class ParseError(StorageDashboardError):
    """Raised when a stored value or metadata file is not valid JSON."""

    error_type = "parse_error"


class DeletionError(StorageDashboardError):
    """Raised when a workspace directory cannot be removed."""

    error_type = "deletion_failed"
