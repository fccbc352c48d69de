"""Structured error types for docstore."""

from __future__ import annotations


class DocstoreError(Exception):
    """Base error for all docstore errors."""


class ConfigError(DocstoreError):
    """Raised when a configuration file cannot be loaded or fails validation."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid configuration: {detail}")


class UnknownTableError(DocstoreError):
    """Raised when a table has no registered schema."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"No schema registered for table '{table}'")


class DocumentNotFoundError(DocstoreError):
    """Raised when a read finds no row for the requested key."""

    def __init__(self, table: str, key: str) -> None:
        self.table = table
        self.key = key
        super().__init__("No document found.")


class MissingParameterError(DocstoreError):
    """Raised when a write omits a parameter that the table maps to a column."""

    def __init__(self, table: str, param: str) -> None:
        self.table = table
        self.param = param
        super().__init__(f"Missing parameter '{param}' required by table '{table}'")


class RequestTimeoutError(DocstoreError):
    """Raised when the request deadline elapses before the backend responds."""

    def __init__(self, message: str = "document request timed out") -> None:
        super().__init__(message)


class StorageBackendError(DocstoreError):
    """Raised when backend storage operations fail."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage backend error during {operation}: {detail}")
