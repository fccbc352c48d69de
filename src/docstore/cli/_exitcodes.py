"""Process exit codes for the docstore CLI."""

from __future__ import annotations

from docstore.errors import (
    ConfigError,
    DocumentNotFoundError,
    MissingParameterError,
    RequestTimeoutError,
    StorageBackendError,
    UnknownTableError,
)

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
DATABASE_ERROR = 3
NOT_FOUND = 4
TIMEOUT = 5
UNKNOWN_TABLE = 6

_BY_ERROR: list[tuple[type[Exception], int]] = [
    (UnknownTableError, UNKNOWN_TABLE),
    (DocumentNotFoundError, NOT_FOUND),
    (RequestTimeoutError, TIMEOUT),
    (StorageBackendError, DATABASE_ERROR),
    (MissingParameterError, USAGE_ERROR),
    (ConfigError, USAGE_ERROR),
]


def for_error(exc: Exception) -> int:
    """Exit code for an error raised by the store."""
    for error_type, code in _BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return GENERAL_ERROR
