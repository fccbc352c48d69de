"""docstore: schema-configured document storage over relational tables."""

__version__ = "0.1.0"

from docstore.config import DocstoreConfig, LoadedConfig, load_config, parse_config
from docstore.context import RequestContext, background, new_transaction_id
from docstore.document import Document, Metadata, hash_body
from docstore.errors import (
    ConfigError,
    DocstoreError,
    DocumentNotFoundError,
    MissingParameterError,
    RequestTimeoutError,
    StorageBackendError,
    UnknownTableError,
)
from docstore.events import ConflictEvent, EventSink, LoggingEventSink, RecordingEventSink
from docstore.facade import AccessFacade, DocumentReadWriter
from docstore.schema import SchemaRegistry, TableSchema
from docstore.storage import DocumentStore, Outcome, WriteResult, create_tables, open_engine

__all__ = [
    "__version__",
    "DocstoreConfig",
    "LoadedConfig",
    "load_config",
    "parse_config",
    "RequestContext",
    "background",
    "new_transaction_id",
    "Document",
    "Metadata",
    "hash_body",
    "DocstoreError",
    "ConfigError",
    "UnknownTableError",
    "DocumentNotFoundError",
    "MissingParameterError",
    "RequestTimeoutError",
    "StorageBackendError",
    "ConflictEvent",
    "EventSink",
    "LoggingEventSink",
    "RecordingEventSink",
    "AccessFacade",
    "DocumentReadWriter",
    "SchemaRegistry",
    "TableSchema",
    "DocumentStore",
    "Outcome",
    "WriteResult",
    "create_tables",
    "open_engine",
]
