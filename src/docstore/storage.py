"""Storage engine: schema-driven document reads and writes over SQLAlchemy."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Connection, Engine, Row, make_url
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.pool import QueuePool

from docstore.config import DocstoreConfig
from docstore.context import RequestContext
from docstore.document import Document, Metadata
from docstore.errors import (
    ConfigError,
    DocumentNotFoundError,
    RequestTimeoutError,
    StorageBackendError,
)
from docstore.events import ConflictEvent, EventSink, LoggingEventSink
from docstore.schema import SchemaRegistry, TableSchema
from docstore.statements import (
    insert_document,
    row_values,
    select_document,
    select_existing,
    table_definition,
    update_document,
)

logger = logging.getLogger(__name__)

WRITE_OPTION = "docstore_write"


class Outcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a successful write and the hash now stored for the document."""

    outcome: Outcome
    hash: str

    @property
    def created(self) -> bool:
        return self.outcome is Outcome.CREATED


class _CreateRaced(Exception):
    """Insert lost to a concurrent create of the same key."""


def _configure_sqlite(engine: Engine) -> None:
    """Serialise lookup-then-write transactions at the database.

    pysqlite defers BEGIN until the first DML statement, so the lookup would
    run outside the write lock. Connections marked with the ``docstore_write``
    execution option take the lock up front, so concurrent writers wait on
    the busy timeout instead of failing on upgrade. Other transactions use a
    deferred BEGIN and read the last committed state under WAL.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Connection) -> None:
        if conn.get_execution_options().get(WRITE_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def open_engine(config: DocstoreConfig) -> Engine:
    """Create the shared engine and connection pool for a configuration."""
    url = make_url(config.database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database in (None, "", ":memory:"):
        raise ConfigError("in-memory SQLite databases cannot be shared by a connection pool")

    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(
        url,
        poolclass=QueuePool,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_s,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    if is_sqlite:
        _configure_sqlite(engine)
    return engine


def create_tables(engine: Engine, registry: SchemaRegistry) -> list[str]:
    """Create configured tables that do not exist yet. Existing tables are untouched."""
    metadata = MetaData()
    for schema in registry:
        table_definition(schema, metadata)
    try:
        metadata.create_all(engine, checkfirst=True)
    except SQLAlchemyError as e:
        raise StorageBackendError("create_tables", str(e)) from e
    return registry.tables()


def _describe(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def _document_from_row(schema: TableSchema, row: Row[Any]) -> Document:
    values = list(row)
    body = values.pop(0)
    if isinstance(body, str):
        body = body.encode("utf-8")
    doc_hash = ""
    if schema.hash_column:
        doc_hash = values.pop(0) or ""

    metadata = Metadata()
    for meta_key, value in zip(schema.metadata_columns, values):
        if value is not None:
            metadata[meta_key] = str(value)
    return Document(body=bytes(body), metadata=metadata, hash=doc_hash)


class DocumentStore:
    """Reads and writes documents as rows of schema-configured tables."""

    def __init__(
        self,
        engine: Engine,
        registry: SchemaRegistry,
        *,
        events: EventSink | None = None,
    ) -> None:
        self._engine = engine
        self._registry = registry
        self._events = events or LoggingEventSink()

    @classmethod
    def from_config(
        cls,
        config: DocstoreConfig,
        registry: SchemaRegistry,
        *,
        events: EventSink | None = None,
    ) -> DocumentStore:
        return cls(open_engine(config), registry, events=events)

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def engine(self) -> Engine:
        return self._engine

    def close(self) -> None:
        self._engine.dispose()

    def pool_status(self) -> dict[str, int]:
        pool = self._engine.pool
        checked_out = getattr(pool, "checkedout", None)
        size = getattr(pool, "size", None)
        return {
            "checked_out": checked_out() if callable(checked_out) else 0,
            "size": size() if callable(size) else 0,
        }

    @contextmanager
    def _connection(self, ctx: RequestContext, operation: str) -> Iterator[Connection]:
        """One pooled connection in one transaction, released on exit.

        Cancelling ``ctx`` while the block runs interrupts the in-flight
        statement when the driver exposes ``interrupt()`` (sqlite3 does).
        """
        ctx.check(operation)
        try:
            with self._engine.connect() as conn:
                conn.execution_options(**{WRITE_OPTION: operation == "write"})
                with conn.begin():
                    interrupt = getattr(conn.connection.dbapi_connection, "interrupt", None)
                    if interrupt is None:
                        yield conn
                    else:
                        with ctx.on_cancel(interrupt):
                            yield conn
        except SQLAlchemyError as e:
            if ctx.done:
                raise RequestTimeoutError(f"document {operation} request timed out") from e
            raise StorageBackendError(operation, _describe(e)) from e

    # --- Read ---

    def read(self, ctx: RequestContext, table: str, key: str) -> Document:
        schema = self._registry.get(table)
        with self._connection(ctx, "read") as conn:
            row = conn.execute(select_document(schema), {"key": key}).first()
        if row is None:
            raise DocumentNotFoundError(table, key)
        return _document_from_row(schema, row)

    # --- Write ---

    def write(
        self,
        ctx: RequestContext,
        table: str,
        key: str,
        doc: Document,
        params: Mapping[str, str] | None = None,
        previous_hash: str = "",
    ) -> WriteResult:
        """Create or update the row for ``key``.

        On tables with conflict detection a non-empty ``previous_hash`` that
        differs from the stored hash is reported to the event sink; the write
        still replaces the row.
        """
        schema = self._registry.get(table)
        doc_hash = doc.compute_hash()
        values = row_values(schema, key, doc, params, doc_hash)

        try:
            with self._connection(ctx, "write") as conn:
                outcome, conflict = self._put_row(ctx, conn, schema, key, values, previous_hash)
        except _CreateRaced as race:
            logger.debug("concurrent create of %s/%s, retrying as update", table, key)
            with self._connection(ctx, "write") as conn:
                outcome, conflict = self._put_row(
                    ctx, conn, schema, key, values, previous_hash, create_failure=race.__cause__
                )

        if conflict:
            self._events.emit(
                ConflictEvent(table=table, key=key, transaction_id=ctx.transaction_id)
            )
        logger.debug(
            "document %s",
            outcome.value,
            extra={"table": table, "key": key, "transaction_id": ctx.transaction_id},
        )
        return WriteResult(outcome=outcome, hash=doc_hash)

    def _put_row(
        self,
        ctx: RequestContext,
        conn: Connection,
        schema: TableSchema,
        key: str,
        values: dict[str, Any],
        previous_hash: str,
        *,
        create_failure: BaseException | None = None,
    ) -> tuple[Outcome, bool]:
        ctx.check("write")
        existing = conn.execute(select_existing(schema), {"key": key}).first()

        if existing is None:
            if isinstance(create_failure, SQLAlchemyError):
                raise StorageBackendError("write", _describe(create_failure))
            ctx.check("write")
            try:
                conn.execute(insert_document(schema, values))
            except IntegrityError as e:
                raise _CreateRaced() from e
            return Outcome.CREATED, False

        conflict = False
        if schema.conflict_detection:
            stored_hash = existing[0] or ""
            conflict = bool(previous_hash) and previous_hash != stored_hash

        ctx.check("write")
        conn.execute(update_document(schema, key, values))
        return Outcome.UPDATED, conflict
