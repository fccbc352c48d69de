"""SQL statement construction driven by table schemas.

Table and column identifiers come only from ``TableSchema`` (validated at load
time); request values are always bound parameters.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import (
    Column,
    Insert,
    LargeBinary,
    MetaData,
    Select,
    String,
    Table,
    Text,
    Update,
    bindparam,
    column,
    insert,
    select,
    table,
    update,
)
from sqlalchemy.sql.expression import TableClause

from docstore.document import Document
from docstore.errors import MissingParameterError
from docstore.schema import TableSchema


def table_clause(schema: TableSchema) -> TableClause:
    return table(schema.name, *(column(c) for c in schema.columns))


def select_document(schema: TableSchema) -> Select[Any]:
    """SELECT body, hash and metadata columns for one key.

    Result columns: body, then hash when configured, then metadata columns
    in schema order.
    """
    t = table_clause(schema)
    cols = [t.c[schema.body_column]]
    if schema.hash_column:
        cols.append(t.c[schema.hash_column])
    cols.extend(t.c[c] for c in schema.metadata_columns.values())
    return select(*cols).where(t.c[schema.key_column] == bindparam("key"))


def select_existing(schema: TableSchema) -> Select[Any]:
    """Lookup used by the write path to decide between create and update.

    Selects the stored hash when the table runs conflict detection, else the
    key alone. Rows are locked where the dialect supports FOR UPDATE.
    """
    t = table_clause(schema)
    if schema.conflict_detection and schema.hash_column:
        target = t.c[schema.hash_column]
    else:
        target = t.c[schema.key_column]
    return (
        select(target).where(t.c[schema.key_column] == bindparam("key")).with_for_update()
    )


def row_values(
    schema: TableSchema,
    key: str,
    doc: Document,
    params: Mapping[str, str] | None,
    doc_hash: str,
) -> dict[str, Any]:
    """Column values for a document write.

    Metadata keys and params with no configured column are dropped. A
    metadata column whose key is absent is written as NULL.
    """
    params = params or {}
    values: dict[str, Any] = {schema.key_column: key, schema.body_column: doc.body}
    if schema.hash_column:
        values[schema.hash_column] = doc_hash
    for meta_key, col in schema.metadata_columns.items():
        values[col] = doc.metadata.get(meta_key)
    for param, col in schema.param_columns.items():
        if param not in params:
            raise MissingParameterError(schema.name, param)
        values[col] = params[param]
    return values


def insert_document(schema: TableSchema, values: Mapping[str, Any]) -> Insert:
    return insert(table_clause(schema)).values(dict(values))


def update_document(schema: TableSchema, key: str, values: Mapping[str, Any]) -> Update:
    t = table_clause(schema)
    changes = {c: v for c, v in values.items() if c != schema.key_column}
    return update(t).where(t.c[schema.key_column] == key).values(changes)


def table_definition(schema: TableSchema, metadata: MetaData) -> Table:
    """DDL model of a configured table, for creating it when absent."""
    cols: list[Column[Any]] = [
        Column(schema.key_column, String(255), primary_key=True),
        Column(schema.body_column, LargeBinary, nullable=False),
    ]
    if schema.hash_column:
        cols.append(Column(schema.hash_column, String(64)))
    cols.extend(Column(c, Text) for c in schema.metadata_columns.values())
    cols.extend(Column(c, Text) for c in schema.param_columns.values())
    return Table(schema.name, metadata, *cols)
