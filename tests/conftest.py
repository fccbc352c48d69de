"""Shared test fixtures for docstore tests."""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from docstore import (
    DocstoreConfig,
    DocumentStore,
    RecordingEventSink,
    RequestContext,
    SchemaRegistry,
    TableSchema,
    create_tables,
)

# --- Test table layouts ---

PUBLISHED = "published_annotations"
DRAFTS = "draft_annotations"
CONTENT = "draft_content"
VERSIONED = "versioned_content"
PLAIN = "notes"

KEY_COLUMN = "uuid"
BODY_COLUMN = "body"
HASH_COLUMN = "hash"
LAST_MODIFIED_COLUMN = "last_modified"
PUBLISH_REF_COLUMN = "publish_ref"

TIMESTAMP_KEY = "_timestamp"
TID_KEY = "x-request-id"
ORIGIN_KEY = "x-origin-system-id"

_STANDARD_METADATA = {
    TIMESTAMP_KEY: LAST_MODIFIED_COLUMN,
    TID_KEY: PUBLISH_REF_COLUMN,
}


def make_schemas() -> list[TableSchema]:
    return [
        TableSchema(
            name=PUBLISHED,
            key_column=KEY_COLUMN,
            body_column=BODY_COLUMN,
            hash_column=HASH_COLUMN,
            metadata_columns=_STANDARD_METADATA,
        ),
        TableSchema(
            name=DRAFTS,
            key_column=KEY_COLUMN,
            body_column=BODY_COLUMN,
            hash_column=HASH_COLUMN,
            conflict_detection=True,
            metadata_columns=_STANDARD_METADATA,
        ),
        TableSchema(
            name=CONTENT,
            key_column=KEY_COLUMN,
            body_column=BODY_COLUMN,
            hash_column=HASH_COLUMN,
            conflict_detection=True,
            metadata_columns={**_STANDARD_METADATA, ORIGIN_KEY: "origin_system_id"},
        ),
        TableSchema(
            name=VERSIONED,
            key_column=KEY_COLUMN,
            body_column=BODY_COLUMN,
            hash_column=HASH_COLUMN,
            param_columns={"version": "content_version"},
        ),
        TableSchema(name=PLAIN, key_column="id", body_column="content"),
        TableSchema(
            name="T",
            key_column="id",
            body_column="body",
            hash_column="hash",
            conflict_detection=True,
            metadata_columns={TIMESTAMP_KEY: LAST_MODIFIED_COLUMN},
        ),
    ]


def fetch_row(engine: Engine, table: str, key_column: str, key: str, columns: list[str]) -> Any:
    """Read raw column values straight from the database."""
    sql = f"SELECT {', '.join(columns)} FROM {table} WHERE {key_column} = :key"
    with engine.connect() as conn:
        row = conn.execute(text(sql), {"key": key}).first()
    return None if row is None else dict(zip(columns, row))


# --- Fixtures ---


@pytest.fixture
def registry():
    return SchemaRegistry(make_schemas())


@pytest.fixture
def db_url(tmp_path):
    """SQLite database URL in a temporary directory."""
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def config(db_url):
    return DocstoreConfig(database_url=db_url, read_timeout_ms=2000, write_timeout_ms=2000)


@pytest.fixture
def events():
    return RecordingEventSink()


@pytest.fixture
def store(config, registry, events):
    """DocumentStore over a fresh database with every test table created."""
    s = DocumentStore.from_config(config, registry, events=events)
    create_tables(s.engine, registry)
    yield s
    s.close()


@pytest.fixture
def ctx():
    return RequestContext(transaction_id="tid_test")
