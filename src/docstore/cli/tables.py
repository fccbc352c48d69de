"""docstore tables — list configured table schemas."""

from __future__ import annotations

from collections.abc import Mapping

import typer

from docstore.cli import _exitcodes as ec
from docstore.cli._output import print_error, print_table
from docstore.cli._storage import load_runtime
from docstore.errors import DocstoreError


def tables_cmd() -> None:
    """Show how each configured table maps documents to columns."""
    from docstore.cli import state

    try:
        runtime = load_runtime()
    except DocstoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.for_error(e))

    config = runtime.config
    headers = [
        "table",
        "key_column",
        "body_column",
        "hash_column",
        "conflict_detection",
        "metadata",
        "params",
        "read_timeout_ms",
        "write_timeout_ms",
    ]
    rows = []
    for schema in runtime.registry:
        metadata: object = dict(schema.metadata_columns)
        params: object = dict(schema.param_columns)
        if not state.json_output:
            metadata = _pairs(schema.metadata_columns)
            params = _pairs(schema.param_columns)
        rows.append(
            [
                schema.name,
                schema.key_column,
                schema.body_column,
                schema.hash_column or "",
                schema.conflict_detection,
                metadata,
                params,
                schema.read_timeout_ms or config.read_timeout_ms,
                schema.write_timeout_ms or config.write_timeout_ms,
            ]
        )
    print_table(headers, rows, json_mode=state.json_output)


def _pairs(mapping: Mapping[str, str]) -> str:
    return ",".join(f"{k}={v}" for k, v in mapping.items())
