"""docstore write — create or update one document."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from docstore.cli import _exitcodes as ec
from docstore.cli._output import parse_pairs, print_error, print_object
from docstore.cli._storage import open_facade
from docstore.context import new_transaction_id
from docstore.document import Document
from docstore.errors import DocstoreError

TIMESTAMP_KEY = "_timestamp"
TRANSACTION_ID_KEY = "x-request-id"


def _timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def write_cmd(
    table: str = typer.Argument(..., help="Configured table name"),
    key: str = typer.Argument(..., help="Document key"),
    body: Optional[str] = typer.Option(None, "--body", help="Document body"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="Read the body from a file"
    ),
    previous_hash: str = typer.Option(
        "", "--previous-hash", help="Hash the caller last read, for conflict detection"
    ),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Metadata KEY=VALUE (repeatable)"
    ),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-p", help="Extra column parameter KEY=VALUE (repeatable)"
    ),
    transaction_id: Optional[str] = typer.Option(
        None, "--transaction-id", help="Transaction id (generated when omitted)"
    ),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", min=1, help="Override the table's write deadline"
    ),
) -> None:
    """Write a document; the body comes from --body, --file or stdin."""
    from docstore.cli import state

    if body is not None and file is not None:
        print_error("--body and --file are mutually exclusive")
        raise typer.Exit(ec.USAGE_ERROR)

    if body is not None:
        payload = body.encode("utf-8")
    elif file is not None:
        payload = file.read_bytes()
    else:
        payload = typer.get_binary_stream("stdin").read()

    tid = transaction_id or new_transaction_id()
    doc = Document(payload)
    for k, v in parse_pairs(header, "--header").items():
        doc.metadata[k.lower()] = v
    doc.metadata[TIMESTAMP_KEY] = _timestamp()
    doc.metadata[TRANSACTION_ID_KEY] = tid
    params = parse_pairs(param, "--param")

    timeout_s = timeout_ms / 1000 if timeout_ms else None
    try:
        with open_facade() as facade:
            result = facade.write(
                table,
                key,
                doc,
                params,
                previous_hash,
                transaction_id=tid,
                timeout_s=timeout_s,
            )
    except DocstoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.for_error(e))

    if state.json_output:
        print_object(
            {"table": table, "key": key, "outcome": result.outcome.value, "hash": result.hash},
            json_mode=True,
        )
    else:
        print(f"{result.outcome.value} {result.hash}")
