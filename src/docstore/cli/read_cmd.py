"""docstore read — fetch one document by key."""

from __future__ import annotations

from typing import Optional

import typer

from docstore.cli import _exitcodes as ec
from docstore.cli._output import print_error, print_object
from docstore.cli._storage import open_facade
from docstore.context import new_transaction_id
from docstore.errors import DocstoreError


def read_cmd(
    table: str = typer.Argument(..., help="Configured table name"),
    key: str = typer.Argument(..., help="Document key"),
    transaction_id: Optional[str] = typer.Option(
        None, "--transaction-id", help="Transaction id (generated when omitted)"
    ),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", min=1, help="Override the table's read deadline"
    ),
) -> None:
    """Print a document body (or, with --json, body, hash and metadata)."""
    from docstore.cli import state

    tid = transaction_id or new_transaction_id()
    timeout_s = timeout_ms / 1000 if timeout_ms else None
    try:
        with open_facade() as facade:
            doc = facade.read(table, key, transaction_id=tid, timeout_s=timeout_s)
    except DocstoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.for_error(e))

    if state.json_output:
        print_object(
            {
                "table": table,
                "key": key,
                "hash": doc.hash,
                "metadata": dict(doc.metadata),
                "body": doc.body.decode("utf-8", errors="replace"),
            },
            json_mode=True,
        )
        return

    typer.echo(doc.body, nl=False)
