"""docstore init — create configured tables that do not exist yet."""

from __future__ import annotations

import typer

from docstore.cli import _exitcodes as ec
from docstore.cli._output import print_error, print_object
from docstore.cli._storage import open_store
from docstore.errors import DocstoreError
from docstore.storage import create_tables


def init_cmd() -> None:
    """Create every configured table that is missing from the database."""
    from docstore.cli import state

    try:
        with open_store() as store:
            created = create_tables(store.engine, store.registry)
            url = store.engine.url.render_as_string(hide_password=True)
    except DocstoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.for_error(e))

    print_object({"database": url, "tables": created}, json_mode=state.json_output)
