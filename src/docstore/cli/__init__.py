"""docstore CLI: operator console for reading and writing configured tables."""

from __future__ import annotations

from typing import Optional

import typer

from docstore.cli import init_cmd, read_cmd, tables, write_cmd

app = typer.Typer(
    name="docstore",
    help="docstore CLI — read and write documents stored in configured tables.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    config: str | None = None
    db_url: str | None = None
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("docstore")
        except Exception:
            v = "unknown"
        print(f"docstore {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar="DOCSTORE_CONFIG",
        help="YAML file with database settings and table schemas",
    ),
    db_url: Optional[str] = typer.Option(
        None,
        "--db-url",
        help="Database URL, overrides the config file and DOCSTORE_DB_URL",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all docstore commands."""
    state.config = config
    state.db_url = db_url
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="init")(init_cmd.init_cmd)
app.command(name="tables")(tables.tables_cmd)
app.command(name="read")(read_cmd.read_cmd)
app.command(name="write")(write_cmd.write_cmd)


def main() -> None:
    """Entry point for the docstore CLI."""
    app()
