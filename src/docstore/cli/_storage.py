"""CLI helpers for config loading and store construction."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

from docstore.config import LoadedConfig, apply_env_overrides, load_config
from docstore.errors import ConfigError
from docstore.facade import AccessFacade
from docstore.storage import DocumentStore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_runtime() -> LoadedConfig:
    """Load the config file selected on the command line, with overrides applied.

    Precedence for the database URL: --db-url, DOCSTORE_DB_URL, config file.
    """
    from docstore.cli import state

    if not state.config:
        raise ConfigError("no configuration file given (use --config or DOCSTORE_CONFIG)")

    loaded = load_config(state.config)
    config = apply_env_overrides(loaded.config)
    if state.db_url:
        config = replace(config, database_url=state.db_url)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO), format=LOG_FORMAT
    )
    return LoadedConfig(config=config, registry=loaded.registry)


@contextmanager
def open_store() -> Iterator[DocumentStore]:
    runtime = load_runtime()
    store = DocumentStore.from_config(runtime.config, runtime.registry)
    try:
        yield store
    finally:
        store.close()


@contextmanager
def open_facade() -> Iterator[AccessFacade]:
    """Open a store and a facade using its configured deadlines."""
    runtime = load_runtime()
    store = DocumentStore.from_config(runtime.config, runtime.registry)
    try:
        with AccessFacade(store, runtime.registry, runtime.config) as facade:
            yield facade
    finally:
        store.close()
