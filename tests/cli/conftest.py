"""Shared fixtures for CLI tests."""

from __future__ import annotations

import pytest
import yaml
from typer.testing import CliRunner

from docstore.cli import app


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    """Write a config file with a temp SQLite database and three tables."""
    monkeypatch.delenv("DOCSTORE_CONFIG", raising=False)
    monkeypatch.delenv("DOCSTORE_DB_URL", raising=False)
    data = {
        "database": {"url": f"sqlite:///{tmp_path / 'cli_test.db'}", "pool_size": 2},
        "timeouts": {"read_ms": 5000, "write_ms": 5000},
        "tables": {
            "draft_annotations": {
                "key_column": "uuid",
                "body_column": "body",
                "hash_column": "hash",
                "conflict_detection": True,
                "metadata": {
                    "_timestamp": "last_modified",
                    "x-request-id": "publish_ref",
                    "x-origin-system-id": "origin_system_id",
                },
            },
            "versioned_content": {
                "key_column": "uuid",
                "body_column": "body",
                "params": {"version": "content_version"},
            },
            "notes": {"key_column": "id", "body_column": "content"},
        },
    }
    path = tmp_path / "docstore.yml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return str(path)


@pytest.fixture
def initialised(runner, cli_config):
    """Config whose tables have already been created."""
    result = invoke(runner, ["init"], cli_config)
    assert result.exit_code == 0
    return cli_config


def invoke(runner: CliRunner, args: list[str], config_path: str | None = None, **kwargs):
    """Invoke CLI with the config file injected before the subcommand."""
    if config_path:
        args = ["--config", config_path] + args
    return runner.invoke(app, args, catch_exceptions=False, **kwargs)
