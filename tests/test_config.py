"""Tests for config file parsing and environment overrides."""

from __future__ import annotations

import pytest

from docstore import ConfigError, DocstoreConfig, load_config, parse_config
from docstore.config import apply_env_overrides

CONFIG_YAML = """\
database:
  url: postgresql+psycopg://docstore:secret@db/annotations
  pool_size: 10
timeouts:
  read_ms: 2000
max_workers: 4
log_level: DEBUG
tables:
  draft_annotations:
    key_column: uuid
    body_column: body
    hash_column: hash
    conflict_detection: true
    metadata:
      _timestamp: last_modified
      X-Request-Id: publish_ref
  versioned_content:
    key_column: uuid
    body_column: body
    params:
      version: content_version
    write_timeout_ms: 500
"""


class TestLoadConfig:
    def test_full_file(self, tmp_path):
        path = tmp_path / "docstore.yml"
        path.write_text(CONFIG_YAML, encoding="utf-8")

        loaded = load_config(str(path))

        assert loaded.config.database_url.startswith("postgresql+psycopg://")
        assert loaded.config.pool_size == 10
        assert loaded.config.read_timeout_ms == 2000
        assert loaded.config.write_timeout_ms == DocstoreConfig().write_timeout_ms
        assert loaded.config.max_workers == 4
        assert loaded.config.log_level == "DEBUG"

        drafts = loaded.registry.get("draft_annotations")
        assert drafts.conflict_detection
        assert dict(drafts.metadata_columns) == {
            "_timestamp": "last_modified",
            "x-request-id": "publish_ref",
        }
        versioned = loaded.registry.get("versioned_content")
        assert dict(versioned.param_columns) == {"version": "content_version"}
        assert versioned.write_timeout_ms == 500

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        loaded = load_config(str(path))
        assert loaded.config == DocstoreConfig()
        assert len(loaded.registry) == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("tables: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="cannot parse"):
            load_config(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(str(path))


class TestParseConfig:
    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigError):
            parse_config({"database": {"uri": "sqlite:///x.db"}})

    def test_table_requires_key_and_body(self):
        with pytest.raises(ConfigError):
            parse_config({"tables": {"notes": {"key_column": "id"}}})

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ConfigError):
            parse_config({"timeouts": {"read_ms": 0}})

    def test_schema_errors_surface_as_config_error(self):
        with pytest.raises(ConfigError, match="hash column"):
            parse_config(
                {
                    "tables": {
                        "drafts": {
                            "key_column": "uuid",
                            "body_column": "body",
                            "conflict_detection": True,
                        }
                    }
                }
            )


class TestEnvOverrides:
    def test_db_url_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCSTORE_DB_URL", "sqlite:///from-env.db")
        config = apply_env_overrides(DocstoreConfig(database_url="sqlite:///file.db"))
        assert config.database_url == "sqlite:///from-env.db"

    def test_no_env_keeps_file_value(self, monkeypatch):
        monkeypatch.delenv("DOCSTORE_DB_URL", raising=False)
        config = apply_env_overrides(DocstoreConfig(database_url="sqlite:///file.db"))
        assert config.database_url == "sqlite:///file.db"
