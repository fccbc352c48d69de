"""Tests for TableSchema validation and the SchemaRegistry."""

from __future__ import annotations

import pytest

from docstore import ConfigError, SchemaRegistry, TableSchema, UnknownTableError


def _schema(**overrides) -> TableSchema:
    fields = {"name": "draft_annotations", "key_column": "uuid", "body_column": "body"}
    fields.update(overrides)
    return TableSchema(**fields)


class TestTableSchema:
    def test_columns_key_first(self):
        schema = _schema(
            hash_column="hash",
            metadata_columns={"_timestamp": "last_modified"},
            param_columns={"version": "content_version"},
        )
        assert schema.columns == ["uuid", "body", "hash", "last_modified", "content_version"]
        assert schema.supports_metadata

    def test_metadata_keys_lowercased(self):
        schema = _schema(metadata_columns={"X-Origin-System-Id": "origin_system_id"})
        assert dict(schema.metadata_columns) == {"x-origin-system-id": "origin_system_id"}

    def test_mappings_are_read_only(self):
        schema = _schema(metadata_columns={"_timestamp": "last_modified"})
        with pytest.raises(TypeError):
            schema.metadata_columns["x"] = "y"  # type: ignore[index]

    def test_frozen(self):
        schema = _schema()
        with pytest.raises(AttributeError):
            schema.key_column = "other"  # type: ignore[misc]

    def test_conflict_detection_requires_hash_column(self):
        with pytest.raises(ConfigError, match="without a hash column"):
            _schema(conflict_detection=True)

    def test_duplicate_column_rejected(self):
        with pytest.raises(ConfigError, match="mapped more than once"):
            _schema(metadata_columns={"_timestamp": "body"})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "drafts; DROP TABLE x"},
            {"key_column": "uuid--"},
            {"metadata_columns": {"_timestamp": "last modified"}},
            {"param_columns": {"id": "1col"}},
        ],
    )
    def test_invalid_identifiers_rejected(self, overrides):
        with pytest.raises(ConfigError, match="invalid"):
            _schema(**overrides)


class TestSchemaRegistry:
    def test_lookup(self):
        registry = SchemaRegistry([_schema()])
        assert registry.lookup("draft_annotations") is not None
        assert registry.lookup("missing") is None

    def test_get_unknown_raises(self):
        registry = SchemaRegistry([_schema()])
        with pytest.raises(UnknownTableError) as exc_info:
            registry.get("missing")
        assert exc_info.value.table == "missing"

    def test_tables_in_configured_order(self):
        registry = SchemaRegistry([_schema(name="b"), _schema(name="a")])
        assert registry.tables() == ["b", "a"]
        assert [s.name for s in registry] == ["b", "a"]
        assert len(registry) == 2
        assert "a" in registry

    def test_duplicate_table_rejected(self):
        with pytest.raises(ConfigError, match="more than once"):
            SchemaRegistry([_schema(), _schema()])
