"""Configuration for the docstore runtime and its table schemas."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docstore.errors import ConfigError
from docstore.schema import SchemaRegistry, TableSchema


@dataclass
class DocstoreConfig:
    """Configuration for the store, its connection pool and request deadlines."""

    database_url: str = "sqlite:///docstore.db"
    pool_size: int = 5
    max_overflow: int = 5
    pool_timeout_s: float = 30.0
    read_timeout_ms: int = 8000
    write_timeout_ms: int = 8000
    max_workers: int = 16
    log_level: str = "INFO"


# --- File format ---


class _DatabaseSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str | None = None
    pool_size: int | None = Field(default=None, ge=1)
    max_overflow: int | None = Field(default=None, ge=0)
    pool_timeout_s: float | None = Field(default=None, gt=0)


class _TimeoutSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    read_ms: int | None = Field(default=None, gt=0)
    write_ms: int | None = Field(default=None, gt=0)


class _TableSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key_column: str
    body_column: str
    hash_column: str | None = None
    conflict_detection: bool = False
    metadata: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    read_timeout_ms: int | None = Field(default=None, gt=0)
    write_timeout_ms: int | None = Field(default=None, gt=0)


class _ConfigFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    database: _DatabaseSection = Field(default_factory=_DatabaseSection)
    timeouts: _TimeoutSection = Field(default_factory=_TimeoutSection)
    max_workers: int | None = Field(default=None, ge=1)
    log_level: str | None = None
    tables: dict[str, _TableSection] = Field(default_factory=dict)


@dataclass(frozen=True)
class LoadedConfig:
    """Runtime config plus the schema registry parsed from the same file."""

    config: DocstoreConfig
    registry: SchemaRegistry


def _table_schema(name: str, section: _TableSection) -> TableSchema:
    return TableSchema(
        name=name,
        key_column=section.key_column,
        body_column=section.body_column,
        metadata_columns=section.metadata,
        param_columns=section.params,
        hash_column=section.hash_column,
        conflict_detection=section.conflict_detection,
        read_timeout_ms=section.read_timeout_ms,
        write_timeout_ms=section.write_timeout_ms,
    )


def parse_config(data: dict[str, Any] | None) -> LoadedConfig:
    """Validate an already-decoded config document."""
    try:
        parsed = _ConfigFile.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(str(e)) from e

    overrides: dict[str, Any] = {
        "database_url": parsed.database.url,
        "pool_size": parsed.database.pool_size,
        "max_overflow": parsed.database.max_overflow,
        "pool_timeout_s": parsed.database.pool_timeout_s,
        "read_timeout_ms": parsed.timeouts.read_ms,
        "write_timeout_ms": parsed.timeouts.write_ms,
        "max_workers": parsed.max_workers,
        "log_level": parsed.log_level,
    }
    config = replace(DocstoreConfig(), **{k: v for k, v in overrides.items() if v is not None})
    registry = SchemaRegistry(_table_schema(name, t) for name, t in parsed.tables.items())
    return LoadedConfig(config=config, registry=registry)


def load_config(path: str) -> LoadedConfig:
    """Load runtime config and table schemas from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return parse_config(data)


def apply_env_overrides(config: DocstoreConfig) -> DocstoreConfig:
    """Apply DOCSTORE_* environment overrides on top of file config."""
    url = os.getenv("DOCSTORE_DB_URL")
    if url:
        config = replace(config, database_url=url)
    return config
