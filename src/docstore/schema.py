"""Schema registry: per-table mapping from document fields to columns."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from docstore.errors import ConfigError, UnknownTableError

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _check_identifier(kind: str, value: str) -> None:
    if not _IDENTIFIER.fullmatch(value):
        raise ConfigError(f"invalid {kind} name '{value}'")


@dataclass(frozen=True)
class TableSchema:
    """Column layout of one configured table.

    ``metadata_columns`` maps a lower-cased metadata key to the column that
    persists it; ``param_columns`` maps a write parameter name to its column.
    """

    name: str
    key_column: str
    body_column: str
    metadata_columns: Mapping[str, str] = field(default_factory=dict)
    param_columns: Mapping[str, str] = field(default_factory=dict)
    hash_column: str | None = None
    conflict_detection: bool = False
    read_timeout_ms: int | None = None
    write_timeout_ms: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "metadata_columns",
            MappingProxyType({k.lower(): v for k, v in self.metadata_columns.items()}),
        )
        object.__setattr__(self, "param_columns", MappingProxyType(dict(self.param_columns)))
        self._validate()

    def _validate(self) -> None:
        _check_identifier("table", self.name)
        if self.conflict_detection and not self.hash_column:
            raise ConfigError(
                f"table '{self.name}' enables conflict detection without a hash column"
            )

        seen: set[str] = set()
        for column in self.columns:
            _check_identifier("column", column)
            if column in seen:
                raise ConfigError(
                    f"column '{column}' is mapped more than once in table '{self.name}'"
                )
            seen.add(column)

    @property
    def columns(self) -> list[str]:
        """All configured columns, key first."""
        cols = [self.key_column, self.body_column]
        if self.hash_column:
            cols.append(self.hash_column)
        cols.extend(self.metadata_columns.values())
        cols.extend(self.param_columns.values())
        return cols

    @property
    def supports_metadata(self) -> bool:
        return bool(self.metadata_columns)


class SchemaRegistry:
    """Read-only lookup of table schemas by table name."""

    def __init__(self, schemas: Iterable[TableSchema] = ()) -> None:
        by_name: dict[str, TableSchema] = {}
        for schema in schemas:
            if schema.name in by_name:
                raise ConfigError(f"table '{schema.name}' is configured more than once")
            by_name[schema.name] = schema
        self._schemas = MappingProxyType(by_name)

    def lookup(self, table: str) -> TableSchema | None:
        return self._schemas.get(table)

    def get(self, table: str) -> TableSchema:
        schema = self._schemas.get(table)
        if schema is None:
            raise UnknownTableError(table)
        return schema

    def tables(self) -> list[str]:
        return list(self._schemas)

    def __contains__(self, table: object) -> bool:
        return table in self._schemas

    def __iter__(self) -> Iterator[TableSchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)
