"""Document model: opaque body bytes plus case-insensitive string metadata."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field


def hash_body(body: bytes) -> str:
    """Return the content fingerprint stored alongside a document body."""
    return hashlib.sha224(body).hexdigest()


class Metadata(MutableMapping[str, str]):
    """String metadata whose keys compare case-insensitively.

    Keys are stored lower-cased, so a value set under ``X-Request-Id`` is
    readable as ``x-request-id`` and vice versa.
    """

    def __init__(self, items: Mapping[str, str] | None = None, **kwargs: str) -> None:
        self._data: dict[str, str] = {}
        if items:
            self.update(items)
        if kwargs:
            self.update(kwargs)

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Metadata):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == {str(k).lower(): v for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"Metadata({self._data!r})"

    def set(self, key: str, value: str) -> None:
        self[key] = value


@dataclass
class Document:
    """A stored item: body, metadata and the hash assigned by the store."""

    body: bytes
    metadata: Metadata = field(default_factory=Metadata)
    hash: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if not isinstance(self.metadata, Metadata):
            self.metadata = Metadata(self.metadata)

    def compute_hash(self) -> str:
        return hash_body(self.body)
