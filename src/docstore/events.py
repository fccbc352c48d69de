"""Observability events emitted by the store."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "document hash conflict detected while updating document"


@dataclass(frozen=True)
class ConflictEvent:
    """A write replaced a row whose stored hash differed from the caller's."""

    table: str
    key: str
    transaction_id: str
    message: str = CONFLICT_MESSAGE


@runtime_checkable
class EventSink(Protocol):
    def emit(self, event: ConflictEvent) -> None: ...


class LoggingEventSink:
    """Reports conflicts as WARNING log records with structured extras."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event: ConflictEvent) -> None:
        self._log.warning(
            event.message,
            extra={
                "table": event.table,
                "key": event.key,
                "transaction_id": event.transaction_id,
            },
        )


class RecordingEventSink:
    """Keeps emitted events in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[ConflictEvent] = []

    def emit(self, event: ConflictEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[ConflictEvent]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
