"""Per-request context: deadline, cancellation and transaction id."""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from docstore.errors import RequestTimeoutError


class RequestContext:
    """Carries one request's deadline and transaction id through the store.

    The context is cancelled either explicitly (by the facade when it stops
    waiting) or implicitly once the deadline passes. Callbacks registered with
    ``on_cancel`` run on cancellation so a blocked backend call can be
    interrupted from another thread.
    """

    def __init__(self, transaction_id: str = "", deadline: float | None = None) -> None:
        self.transaction_id = transaction_id
        self.deadline = deadline
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def with_timeout(cls, timeout_s: float, transaction_id: str = "") -> RequestContext:
        return cls(transaction_id=transaction_id, deadline=time.monotonic() + timeout_s)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def cancel(self) -> None:
        """Mark the context cancelled and run the registered callbacks.

        Callbacks run under the lock, so an ``on_cancel`` block cannot exit
        (and release its resource) while its callback is still running.
        """
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            for cb in list(self._callbacks):
                cb()

    def check(self, operation: str) -> None:
        """Raise RequestTimeoutError if the caller has stopped waiting."""
        if self.done:
            raise RequestTimeoutError(f"document {operation} request timed out")

    @contextmanager
    def on_cancel(self, callback: Callable[[], None]) -> Iterator[None]:
        """Run ``callback`` if the context is cancelled while the block is active."""
        with self._lock:
            already = self._cancelled.is_set()
            if not already:
                self._callbacks.append(callback)
        if already:
            callback()
        try:
            yield
        finally:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)


def background(transaction_id: str = "") -> RequestContext:
    """Context with no deadline, for callers that manage time themselves."""
    return RequestContext(transaction_id=transaction_id)


def new_transaction_id() -> str:
    """Generate a transaction id in the ``tid_<random>`` form."""
    return f"tid_{uuid.uuid4().hex[:10]}"
