"""Access facade: deadline-bounded reads and writes for transport layers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import Executor, ThreadPoolExecutor, wait
from typing import Any, Protocol, TypeVar, runtime_checkable

from docstore.config import DocstoreConfig
from docstore.context import RequestContext
from docstore.document import Document
from docstore.errors import RequestTimeoutError
from docstore.schema import SchemaRegistry
from docstore.storage import WriteResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class DocumentReadWriter(Protocol):
    """Context-aware read/write contract implemented by DocumentStore."""

    def read(self, ctx: RequestContext, table: str, key: str) -> Document: ...

    def write(
        self,
        ctx: RequestContext,
        table: str,
        key: str,
        doc: Document,
        params: Mapping[str, str] | None = None,
        previous_hash: str = "",
    ) -> WriteResult: ...


class AccessFacade:
    """Runs each request on a worker and gives up on it at the deadline.

    A request that outlives its deadline is abandoned: its context is
    cancelled, its eventual result discarded, and the caller gets
    RequestTimeoutError. Errors raised before the deadline pass through
    unchanged.
    """

    def __init__(
        self,
        store: DocumentReadWriter,
        registry: SchemaRegistry,
        config: DocstoreConfig | None = None,
        *,
        executor: Executor | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._config = config or DocstoreConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self._config.max_workers, thread_name_prefix="docstore"
        )

    def __enter__(self) -> AccessFacade:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop the worker pool, waiting for abandoned requests to finish."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def read_timeout(self, table: str) -> float:
        schema = self._registry.get(table)
        return (schema.read_timeout_ms or self._config.read_timeout_ms) / 1000

    def write_timeout(self, table: str) -> float:
        schema = self._registry.get(table)
        return (schema.write_timeout_ms or self._config.write_timeout_ms) / 1000

    def read(
        self,
        table: str,
        key: str,
        *,
        transaction_id: str = "",
        timeout_s: float | None = None,
    ) -> Document:
        timeout = self.read_timeout(table)
        if timeout_s is not None:
            timeout = timeout_s
        ctx = RequestContext.with_timeout(timeout, transaction_id)
        return self._run(ctx, "read", self._store.read, ctx, table, key)

    def write(
        self,
        table: str,
        key: str,
        doc: Document,
        params: Mapping[str, str] | None = None,
        previous_hash: str = "",
        *,
        transaction_id: str = "",
        timeout_s: float | None = None,
    ) -> WriteResult:
        timeout = self.write_timeout(table)
        if timeout_s is not None:
            timeout = timeout_s
        ctx = RequestContext.with_timeout(timeout, transaction_id)
        return self._run(
            ctx, "write", self._store.write, ctx, table, key, doc, params, previous_hash
        )

    def _run(
        self,
        ctx: RequestContext,
        operation: str,
        fn: Callable[..., T],
        *args: Any,
    ) -> T:
        future = self._executor.submit(fn, *args)
        done, _ = wait([future], timeout=ctx.remaining())
        if not done:
            ctx.cancel()
            future.cancel()
            logger.warning(
                "document %s request timed out",
                operation,
                extra={"transaction_id": ctx.transaction_id},
            )
            raise RequestTimeoutError(f"document {operation} request timed out")
        return future.result()
