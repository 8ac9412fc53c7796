"""Execution-scoped capture of HTTP requests.

The active ContextStore is held in a ContextVar, so it follows the code
that runs inside CaptureContext.run() through every await, while
concurrently running asyncio tasks each keep their own store.
"""

import inspect
import logging
from collections.abc import Awaitable, Mapping
from contextvars import ContextVar
from typing import Any, Callable, Optional

from apidoc_capture.core.capture_data import (
    ApiDocMetadata,
    CapturedRequest,
    ContextStore,
)

logger = logging.getLogger(__name__)

# Store of the innermost active run(), None outside any run().
_current_store: ContextVar[Optional[ContextStore]] = ContextVar(
    "apidoc_capture_store", default=None
)


def _accepts_store(fn: Callable[..., Any]) -> bool:
    """Check whether fn takes a required positional argument."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    for param in signature.parameters.values():
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            return param.default is param.empty
        if param.kind == param.VAR_POSITIONAL:
            return False
    return False


async def _await_within(store: ContextStore, awaitable: Awaitable[Any]) -> Any:
    token = _current_store.set(store)
    try:
        return await awaitable
    finally:
        _current_store.reset(token)


class CaptureContext:
    """Ambient store of the HTTP calls made by the running scenario.

    All methods are class-level; the state lives in a ContextVar. Every
    mutating method is a silent no-op outside of run(), so instrumentation
    never changes the outcome of the code it observes.

    Example:
        >>> def scenario():
        ...     CaptureContext.add_request({"method": "GET", "url": "/users"})
        ...     return len(CaptureContext.get_captured_requests())
        >>> CaptureContext.run("list users", None, scenario)
        1
        >>> CaptureContext.is_active()
        False
    """

    @classmethod
    def run(
        cls,
        description: str,
        metadata: Any,
        fn: Callable[..., Any],
    ) -> Any:
        """Run fn with a fresh ContextStore as the current store.

        fn may take no arguments or a single positional argument, which
        receives the new store. If fn returns an awaitable, a coroutine is
        returned that awaits it with the store current; the caller must
        await that coroutine. The previous store is restored on every exit
        path.

        Args:
            description: Scenario description
            metadata: ApiDocMetadata, mapping or None
            fn: Scenario callable

        Returns:
            Result of fn, or a coroutine resolving to the awaited result

        Raises:
            Any exception raised by fn, unchanged
        """
        store = ContextStore(
            description=description,
            metadata=ApiDocMetadata.from_value(metadata),
        )
        logger.debug("Entering capture scope '%s'", description)

        token = _current_store.set(store)
        try:
            result = fn(store) if _accepts_store(fn) else fn()
        finally:
            _current_store.reset(token)

        if inspect.isawaitable(result):
            return _await_within(store, result)
        return result

    @classmethod
    def get_store(cls) -> Optional[ContextStore]:
        """Return the current store, or None outside of run()."""
        return _current_store.get()

    @classmethod
    def is_active(cls) -> bool:
        """Check whether a capture scope is currently active."""
        return _current_store.get() is not None

    @classmethod
    def get_captured_requests(cls) -> list[CapturedRequest]:
        """Return the current store's requests, or an empty list."""
        store = _current_store.get()
        if store is None:
            return []
        return store.captured_requests

    @classmethod
    def add_request(cls, partial: Mapping[str, Any]) -> Optional[CapturedRequest]:
        """Append a new captured request.

        Args:
            partial: Initial request fields, typically method and url

        Returns:
            The appended record, or None when no scope is active
        """
        store = _current_store.get()
        if store is None:
            return None
        request = CapturedRequest.from_partial(partial)
        store.captured_requests.append(request)
        logger.debug(
            "Captured request #%d: %s %s",
            len(store.captured_requests),
            request.method,
            request.url,
        )
        return request

    @classmethod
    def update_last_request(cls, partial: Mapping[str, Any]) -> None:
        """Merge fields into the most recently added request.

        Headers merge key by key. No-op when no scope is active or nothing
        has been captured yet.
        """
        store = _current_store.get()
        if store is None or not store.captured_requests:
            return
        store.captured_requests[-1].merge(partial)

    @classmethod
    def clear(cls) -> None:
        """Remove all captured requests without closing the scope."""
        store = _current_store.get()
        if store is not None:
            store.captured_requests.clear()
