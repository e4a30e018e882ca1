"""
Engine-agnostic helpers.

Helpers are plain named callables exposed to every engine. Async helpers
(including the include helper generated for each template type) cannot be
awaited by most engines mid-render, so rendering happens in two phases:

1. While the engine runs, each async helper call is recorded and replaced
   by a unique placeholder token.
2. After the engine returns, every recorded call is resolved and its
   placeholder substituted with the result.

Placeholder tables live on a per-render ``DeferredHelpers`` session, so
nested and concurrent renders never see each other's pending calls.

"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from stencil.errors import ErrorCode, UnsupportedOperationError
from stencil.utils.observability.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

__all__ = ["AsyncHelper", "DeferredHelpers", "HelperRegistry"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class AsyncHelper:
    """
    A helper resolved after the engine has finished.

    Attributes:
        name: Helper name as seen by templates
        func: Callable returning a string or an awaitable of one
        sync_func: Variant used by ``render_sync``; defaults to ``func``
            when ``func`` is not a coroutine function

    """

    name: str
    func: Callable[..., Any]
    sync_func: Callable[..., str] | None = None

    async def call(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
        result = self.func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return "" if result is None else str(result)

    def call_sync(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
        if self.sync_func is not None:
            result = self.sync_func(*args, **kwargs)
        elif inspect.iscoroutinefunction(self.func):
            raise UnsupportedOperationError(
                f"Async helper '{self.name}' has no synchronous variant",
                code=ErrorCode.R003,
                suggestion="Pass sync_fn= to add_helper_async() or render with 'await template.render()'",
            )
        else:
            result = self.func(*args, **kwargs)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise UnsupportedOperationError(
                    f"Async helper '{self.name}' returned an awaitable during render_sync",
                    code=ErrorCode.R003,
                )
        return "" if result is None else str(result)


class HelperRegistry:
    """Named sync and async helpers for one ``Template`` instance."""

    def __init__(self) -> None:
        self._sync: dict[str, Callable[..., Any]] = {}
        self._async: dict[str, AsyncHelper] = {}

    def add(self, name: str, fn: Callable[..., Any]) -> None:
        self._async.pop(name, None)
        self._sync[name] = fn
        logger.debug("helper_registered", name=name, kind="sync")

    def add_async(
        self,
        name: str,
        fn: Callable[..., Any],
        sync_fn: Callable[..., str] | None = None,
    ) -> None:
        self._sync.pop(name, None)
        self._async[name] = AsyncHelper(name=name, func=fn, sync_func=sync_fn)
        logger.debug("helper_registered", name=name, kind="async")

    def __contains__(self, name: object) -> bool:
        return name in self._sync or name in self._async

    def get(self, name: str) -> Callable[..., Any] | AsyncHelper | None:
        return self._sync.get(name) or self._async.get(name)

    def is_async(self, name: str) -> bool:
        return name in self._async

    def names(self) -> tuple[str, ...]:
        return (*self._sync, *self._async)

    def session(self) -> DeferredHelpers:
        """Start the placeholder table for one render."""
        return DeferredHelpers(self._sync, self._async)


class DeferredHelpers:
    """Placeholder bookkeeping for a single render call."""

    def __init__(
        self,
        sync_helpers: Mapping[str, Callable[..., Any]],
        async_helpers: Mapping[str, AsyncHelper],
    ) -> None:
        self._sync = dict(sync_helpers)
        self._async = dict(async_helpers)
        self._prefix = f"__stencil_helper_{uuid.uuid4().hex}_"
        self._counter = itertools.count()
        self._pending: dict[str, tuple[AsyncHelper, tuple[Any, ...], dict[str, Any]]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _stub(self, helper: AsyncHelper) -> Callable[..., str]:
        def record_call(*args: Any, **kwargs: Any) -> str:
            token = f"{self._prefix}{next(self._counter)}__"
            self._pending[token] = (helper, args, kwargs)
            return token

        record_call.__name__ = helper.name
        return record_call

    def callables(self) -> dict[str, Callable[..., Any]]:
        """Helpers as handed to the engine: async ones are placeholder stubs."""
        exposed: dict[str, Callable[..., Any]] = dict(self._sync)
        for name, helper in self._async.items():
            exposed[name] = self._stub(helper)
        return exposed

    async def resolve(self, content: str) -> str:
        """Resolve every pending call concurrently and substitute results."""
        if not self._pending:
            return content
        pending = list(self._pending.items())
        self._pending.clear()
        results = await asyncio.gather(*(helper.call(args, kwargs) for _, (helper, args, kwargs) in pending))
        for (token, _), value in zip(pending, results, strict=True):
            content = content.replace(token, value)
        return content

    def resolve_sync(self, content: str) -> str:
        """Resolve every pending call in order and substitute results."""
        if not self._pending:
            return content
        pending = list(self._pending.items())
        self._pending.clear()
        for token, (helper, args, kwargs) in pending:
            content = content.replace(token, helper.call_sync(args, kwargs))
        return content
