"""Compose middleware and a terminal handler into one canonical handler."""

import queue
from typing import Any, Iterable, Optional, Sequence

from webmux.context import Context
from webmux.handlers import CanonicalHandler, Middleware, adapt_handler, adapt_middleware

DEFAULT_POOL_SIZE = 32


class _Stack:
    """One built instance of a chain.

    Every middleware factory is called once per instance. The instance owns
    the context box handed to context-aware middleware; the request's context
    is copied into it before the stack runs, so layers that cannot forward a
    context still pass the same one along.
    """

    __slots__ = ("c", "handler")

    def __init__(self, middlewares: Sequence[Middleware], terminal: CanonicalHandler) -> None:
        self.c = Context()
        handler = terminal
        for middleware in reversed(middlewares):
            handler = middleware.wrap(self.c, handler)
        self.handler = handler


class Chain:
    """Ordered middleware around a terminal handler.

    The first middleware wraps outermost and runs first. A middleware that
    never calls its inner handler ends the request there.

    Building is eager: the first stack instance is created in the
    constructor, so a middleware returning an unsupported handler fails at
    setup rather than on the first request. Further instances are created on
    demand and kept in a pool of at most ``pool_size`` entries; an instance
    serves one request at a time.
    """

    def __init__(
        self,
        middlewares: Iterable[Any],
        handler: Any,
        pool_size: int = DEFAULT_POOL_SIZE,
    ) -> None:
        """Initialize chain object."""
        self.middlewares = tuple(adapt_middleware(m) for m in middlewares)
        self.handler = adapt_handler(handler)
        self._pool: Optional["queue.Queue[_Stack]"] = (
            queue.Queue(maxsize=pool_size) if pool_size > 0 else None
        )
        self._release(self._build())

    def __repr__(self) -> str:
        return f"Chain(middlewares={list(self.middlewares)!r})"

    def _build(self) -> _Stack:
        return _Stack(self.middlewares, self.handler)

    def _acquire(self) -> _Stack:
        if self._pool is not None:
            try:
                return self._pool.get_nowait()
            except queue.Empty:
                pass
        return self._build()

    def _release(self, stack: _Stack) -> None:
        if self._pool is None:
            return
        try:
            self._pool.put_nowait(stack)
        except queue.Full:
            pass

    def serve_http_c(self, c: Context, request: Any, writer: Any) -> None:
        """Run the chain for one request with the given context."""
        stack = self._acquire()
        stack.c.assign(c)
        try:
            stack.handler(stack.c, request, writer)
        finally:
            stack.c.clear()
            self._release(stack)

    __call__ = serve_http_c

    def serve_http(self, request: Any, writer: Any) -> None:
        """Run the chain for one request with a fresh context."""
        self.serve_http_c(Context(), request, writer)


def build_chain(
    middlewares: Iterable[Any], handler: Any, pool_size: int = DEFAULT_POOL_SIZE
) -> Chain:
    """Build a chain from middleware (outermost first) and a terminal handler."""
    return Chain(middlewares, handler, pool_size=pool_size)
