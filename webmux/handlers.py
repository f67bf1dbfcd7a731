"""Normalize handlers and middleware to the canonical ``(c, request, writer)`` shape.

Accepted handlers:
    - objects with ``serve_http_c(c, request, writer)``
    - objects with ``serve_http(request, writer)``
    - ``func(c, request, writer)``
    - ``func(request, writer)``

Accepted middleware:
    - ``func(handler) -> handler``
    - ``func(c, handler) -> handler``

The shape is resolved once, when the handler is registered; anything else
raises ``UnsupportedHandlerShape`` right away.
"""

import inspect
from typing import Any, Callable, Optional, Protocol, Union

from webmux.context import Context
from webmux.errors import UnsupportedHandlerShape

CanonicalHandler = Callable[[Context, Any, Any], None]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class Handler(Protocol):
    """Standard handler, unaware of the request context."""

    def serve_http(self, request: Any, writer: Any) -> None:
        ...


class ContextHandler(Protocol):
    """Handler that receives the request context."""

    def serve_http_c(self, c: Context, request: Any, writer: Any) -> None:
        ...


class HandlerFunc:
    """Wrap a ``func(c, request, writer)`` so it satisfies both handler protocols.

    Served through ``serve_http`` the function receives an empty context.
    """

    __slots__ = ("func",)

    def __init__(self, func: CanonicalHandler) -> None:
        """Initialize handler object."""
        self.func = func

    def __call__(self, c: Context, request: Any, writer: Any) -> None:
        self.func(c, request, writer)

    def serve_http(self, request: Any, writer: Any) -> None:
        """Serve without a context."""
        self.func(Context(), request, writer)

    def serve_http_c(self, c: Context, request: Any, writer: Any) -> None:
        """Serve with the given context."""
        self.func(c, request, writer)


def _describe(obj: Any) -> str:
    return getattr(obj, "__qualname__", None) or repr(obj)


def _arity(func: Callable) -> Optional[int]:
    """Return the number of required positional arguments of ``func``.

    ``None`` means the signature cannot be resolved to a fixed arity.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    required = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.default is not inspect.Parameter.empty:
            continue
        if param.kind in _POSITIONAL:
            required += 1
        elif param.kind == inspect.Parameter.KEYWORD_ONLY:
            return None
    return required


def _ignore_context(serve: Callable[[Any, Any], Any]) -> CanonicalHandler:
    def handler(c: Context, request: Any, writer: Any) -> None:
        serve(request, writer)

    return handler


def adapt_handler(
    handler: Union[ContextHandler, Handler, Callable[..., Any]]
) -> CanonicalHandler:
    """Return the canonical ``(c, request, writer)`` form of a handler."""
    if isinstance(handler, type):
        raise UnsupportedHandlerShape(
            f"Handler {_describe(handler)} is a class; register an instance instead"
        )

    serve_c = getattr(handler, "serve_http_c", None)
    if callable(serve_c):
        return serve_c

    serve = getattr(handler, "serve_http", None)
    if callable(serve):
        return _ignore_context(serve)

    if callable(handler):
        arity = _arity(handler)
        if arity == 3:
            return handler
        if arity == 2:
            return _ignore_context(handler)

    raise UnsupportedHandlerShape(
        f"Unsupported handler: {_describe(handler)}. Expected an object with "
        "serve_http_c/serve_http, func(c, request, writer) or func(request, writer)"
    )


class _Forward:
    """Handler given to middleware; forwards to the next layer with the stack's context."""

    __slots__ = ("c", "inner")

    def __init__(self, c: Context, inner: CanonicalHandler) -> None:
        self.c = c
        self.inner = inner

    def __call__(self, request: Any, writer: Any) -> None:
        self.inner(self.c, request, writer)

    def serve_http(self, request: Any, writer: Any) -> None:
        self.inner(self.c, request, writer)


class Middleware:
    """Middleware adapted to the canonical shape."""

    __slots__ = ("func", "wants_context")

    def __init__(self, func: Callable, wants_context: bool) -> None:
        """Initialize middleware object."""
        self.func = func
        self.wants_context = wants_context

    def __repr__(self) -> str:
        return f"Middleware({_describe(self.func)})"

    def wrap(self, c: Context, inner: CanonicalHandler) -> CanonicalHandler:
        """Wrap ``inner``; ``c`` is the context box shared by the whole stack."""
        forward = _Forward(c, inner)
        if self.wants_context:
            wrapped = self.func(c, forward)
        else:
            wrapped = self.func(forward)

        try:
            return adapt_handler(wrapped)
        except UnsupportedHandlerShape as err:
            raise UnsupportedHandlerShape(
                f"Middleware {_describe(self.func)} returned an unsupported handler"
            ) from err


def adapt_middleware(middleware: Any) -> Middleware:
    """Return the canonical form of a middleware function."""
    if isinstance(middleware, Middleware):
        return middleware

    arity = _arity(middleware) if callable(middleware) else None
    if arity == 1:
        return Middleware(middleware, wants_context=False)
    if arity == 2:
        return Middleware(middleware, wants_context=True)

    raise UnsupportedHandlerShape(
        f"Unsupported middleware: {_describe(middleware)}. Expected "
        "func(handler) -> handler or func(c, handler) -> handler"
    )
