"""Route requests to handlers through a middleware stack."""

import json
import logging
import sys
from functools import partialmethod
from typing import Any, Callable, Dict, List, Sequence, Set

from webmux import StatusCode
from webmux.chain import DEFAULT_POOL_SIZE, Chain
from webmux.context import Context
from webmux.handlers import CanonicalHandler, adapt_handler
from webmux.routing import RouteEntry
from webmux.types import Request, Response
from webmux.wsgi import ResponseWriter, request_from_environ


class Mux:
    """Request multiplexer.

    Routes are tried in registration order and the first one whose method
    and pattern both match serves the request, with the pattern's bindings
    in ``c.url_params``. The router runs as the terminal handler of the
    middleware stack, so middleware see every request, matched or not.

        app = Mux(name="app")
        app.use(request_logger)

        @app.get("/hello/:name")
        def hello(c, request, writer):
            writer.write(f"Hello, {c.url_params['name']}!")

    A ``Mux`` is a WSGI application and also a context handler, so one mux
    can be mounted inside another.
    """

    FORMAT_STRING = "[%(name)s] - [%(levelname)s] - %(message)s"

    def __init__(
        self,
        name: str = "webmux",
        debug: bool = False,
        configure_logs: bool = True,
        pool_size: int = DEFAULT_POOL_SIZE,
    ) -> None:
        """Initialize Mux object."""
        self.name: str = name
        self.debug: bool = debug
        self.pool_size: int = pool_size
        self.routes: List[RouteEntry] = []
        self.middlewares: List[Any] = []
        self.log = logging.getLogger(self.name)
        if configure_logs:
            self._configure_logging()
        self._not_found: CanonicalHandler = self._default_not_found
        self._chain: Chain = self._build_chain(self.middlewares)

    def _configure_logging(self) -> None:
        if self._already_configured(self.log):
            return

        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(self.FORMAT_STRING)
        handler.setFormatter(formatter)
        self.log.propagate = False
        if self.debug:
            level = logging.DEBUG
        else:
            level = logging.ERROR
        self.log.setLevel(level)
        self.log.addHandler(handler)

    def _already_configured(self, log) -> bool:
        if not log.handlers:
            return False

        for handler in log.handlers:
            if isinstance(handler, logging.StreamHandler):
                if handler.stream == sys.stdout:
                    return True

        return False

    # Middleware stack

    def _build_chain(self, middlewares: Sequence[Any]) -> Chain:
        return Chain(middlewares, self._route, pool_size=self.pool_size)

    def _set_middlewares(self, middlewares: List[Any]) -> None:
        # build first so a rejected middleware leaves the stack untouched
        self._chain = self._build_chain(middlewares)
        self.middlewares = middlewares

    def _middleware_index(self, middleware: Any) -> int:
        for index, current in enumerate(self.middlewares):
            if current is middleware:
                return index
        raise ValueError(f"Middleware {middleware!r} not found in stack")

    def use(self, middleware: Any) -> Any:
        """Append middleware to the stack; it runs after those already added."""
        self._set_middlewares(self.middlewares + [middleware])
        return middleware

    def insert(self, middleware: Any, before: Any) -> None:
        """Insert middleware immediately before another one in the stack."""
        index = self._middleware_index(before)
        middlewares = list(self.middlewares)
        middlewares.insert(index, middleware)
        self._set_middlewares(middlewares)

    def abandon(self, middleware: Any) -> None:
        """Remove middleware from the stack."""
        index = self._middleware_index(middleware)
        middlewares = list(self.middlewares)
        del middlewares[index]
        self._set_middlewares(middlewares)

    # Routes

    def _add_route(self, pattern: Any, handler: Any, **kwargs) -> RouteEntry:
        methods = kwargs.pop("methods", None)

        if kwargs:
            raise TypeError(
                f"TypeError: route() got unexpected keyword "
                f"arguments: {', '.join(list(kwargs))}"
            )

        route = RouteEntry(pattern, handler, methods)
        self.routes.append(route)
        self.log.debug(
            "Registered %s %r", ",".join(sorted(route.methods or ["*"])), route.pattern
        )
        return route

    def route(self, pattern: Any, handler: Any = None, **kwargs) -> Any:
        """Register a handler for a pattern.

        Called with a handler the route is added and returned; called without
        one it returns a decorator that registers and returns the handler.
        """
        if handler is not None:
            return self._add_route(pattern, handler, **kwargs)

        def _register_view(endpoint):
            self._add_route(pattern, endpoint, **kwargs)
            return endpoint

        return _register_view

    def handle(self, pattern: Any, handler: Any = None, **kwargs) -> Any:
        """Register a handler for a pattern, any method."""
        return self.route(pattern, handler, **kwargs)

    def _method_route(self, method: str, pattern: Any, handler: Any = None, **kwargs) -> Any:
        kwargs["methods"] = [method]
        return self.route(pattern, handler, **kwargs)

    get = partialmethod(_method_route, "GET")
    post = partialmethod(_method_route, "POST")
    put = partialmethod(_method_route, "PUT")
    patch = partialmethod(_method_route, "PATCH")
    delete = partialmethod(_method_route, "DELETE")
    options = partialmethod(_method_route, "OPTIONS")
    head = partialmethod(_method_route, "HEAD")
    trace = partialmethod(_method_route, "TRACE")
    connect = partialmethod(_method_route, "CONNECT")

    def not_found(self, handler: Any) -> Any:
        """Set the handler used when no route matches."""
        self._not_found = adapt_handler(handler)
        return handler

    # Dispatch

    def _send(self, writer: Any, response: Response) -> None:
        writer.header["Content-Type"] = response.content_type
        writer.write_header(response.status_code.value)
        writer.write(response.body)

    def _default_not_found(self, c: Context, request: Request, writer: Any) -> None:
        error_message = f"No view function for: {request.method} - {request.path}"
        self._send(
            writer,
            Response(
                status_code=StatusCode.NOT_FOUND,
                content_type="application/json",
                body=json.dumps({"errorMessage": error_message}),
            ),
        )

    def _method_not_allowed(self, allowed: Set[str], request: Request, writer: Any) -> None:
        if "GET" in allowed:
            allowed.add("HEAD")
        writer.header["Allow"] = ", ".join(sorted(allowed))
        error_message = f"Method {request.method} not allowed for: {request.path}"
        self._send(
            writer,
            Response(
                status_code=StatusCode.METHOD_NOT_ALLOWED,
                content_type="application/json",
                body=json.dumps({"errorMessage": error_message}),
            ),
        )

    def _route(self, c: Context, request: Request, writer: Any) -> None:
        method = request.method.upper()
        allowed: Set[str] = set()
        for route in self.routes:
            result = route.match(request.path)
            if not result:
                continue
            if not route.accepts(method):
                allowed.update(route.methods or ())
                continue

            c.url_params = dict(result.bound)
            self.log.debug("%s %s matched %r", method, request.path, route.pattern)
            route.handler(c, request, writer)
            return

        if allowed:
            self.log.debug("%s %s: method not allowed", method, request.path)
            self._method_not_allowed(allowed, request, writer)
            return

        self.log.debug("No view function for: %s - %s", method, request.path)
        self._not_found(c, request, writer)

    def serve_http_c(self, c: Context, request: Request, writer: Any) -> None:
        """Serve a request with an existing context."""
        self._chain.serve_http_c(c, request, writer)

    def serve_http(self, request: Request, writer: Any) -> None:
        """Serve a request with a fresh context."""
        self._chain.serve_http(request, writer)

    def __call__(self, environ: Dict[str, Any], start_response: Callable) -> List[bytes]:
        """WSGI entry point."""
        request = request_from_environ(environ)
        writer = ResponseWriter()
        try:
            self.serve_http(request, writer)
        except Exception as err:
            self.log.error(str(err))
            writer = ResponseWriter()
            self._send(
                writer,
                Response(
                    status_code=StatusCode.INTERNAL_SERVER_ERROR,
                    content_type="application/json",
                    body=json.dumps({"errorMessage": str(err)}),
                ),
            )

        return writer.finish(start_response)
