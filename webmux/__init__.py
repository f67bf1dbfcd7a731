"""webmux: URL patterns, request context and middleware chains."""

from enum import Enum

__version__ = "1.0.0"


class StatusCode(Enum):
    """HTTP status codes used by the mux."""

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500


from webmux.chain import Chain, build_chain  # noqa: E402
from webmux.context import Context, Env, EnvKey  # noqa: E402
from webmux.errors import (  # noqa: E402
    InvalidPatternSpec,
    InvalidRegex,
    MuxError,
    UnsupportedHandlerShape,
)
from webmux.handlers import (  # noqa: E402
    ContextHandler,
    Handler,
    HandlerFunc,
    adapt_handler,
    adapt_middleware,
)
from webmux.mux import Mux  # noqa: E402
from webmux.routing import Pattern, parse_pattern, regex  # noqa: E402

__all__ = [
    "Chain",
    "Context",
    "ContextHandler",
    "Env",
    "EnvKey",
    "Handler",
    "HandlerFunc",
    "InvalidPatternSpec",
    "InvalidRegex",
    "Mux",
    "MuxError",
    "Pattern",
    "StatusCode",
    "UnsupportedHandlerShape",
    "adapt_handler",
    "adapt_middleware",
    "build_chain",
    "parse_pattern",
    "regex",
]
