"""Configuration errors raised while registering routes and middleware."""


class MuxError(Exception):
    """Base class for webmux errors."""


class InvalidPatternSpec(MuxError, TypeError):
    """A route pattern is of an unsupported shape or malformed."""


class InvalidRegex(MuxError, ValueError):
    """A regular expression route pattern could not be compiled."""


class UnsupportedHandlerShape(MuxError, TypeError):
    """A handler or middleware does not have an accepted signature."""
