"""Route patterns and route entries."""

import re
from typing import (
    Any,
    Callable,
    FrozenSet,
    Iterable,
    Optional,
    Pattern as RePattern,
    Protocol,
    Tuple,
    runtime_checkable,
)

from webmux.errors import InvalidPatternSpec, InvalidRegex
from webmux.handlers import adapt_handler
from webmux.patterns import capture_segment, inline_flags, left_anchor, regex_special
from webmux.types import NO_MATCH, MatchResult

WILDCARD = "*"


@runtime_checkable
class Pattern(Protocol):
    """A compiled route pattern.

    ``match`` returns ``NO_MATCH`` or a ``MatchResult`` with the bound URL
    parameters. ``prefix`` is a literal every matching path starts with
    (possibly empty); routers may use it to skip patterns cheaply.
    """

    prefix: str

    def match(self, path: str) -> MatchResult:
        ...


def _parse_segment(segment: str) -> Tuple[Optional[str], str]:
    capture = capture_segment.match(segment)
    if not capture:
        return None, segment
    name = capture.group("name")
    if not name:
        raise InvalidPatternSpec(f"Empty variable name in segment {segment!r}")
    return name, segment


class StringPattern:
    """Sinatra-like path template, e.g. ``/u/:name`` or ``/u/:name/*``."""

    def __init__(self, template: str) -> None:
        """Initialize string pattern object."""
        self.template = template
        raw = template or "/"
        self.wildcard = raw.endswith("/*")
        fixed = raw[:-2] if self.wildcard else raw
        self.segments = tuple(_parse_segment(s) for s in fixed.split("/"))
        self.prefix = self._literal_prefix()

    def _literal_prefix(self) -> str:
        prefix = ""
        for index, (name, literal) in enumerate(self.segments):
            if index:
                prefix += "/"
            if name is not None:
                return prefix
            prefix += literal
        if self.wildcard:
            prefix += "/"
        return prefix

    def match(self, path: str) -> MatchResult:
        """Match a request path against the template."""
        count = len(self.segments)
        if self.wildcard:
            parts = path.split("/", count)
            if len(parts) != count + 1:
                return NO_MATCH
            tail = "/" + parts.pop()
        else:
            parts = path.split("/")
            if len(parts) != count:
                return NO_MATCH

        bound = {}
        for (name, literal), part in zip(self.segments, parts):
            if name is None:
                if part != literal:
                    return NO_MATCH
            else:
                bound[name] = part

        if self.wildcard:
            bound[WILDCARD] = tail
        return MatchResult(matched=True, bound=bound)

    def __eq__(self, other) -> bool:
        """Check for equality."""
        return isinstance(other, StringPattern) and self.template == other.template

    def __hash__(self) -> int:
        return hash(self.template)

    def __repr__(self) -> str:
        return f"StringPattern({self.template!r})"


def _split_flags(source: str) -> Tuple[str, str]:
    flags = inline_flags.match(source)
    head = flags.group() if flags else ""
    return head, source[len(head):]


def _left_anchored(expr: RePattern[str]) -> RePattern[str]:
    head, body = _split_flags(expr.pattern)
    if left_anchor.match(body):
        return expr

    # a trailing comment in verbose mode would swallow the closing paren
    close = "\n)" if expr.flags & re.VERBOSE else ")"
    try:
        return re.compile(rf"{head}\A(?:{body}{close}", expr.flags)
    except re.error as err:
        raise InvalidRegex(f"Cannot anchor {expr.pattern!r}: {err}") from err


def _regex_prefix(expr: RePattern[str]) -> str:
    if expr.flags & (re.IGNORECASE | re.VERBOSE):
        return ""
    head, body = _split_flags(expr.pattern)
    if head or "|" in body:
        return ""
    body = left_anchor.sub("", body)

    prefix = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\":
            escaped = body[index + 1 : index + 2]
            if not escaped or escaped.isalnum():
                break
            prefix.append(escaped)
            index += 2
            continue
        if regex_special.match(char):
            if char in "*?{" and prefix:
                prefix.pop()
            break
        prefix.append(char)
        index += 1
    return "".join(prefix)


class RegexPattern:
    """Left-anchored regular expression pattern.

    Named groups bind under their name. Unnamed groups bind as ``$1``,
    ``$2``... using the overall group number, so ``$n`` is always
    ``match.group(n)`` even when named groups come first.
    """

    def __init__(self, expr: RePattern[str]) -> None:
        """Initialize regex pattern object."""
        self.source = expr
        self.regex = _left_anchored(expr)
        names = {index: name for name, index in self.regex.groupindex.items()}
        self.names = tuple(
            names.get(index, f"${index}") for index in range(1, self.regex.groups + 1)
        )
        self.prefix = _regex_prefix(expr)

    def match(self, path: str) -> MatchResult:
        """Match a request path against the expression."""
        found = self.regex.match(path)
        if found is None:
            return NO_MATCH

        bound = {}
        for name, value in zip(self.names, found.groups(default="")):
            bound[name] = value
        return MatchResult(matched=True, bound=bound)

    def __eq__(self, other) -> bool:
        """Check for equality."""
        return isinstance(other, RegexPattern) and self.regex == other.regex

    def __hash__(self) -> int:
        return hash(self.regex)

    def __repr__(self) -> str:
        return f"RegexPattern({self.source.pattern!r})"


def regex(source: str, flags: int = 0) -> RegexPattern:
    """Compile a regular expression source into a pattern."""
    try:
        expr = re.compile(source, flags)
    except re.error as err:
        raise InvalidRegex(f"Invalid regular expression {source!r}: {err}") from err
    return RegexPattern(expr)


def parse_pattern(spec: Any) -> Pattern:
    """Compile a route pattern.

    Accepts a string template, a compiled ``re.Pattern`` or an object that
    already implements ``Pattern`` (returned unchanged).
    """
    if isinstance(spec, str):
        return StringPattern(spec)
    if isinstance(spec, re.Pattern):
        if not isinstance(spec.pattern, str):
            raise InvalidPatternSpec("Regular expression patterns must be str, not bytes")
        return RegexPattern(spec)
    if isinstance(spec, type):
        raise InvalidPatternSpec(
            f"Pattern {spec.__name__} is a class; register an instance instead"
        )
    if callable(getattr(spec, "match", None)):
        return spec
    raise InvalidPatternSpec(f"Unknown pattern type: {type(spec).__name__}")


class RouteEntry:
    """Compiled route: pattern, accepted methods and canonical handler."""

    def __init__(
        self,
        pattern: Any,
        handler: Any,
        methods: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize route object."""
        self.pattern = parse_pattern(pattern)
        self.handler: Callable = adapt_handler(handler)
        self.endpoint = handler
        self.methods: Optional[FrozenSet[str]] = None
        if methods is not None:
            self.methods = frozenset(method.upper() for method in methods)
            if not self.methods:
                raise TypeError("A route needs at least one method; pass None for any method")

    def accepts(self, method: str) -> bool:
        """Return True if the route serves the given method."""
        if self.methods is None:
            return True
        if method in self.methods:
            return True
        return method == "HEAD" and "GET" in self.methods

    def match(self, path: str) -> MatchResult:
        """Match a request path, skipping the pattern on a prefix miss."""
        if not path.startswith(getattr(self.pattern, "prefix", "") or ""):
            return NO_MATCH
        return self.pattern.match(path)
