"""Request-scoped context threaded through middleware and handlers."""

from typing import Any, Dict, Generic, Iterator, MutableMapping, Optional, TypeVar

T = TypeVar("T")

_MISSING: Any = object()


class EnvKey(Generic[T]):
    """Capability key for ``Context.env``.

    Keys compare by identity: a package that keeps its key private controls
    every read and write of the value stored under it, and two packages using
    the same ``name`` never collide.

        current_user = EnvKey("auth", "user")

        def auth(c, h):
            def handler(request, writer):
                current_user.set(c, request.headers.get("x-user"))
                h.serve_http(request, writer)
            return handler
    """

    __slots__ = ("namespace", "name", "default")

    def __init__(self, namespace: str, name: str, default: Any = _MISSING) -> None:
        """Initialize key object."""
        self.namespace = namespace
        self.name = name
        self.default = default

    def __repr__(self) -> str:
        return f"<EnvKey {self.namespace}.{self.name}>"

    def get(self, c: "Context", default: Any = _MISSING) -> T:
        """Return the value stored under this key in the context."""
        try:
            return c.env[self]
        except KeyError:
            if default is not _MISSING:
                return default
            if self.default is not _MISSING:
                return self.default
            raise

    def set(self, c: "Context", value: T) -> None:
        """Store a value under this key in the context."""
        c.env[self] = value

    def delete(self, c: "Context") -> None:
        """Remove this key from the context, if present."""
        c.env.pop(self, None)

    def isset(self, c: "Context") -> bool:
        """Return True if the context holds a value for this key."""
        return self in c.env


class Env(MutableMapping[EnvKey, Any]):
    """Mutable mapping from ``EnvKey`` tokens to arbitrary values."""

    __slots__ = ("_data",)

    def __init__(self, items: Optional[Dict[EnvKey, Any]] = None) -> None:
        """Initialize environment object."""
        self._data: Dict[EnvKey, Any] = {}
        if items:
            for key, value in items.items():
                self[key] = value

    def __getitem__(self, key: EnvKey) -> Any:
        return self._data[key]

    def __setitem__(self, key: EnvKey, value: Any) -> None:
        if not isinstance(key, EnvKey):
            raise TypeError(f"Env keys must be EnvKey instances, not {type(key).__name__}")
        self._data[key] = value

    def __delitem__(self, key: EnvKey) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[EnvKey]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Env({self._data!r})"


class Context:
    """Per-request context: URL parameters and a free-form environment.

    A context is created empty for every request and never reused across
    requests. Middleware and handlers share one instance by reference, so
    writes made before delegating are visible further down the chain.
    """

    __slots__ = ("url_params", "env")

    def __init__(
        self,
        url_params: Optional[Dict[str, str]] = None,
        env: Optional[Env] = None,
    ) -> None:
        """Initialize context object."""
        self.url_params: Dict[str, str] = url_params if url_params is not None else {}
        self.env: Env = env if env is not None else Env()

    def __repr__(self) -> str:
        return f"Context(url_params={self.url_params!r}, env={self.env!r})"

    def assign(self, other: "Context") -> None:
        """Overwrite this context's fields with those of ``other``."""
        self.url_params = other.url_params
        self.env = other.env

    def clear(self) -> None:
        """Reset to an empty context."""
        self.url_params = {}
        self.env = Env()
