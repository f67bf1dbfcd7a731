from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

from webmux import StatusCode


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    query: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    environ: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class MatchResult:
    matched: bool
    bound: Mapping[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.matched


NO_MATCH = MatchResult(matched=False, bound=MappingProxyType({}))


@dataclass(frozen=True)
class Response:
    status_code: StatusCode
    content_type: str
    body: Union[str, bytes]
