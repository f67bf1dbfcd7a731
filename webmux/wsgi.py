"""WSGI environ parsing and response collection."""

from http import HTTPStatus
from typing import Any, Callable, Dict, List, Optional, Union

from webmux import StatusCode
from webmux.types import Request


def _get_request_path(environ: Dict[str, Any]) -> str:
    """Return the request path, decoded as UTF-8."""
    path = environ.get("PATH_INFO") or "/"
    # PEP 3333 hands PATH_INFO over as latin-1 decoded bytes
    return path.encode("latin-1").decode("utf-8", "replace")


def _get_headers(environ: Dict[str, Any]) -> Dict[str, str]:
    """Return request headers with lower-cased, dash separated names."""
    headers = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").lower()] = value
    for key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
        if environ.get(key):
            headers[key.replace("_", "-").lower()] = environ[key]
    return headers


def _get_body(environ: Dict[str, Any]) -> bytes:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0 or "wsgi.input" not in environ:
        return b""
    return environ["wsgi.input"].read(length)


def request_from_environ(environ: Dict[str, Any]) -> Request:
    """Build a request from a WSGI environ."""
    return Request(
        method=environ.get("REQUEST_METHOD", "GET").upper(),
        path=_get_request_path(environ),
        query=environ.get("QUERY_STRING", ""),
        headers=_get_headers(environ),
        body=_get_body(environ),
        environ=environ,
    )


def _status_line(status: int) -> str:
    try:
        return f"{status} {HTTPStatus(status).phrase}"
    except ValueError:
        return f"{status} Unknown"


class ResponseWriter:
    """Response sink handed to handlers.

    Headers go into ``header`` before ``write_header`` is called; writing a
    body without an explicit status implies 200. Later ``write_header`` calls
    are ignored.
    """

    def __init__(self) -> None:
        """Initialize response writer object."""
        self.header: Dict[str, str] = {}
        self.status: Optional[int] = None
        self._chunks: List[bytes] = []

    @property
    def wrote_header(self) -> bool:
        """Return True once a status has been written."""
        return self.status is not None

    @property
    def body(self) -> bytes:
        """Return the body written so far."""
        return b"".join(self._chunks)

    def write_header(self, status: Union[int, StatusCode]) -> None:
        """Set the response status."""
        if self.status is not None:
            return
        if isinstance(status, StatusCode):
            status = status.value
        self.status = int(status)

    def write(self, data: Union[str, bytes]) -> int:
        """Append data to the response body."""
        if self.status is None:
            self.write_header(StatusCode.OK)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._chunks.append(data)
        return len(data)

    def finish(self, start_response: Callable) -> List[bytes]:
        """Start the WSGI response and return the body iterable."""
        status = self.status if self.status is not None else StatusCode.OK.value
        start_response(_status_line(status), list(self.header.items()))
        return self._chunks
