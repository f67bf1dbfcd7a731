import io
from unittest.mock import Mock

import pytest

from webmux.types import Request
from webmux.wsgi import ResponseWriter


@pytest.fixture
def writer():
    """Empty response writer."""
    return ResponseWriter()


@pytest.fixture
def make_request():
    """Build a request for a method and path."""

    def _make_request(path="/", method="GET", **kwargs):
        return Request(method=method, path=path, **kwargs)

    return _make_request


@pytest.fixture
def make_environ():
    """Build a minimal WSGI environ."""

    def _make_environ(path="/", method="GET", body=b"", **extra):
        environ = {
            "REQUEST_METHOD": method,
            "PATH_INFO": path,
            "QUERY_STRING": "",
            "wsgi.input": io.BytesIO(body),
            "CONTENT_LENGTH": str(len(body)) if body else "",
        }
        environ.update(extra)
        return environ

    return _make_environ


@pytest.fixture
def start_response():
    """Mock WSGI start_response."""
    return Mock(__name__="start_response")
