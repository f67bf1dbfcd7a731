"""Test WSGI request parsing and response writing."""

from webmux import StatusCode
from webmux.wsgi import ResponseWriter, _get_headers, request_from_environ


def test_request_from_environ(make_environ):
    """Environ values are translated into a request."""
    environ = make_environ(
        "/caf\xc3\xa9",
        method="post",
        body=b'{"a": 1}',
        QUERY_STRING="x=1",
        CONTENT_TYPE="application/json",
        HTTP_X_FORWARDED_HOST="example.com",
    )
    request = request_from_environ(environ)

    assert request.method == "POST"
    assert request.path == "/café"
    assert request.query == "x=1"
    assert request.body == b'{"a": 1}'
    assert request.headers["content-type"] == "application/json"
    assert request.headers["x-forwarded-host"] == "example.com"
    assert request.environ is environ


def test_request_from_minimal_environ():
    """Missing values fall back to defaults."""
    request = request_from_environ({})
    assert request.method == "GET"
    assert request.path == "/"
    assert request.body == b""
    assert request.headers == {}


def test_get_headers_ignores_empty_content_headers():
    """Empty CONTENT_* entries are not headers."""
    headers = _get_headers({"CONTENT_LENGTH": "", "HTTP_ACCEPT": "*/*"})
    assert headers == {"accept": "*/*"}


def test_invalid_content_length(make_environ):
    """An unparseable length reads no body."""
    environ = make_environ("/", body=b"abc")
    environ["CONTENT_LENGTH"] = "abc"
    assert request_from_environ(environ).body == b""


def test_response_writer_defaults(start_response):
    """Writing a body without a status implies 200."""
    writer = ResponseWriter()
    assert not writer.wrote_header

    assert writer.write("héllo") == 6
    writer.write(b"!")
    assert writer.status == 200
    assert writer.body == "héllo!".encode()

    body = writer.finish(start_response)
    start_response.assert_called_once_with("200 OK", [])
    assert b"".join(body) == writer.body


def test_response_writer_status(start_response):
    """Only the first status is kept."""
    writer = ResponseWriter()
    writer.header["Content-Type"] = "text/plain"
    writer.write_header(StatusCode.NOT_FOUND)
    writer.write_header(200)
    assert writer.wrote_header
    assert writer.status == 404

    writer.finish(start_response)
    start_response.assert_called_once_with(
        "404 Not Found", [("Content-Type", "text/plain")]
    )


def test_response_writer_unknown_status(start_response):
    """Unregistered codes still produce a status line."""
    writer = ResponseWriter()
    writer.write_header(599)
    writer.finish(start_response)
    start_response.assert_called_once_with("599 Unknown", [])
