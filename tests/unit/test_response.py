"""
Unit tests for HTTP response building.
"""

from datetime import datetime, timezone

from restkv.http.response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    error_response,
    not_found,
    method_not_allowed,
    redirect,
    format_http_date,
)
from restkv.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_includes_headers(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: restkv/1.0\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_server_name(self):
        result = HTTPResponse().to_bytes(server_name="kv-test")
        assert b"Server: kv-test\r\n" in result

    def test_to_bytes_leaves_headers_untouched(self):
        response = HTTPResponse(body=b"x")
        response.to_bytes()

        assert response.headers == {}

    def test_text_property(self):
        assert HTTPResponse(body="ключ".encode("utf-8")).text == "ключ"

    def test_set_header_chaining(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_defaults(self):
        response = ResponseBuilder().build()

        assert response.status == HTTPStatus.OK
        assert response.body == b""

    def test_text_body(self):
        response = ResponseBuilder().text("Hello, World!").build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.body == b"Hello, World!"

    def test_text_is_utf8_encoded(self):
        assert ResponseBuilder().text("é").build().body == "é".encode("utf-8")

    def test_close_connection(self):
        response = ResponseBuilder().close_connection().build()
        assert response.headers["Connection"] == "close"

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.SERVICE_UNAVAILABLE)
            .header("Retry-After", "1")
            .text("busy")
            .build())

        assert response.status == HTTPStatus.SERVICE_UNAVAILABLE
        assert response.headers["Retry-After"] == "1"
        assert response.text == "busy"


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        response = ok("Read list: {}")

        assert response.status == HTTPStatus.OK
        assert response.body == b"Read list: {}"

    def test_error_response_defaults_to_phrase(self):
        response = error_response(HTTPStatus.REQUEST_TIMEOUT)

        assert response.status == HTTPStatus.REQUEST_TIMEOUT
        assert response.text == "Request Timeout"

    def test_not_found(self):
        response = not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "404 page not found"

    def test_method_not_allowed(self):
        response = method_not_allowed(["GET", "PUT"])

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, PUT"

    def test_redirect(self):
        response = redirect("/list")

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.headers["Location"] == "/list"
        assert response.text == "Moved Permanently: /list"

    def test_redirect_keeping_method(self):
        response = redirect("/entry/k/v", HTTPStatus.PERMANENT_REDIRECT)

        assert response.status_line == "HTTP/1.1 308 Permanent Redirect"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_every_status_has_a_phrase(self):
        for status in HTTPStatus:
            assert status.phrase != "Unknown"

    def test_redirect_statuses(self):
        assert HTTPStatus.MOVED_PERMANENTLY.phrase == "Moved Permanently"
        assert HTTPStatus.PERMANENT_REDIRECT.phrase == "Permanent Redirect"


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
