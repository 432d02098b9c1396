"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Every body this service sends is plain text. A handler returns an
HTTPResponse; the server serializes it with to_bytes() and writes it to
the socket.

    Handler returns          to_bytes()                 Socket sends
    HTTPResponse    ─────►   serializes      ─────►     raw bytes

    HTTPResponse(            b"HTTP/1.1 200 OK\r\n
      status=200,              Content-Type: text/plain; charset=utf-8\r\n
      headers={...},           Content-Length: 33\r\n
      body=b"Read entry: ..."  Date: ...\r\n
    )                          Server: restkv/1.0\r\n
                               \r\n
                               Read entry: data[color] = blue"

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict

from .status_codes import HTTPStatus

TEXT_PLAIN = "text/plain; charset=utf-8"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Build one directly or through ResponseBuilder / the helper functions
    at the bottom of this module.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def to_bytes(self, server_name: str = "restkv/1.0") -> bytes:
        """
        Serialize to wire format.

        Content-Length, Date and Server are added when the handler did not
        set them. The handler's headers dict is left untouched.
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))
        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .text("404 page not found")
            .close_connection()
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def text(self, text: str, content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """Plain text body, UTF-8 encoded."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = content_type
        return self

    def close_connection(self) -> "ResponseBuilder":
        """Tell the client the connection closes after this response."""
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231), always in GMT.

    Example: "Wed, 01 Jan 2026 12:00:00 GMT"
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(text: str = "") -> HTTPResponse:
    """200 OK with a plain text body."""
    return ResponseBuilder().status(HTTPStatus.OK).text(text).build()


def error_response(status: HTTPStatus, message: str = "") -> HTTPResponse:
    """Plain text error response; the body defaults to the reason phrase."""
    return (ResponseBuilder()
        .status(status)
        .text(message or status.phrase)
        .build())


def not_found(message: str = "404 page not found") -> HTTPResponse:
    """404 Not Found, sent when no route matches the path."""
    return error_response(HTTPStatus.NOT_FOUND, message)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """405 Method Not Allowed with the Allow header RFC 7231 requires."""
    response = error_response(HTTPStatus.METHOD_NOT_ALLOWED)
    response.set_header("Allow", ", ".join(allowed_methods))
    return response


def redirect(location: str, status: HTTPStatus = HTTPStatus.MOVED_PERMANENTLY) -> HTTPResponse:
    """Redirect to `location`; the body names the target for plain clients."""
    return (ResponseBuilder()
        .status(status)
        .header("Location", location)
        .text(f"{status.phrase}: {location}")
        .build())
