"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes read by Connection into an HTTPRequest.

    b"PUT /entry/color/blue HTTP/1.1\r\n"       ─┐
    b"Host: localhost:8080\r\n"                   │  RequestParser.parse()
    b"Content-Length: 0\r\n"                      │
    b"\r\n"                                      ─┘
                        │
                        ▼
    HTTPRequest(method="PUT",
                path="/entry/color/blue",        ← percent-decoded
                raw_path="/entry/color/blue",    ← exactly as sent
                headers={"host": ..., "content-length": "0"},
                ...)

=============================================================================
TWO PATHS
=============================================================================

Keys and values travel inside the URL, so a client that wants a "/" in a
key has to send it as %2F:

    PUT /entry/a%2Fb/c HTTP/1.1

If the router matched on the decoded path it would see four segments
(/entry/a/b/c) and the request would miss its route. The parser therefore
keeps both forms: `raw_path` for routing, `path` for logging and display.
The router decodes each captured segment on its own.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import urlsplit, unquote
import re

from .status_codes import HTTPStatus


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the status the client should receive:
        400 Bad Request                - malformed syntax
        405 Method Not Allowed         - unknown method token
        413 Payload Too Large          - over max_request_size
        505 HTTP Version Not Supported - not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status: HTTPStatus = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status = status


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Header names are stored lowercase (RFC 7230 makes them
    case-insensitive). `path_params` is empty until the router fills it
    in with the named segments of the matched route:

        route "/entry/:key"   +   "/entry/color"   →   {"key": "color"}
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    # Filled by the router
    path_params: Dict[str, str] = field(default_factory=dict)

    # Percent-encoded path as received; "" when built by hand (tests)
    raw_path: str = ""
    client_address: tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_keep_alive(self) -> bool:
        """
        Should the connection stay open after the response?

            HTTP/1.1: yes, unless "Connection: close"
            HTTP/1.0: no, unless "Connection: keep-alive"
        """
        connection = self.headers.get("connection", "").lower()
        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    REQUEST_LINE_PATTERN: ^([A-Z]+) ([^ ]+) (HTTP/\\d\\.\\d)$
        group 1 - method, group 2 - request target, group 3 - version

    HEADER_PATTERN: ^([^:]+):\\s*(.*)$
        group 1 - field name, group 2 - field value
    """

    VALID_METHODS = {
        "GET",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "HEAD",
        "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse one complete request.

        Args:
            data: Request bytes as returned by Connection.read_request().
            client_address: (ip, port) of the peer, kept for access logs.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status=HTTPStatus.PAYLOAD_TOO_LARGE,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, raw_path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError(
                f"Invalid Content-Length: {headers['content-length']!r}"
            )
        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length}")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=unquote(raw_path) or "/",
            version=version,
            headers=headers,
            body=body[:content_length],
            raw_path=raw_path,
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, str]:
        """
        Split "METHOD SP request-target SP HTTP-version".

        Returns:
            (method, raw_path, version). The path is returned still
            percent-encoded; any query string is dropped.
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(
                f"Invalid method: {method}",
                status=HTTPStatus.METHOD_NOT_ALLOWED,
            )

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status=HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
            )

        return method, urlsplit(target).path or "/", version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a lowercase-keyed dict.

        Obsolete line folding (a line starting with SP/HTAB) continues the
        previous header. Repeated headers are joined with ", ".
        Malformed lines are skipped.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers

