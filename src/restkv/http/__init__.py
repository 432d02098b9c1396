"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

    request.py       bytes → HTTPRequest (method, path, headers, body)
    response.py      HTTPResponse → bytes, plain text helpers
    router.py        (method, path) → handler, named path parameters
    status_codes.py  status codes and reason phrases

Message format (RFC 7230):

    REQUEST:                          RESPONSE:
    GET /entry/color HTTP/1.1\r\n     HTTP/1.1 200 OK\r\n
    Host: localhost\r\n               Content-Length: 29\r\n
    \r\n                              \r\n
                                      Read entry: data[color] = blue

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    error_response,      # any status, plain text
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    redirect,            # 301 / 308 with Location
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "error_response",
    "not_found",
    "method_not_allowed",
    "redirect",
    "Router",
    "Route",
    "RouteMatch",
    "HTTPStatus",
]
