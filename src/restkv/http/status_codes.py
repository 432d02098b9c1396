"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this service can actually send, with their reason
phrases (RFC 7231).

    2xx  the request worked          → every /list and /entry call
    3xx  look elsewhere              → same path without a trailing slash
    4xx  the client got it wrong     → unknown path, bad request line
    5xx  the server could not cope   → handler crash, pool saturated

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:
        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301       # GET with a trailing slash
    PERMANENT_REDIRECT = 308      # Same, other methods (method is kept)

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400             # Malformed request line or headers
    NOT_FOUND = 404               # No route for the path
    METHOD_NOT_ALLOWED = 405      # Path exists under a different verb
    REQUEST_TIMEOUT = 408         # Client connected but never sent a request
    PAYLOAD_TOO_LARGE = 413       # Request exceeds max_request_size

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500   # Handler raised
    SERVICE_UNAVAILABLE = 503     # Thread pool queue is full
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line, e.g. "Not Found"."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.PERMANENT_REDIRECT: "Permanent Redirect",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
