"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log line per request on the "restkv.access" logger:

    text:  127.0.0.1 - - [18/Oct/2026:10:00:00 +0000] "PUT /entry/a/1" 200 24 0.41ms
    json:  {"request_id": "9f1c2a7b", "method": "PUT", "path": "/entry/a/1", ...}

The request id is echoed back in the X-Request-ID response header so a
client can quote it when reporting a problem.

Route it separately from the application logs if needed:

    logging.getLogger("restkv.access").addHandler(file_handler)

=============================================================================
"""

import time
import json
import uuid
import logging
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse

logger = logging.getLogger("restkv.access")


@dataclass
class RequestLog:
    """One access log record."""

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        record = asdict(self)
        record["duration_ms"] = round(self.duration_ms, 2)
        return record

    def to_text(self) -> str:
        """Apache-style line, readable by the usual log tools."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging: timing, request id, status and size.

    Add it first so it also sees responses produced by later middleware:

        server.use(LoggingMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text"):
        self.log_format = log_format

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(
                f"[{request_id}] {request.method} {request.path} raised "
                f"{type(e).__name__}: {e} ({elapsed:.2f}ms)"
            )
            raise

        response.headers["X-Request-ID"] = request_id

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=(time.perf_counter() - started) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )
        logger.info(json.dumps(entry.to_dict()) if self.log_format == "json" else entry.to_text())

        return response
