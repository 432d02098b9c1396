"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler and pulls named segments out of the path.

    Registered routes                       Incoming request
    ─────────────────                       ────────────────
    GET  /list              → show          PUT /entry/color/blue
    GET  /entry/:key        → show                 │
    PUT  /entry/:key/:value → update  ◄── MATCH ───┘
                                         path_params = {"key": "color",
                                                        "value": "blue"}

Pattern syntax:
    /list          static segment, exact match
    /:key          one non-empty segment (no "/"), captured under "key"

Routes are tried in registration order; first match wins.

A path that only misses because of a trailing slash is redirected to the
path without it ("/list/" → "/list"): 301 for GET, 308 for everything
else so the method is kept.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
from urllib.parse import unquote
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed, redirect
from .status_codes import HTTPStatus

logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """A URL pattern bound to a handler for one HTTP method."""

    path: str                        # URL pattern (e.g., /entry/:key)
    method: str
    handler: Handler

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """
    A successful match.

        Pattern: /entry/:key
        Path:    /entry/color
        Result:  RouteMatch(route=<Route>, params={"key": "color"})
    """
    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router with named path parameters.

        router = Router()

        @router.get("/entry/:key")
        def show(request):
            return ok(request.path_params["key"])

    Handlers receive the request with `path_params` already filled in.
    Parameter values are percent-decoded one segment at a time, so
    "/entry/a%2Fb" yields {"key": "a/b"}.
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_route(self, path: str, handler: Handler, method: str) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (e.g., /entry/:key/:value)
            handler: Callable taking an HTTPRequest, returning an HTTPResponse
            method: HTTP method
        """
        route = Route(
            path=path,
            method=method.upper(),
            handler=handler,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)

        logger.debug(f"Registered route {route.method} {path}")
        return route

    @staticmethod
    def _compile_pattern(path: str) -> re.Pattern:
        """
        Compile a path pattern into an anchored regex.

            "/entry/:key/:value"
                → ^/entry/(?P<key>[^/]+)/(?P<value>[^/]+)$
        """
        regex = ""
        for segment in path.strip("/").split("/"):
            if not segment:
                continue
            if segment.startswith(":"):
                regex += f"/(?P<{segment[1:]}>[^/]+)"
            else:
                regex += "/" + re.escape(segment)

        return re.compile(f"^{regex or '/'}$")

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching `method` and `path`.

        Args:
            method: HTTP method (GET, PUT, ...)
            path: Request path, percent-encoded as sent on the wire

        Returns:
            RouteMatch with decoded params, or None
        """
        method = method.upper()
        for route in self._routes:
            if route.method != method:
                continue

            found = route._pattern.match(path)
            if found:
                params = {
                    name: unquote(value)
                    for name, value in found.groupdict().items()
                }
                return RouteMatch(route=route, params=params)

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for `path`, used for the 405 Allow header."""
        return sorted({
            route.method for route in self._routes if route._pattern.match(path)
        })

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

            match                      → handler(request) with path_params set
            match without trailing "/" → 301 (GET) / 308 redirect
            wrong method               → 405 + Allow
            nothing                    → 404
        """
        path = request.raw_path or request.path
        match = self.match(request.method, path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        if len(path) > 1 and path.endswith("/"):
            stripped = path.rstrip("/") or "/"
            if self.match(request.method, stripped):
                status = (HTTPStatus.MOVED_PERMANENTLY if request.method == "GET"
                          else HTTPStatus.PERMANENT_REDIRECT)
                return redirect(stripped, status)

        allowed = self.get_allowed_methods(path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found()

    # =========================================================================
    # DECORATOR-STYLE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: str) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(); returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET")

    def put(self, path: str) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self.route(path, "PUT")

    def routes(self) -> List[Route]:
        """All registered routes, in match order."""
        return list(self._routes)
