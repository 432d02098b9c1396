"""
Unit tests for URL router.
"""

from restkv.http.router import Router
from restkv.http.request import HTTPRequest
from restkv.http.response import HTTPResponse, ResponseBuilder, ok
from restkv.http.status_codes import HTTPStatus


def make_request(method: str, path: str, raw_path: str = "") -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path, raw_path=raw_path)


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    """Echo the matched params."""
    return ok(repr(sorted(request.path_params.items())))


def entry_router() -> Router:
    """The routes the key-value service registers."""
    router = Router()
    router.add_route("/list", dummy_handler, method="GET")
    router.add_route("/entry/:key", dummy_handler, method="GET")
    router.add_route("/entry/:key/:value", dummy_handler, method="PUT")
    return router


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        router = Router()
        router.add_route("/list", dummy_handler, method="get")

        routes = router.routes()
        assert len(routes) == 1
        assert routes[0].path == "/list"
        assert routes[0].method == "GET"

    def test_match_static_path(self):
        match = entry_router().match("GET", "/list")

        assert match is not None
        assert match.route.path == "/list"
        assert match.params == {}

    def test_match_single_param(self):
        match = entry_router().match("GET", "/entry/first")

        assert match is not None
        assert match.route.path == "/entry/:key"
        assert match.params == {"key": "first"}

    def test_match_two_params(self):
        match = entry_router().match("PUT", "/entry/second/hi")

        assert match is not None
        assert match.route.path == "/entry/:key/:value"
        assert match.params == {"key": "second", "value": "hi"}

    def test_params_are_percent_decoded(self):
        match = entry_router().match("PUT", "/entry/a%2Fb/hello%20world")

        assert match.params == {"key": "a/b", "value": "hello world"}

    def test_trailing_slash_does_not_match(self):
        router = entry_router()

        assert router.match("GET", "/list/") is None
        assert router.match("GET", "/entry/first/") is None

    def test_empty_segment_does_not_match(self):
        router = entry_router()

        assert router.match("GET", "/entry/") is None
        assert router.match("PUT", "/entry//v") is None

    def test_no_match(self):
        router = entry_router()

        assert router.match("GET", "/entries") is None
        assert router.match("GET", "/entry/a/b/c") is None
        assert router.match("DELETE", "/entry/a") is None

    def test_root_route(self):
        router = Router()
        router.add_route("/", dummy_handler, method="GET")

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/x") is None

    def test_first_registered_wins(self):
        router = Router()
        router.add_route("/entry/special", lambda r: ok("static"), method="GET")
        router.add_route("/entry/:key", dummy_handler, method="GET")

        response = router.handle(make_request("GET", "/entry/special"))
        assert response.text == "static"

    def test_get_allowed_methods(self):
        router = entry_router()

        assert router.get_allowed_methods("/entry/k") == ["GET"]
        assert router.get_allowed_methods("/entry/k/v") == ["PUT"]
        assert router.get_allowed_methods("/nowhere") == []


class TestRouterHandle:
    """Dispatching whole requests."""

    def test_handle_success(self):
        router = Router()

        @router.get("/hello")
        def hello(request):
            return ResponseBuilder().text("Hello!").build()

        response = router.handle(make_request("GET", "/hello"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello!"

    def test_path_params_in_request(self):
        router = Router()
        captured = {}

        @router.put("/entry/:key/:value")
        def update(request):
            captured.update(request.path_params)
            return ok()

        router.handle(make_request("PUT", "/entry/color/blue"))
        assert captured == {"key": "color", "value": "blue"}

    def test_handle_uses_raw_path(self):
        """An encoded "/" stays inside its segment."""
        router = entry_router()
        request = make_request("PUT", "/entry/a/b/c", raw_path="/entry/a%2Fb/c")

        response = router.handle(request)

        assert response.status == HTTPStatus.OK
        assert request.path_params == {"key": "a/b", "value": "c"}

    def test_handle_not_found(self):
        response = entry_router().handle(make_request("GET", "/nothing"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "404 page not found"

    def test_handle_method_not_allowed(self):
        response = entry_router().handle(make_request("POST", "/list"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET"


class TestTrailingSlashRedirect:
    """A path that only misses by a trailing "/" points at the canonical one."""

    def test_get_is_moved_permanently(self):
        response = entry_router().handle(make_request("GET", "/list/"))

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.headers["Location"] == "/list"

    def test_get_entry(self):
        response = entry_router().handle(make_request("GET", "/entry/first/"))

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.headers["Location"] == "/entry/first"

    def test_put_keeps_its_method(self):
        response = entry_router().handle(make_request("PUT", "/entry/k/v/"))

        assert response.status == HTTPStatus.PERMANENT_REDIRECT
        assert response.headers["Location"] == "/entry/k/v"

    def test_location_stays_encoded(self):
        request = make_request("GET", "/entry/a/b/", raw_path="/entry/a%2Fb/")

        response = entry_router().handle(request)

        assert response.headers["Location"] == "/entry/a%2Fb"

    def test_handler_is_not_called(self):
        router = Router()
        calls = []
        router.add_route("/list", lambda r: calls.append(r) or ok(), method="GET")

        router.handle(make_request("GET", "/list/"))

        assert calls == []

    def test_unknown_path_with_slash_is_not_found(self):
        router = entry_router()

        assert router.handle(make_request("GET", "/nothing/")).status == HTTPStatus.NOT_FOUND
        assert router.handle(make_request("PUT", "/entry//v")).status == HTTPStatus.NOT_FOUND
        assert router.handle(make_request("GET", "/entry/")).status == HTTPStatus.NOT_FOUND

    def test_wrong_method_with_slash_is_not_redirected(self):
        response = entry_router().handle(make_request("PUT", "/list/"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert "Location" not in response.headers


class TestRouterDecorators:
    """Tests for decorator-style route registration."""

    def test_get_decorator(self):
        router = Router()

        @router.get("/test")
        def test_handler(request):
            return ok("test")

        assert router.routes()[0].method == "GET"
        assert test_handler(make_request("GET", "/test")).text == "test"

    def test_put_decorator(self):
        router = Router()

        @router.put("/test")
        def test_handler(request):
            return ok("test")

        assert router.routes()[0].method == "PUT"

