"""
=============================================================================
ENTRY HANDLERS
=============================================================================

The two operations of the service, as plain functions of the store:

    show(store, "")          → "Read list: {first -> hello, second -> hi}"
    show(store, "first")     → "Read entry: data[first] = hello"
    update(store, "k", "v")  → "Updated: data[k] = v"

and EntryHandler, which adapts them to HTTP:

    GET /list               → show(store, "")
    GET /entry/:key         → show(store, key)
    PUT /entry/:key/:value  → update(store, key, value)

Nothing here fails. An unknown key reads as "", exactly like a key whose
value is "". Keys and values are taken as-is, empty strings included.

=============================================================================
"""

import logging
from typing import Mapping

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok
from ..store import KeyValueStore

logger = logging.getLogger(__name__)


def render_entries(entries: Mapping[str, str]) -> str:
    """
    Render entries as "{k1 -> v1, k2 -> v2}", keys sorted.

    Sorting keeps the listing stable between calls; the store itself has
    no order.
    """
    body = ", ".join(f"{key} -> {entries[key]}" for key in sorted(entries))
    return "{" + body + "}"


def show(store: KeyValueStore, key: str) -> str:
    """List every entry when `key` is empty, otherwise read one entry."""
    if not key:
        return "Read list: " + render_entries(store.get_all())
    return f"Read entry: data[{key}] = {store.get(key)}"


def update(store: KeyValueStore, key: str, value: str) -> str:
    """Create or overwrite `key` with `value`."""
    store.set(key, value)
    return f"Updated: data[{key}] = {value}"


class EntryHandler:
    """
    HTTP adapter around show() and update() for one injected store.

        store = KeyValueStore()
        entries = EntryHandler(store)
        router.get("/list")(entries.show)
        router.get("/entry/:key")(entries.show)
        router.put("/entry/:key/:value")(entries.update)
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def show(self, request: HTTPRequest) -> HTTPResponse:
        key = request.path_params.get("key", "")
        return ok(show(self.store, key))

    def update(self, request: HTTPRequest) -> HTTPResponse:
        key = request.path_params.get("key", "")
        value = request.path_params.get("value", "")
        logger.debug(f"Updating {key!r} from {request.client_address[0] or 'local'}")
        return ok(update(self.store, key, value))
