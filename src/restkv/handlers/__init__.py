"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    entries.py   show / update over the key-value store

Handlers take an HTTPRequest (with path_params filled in by the router)
and return an HTTPResponse:

    from restkv.handlers import EntryHandler
    from restkv.store import KeyValueStore

    entries = EntryHandler(KeyValueStore())
    server.get("/entry/:key")(entries.show)

=============================================================================
"""

from .entries import EntryHandler, show, update, render_entries

__all__ = [
    "EntryHandler",
    "show",
    "update",
    "render_entries",
]
