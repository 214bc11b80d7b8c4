"""Listing identifier and route-key conventions.

Listing ids arrive in two flavours and are handled uniformly as strings:

+-----------------+----------------------+-------------------------------+
| Origin          | Example id           | Detail route                  |
+=================+======================+===============================+
| Platform-owned  | ``"42"``             | ``/sales/42``                 |
+-----------------+----------------------+-------------------------------+
| Scraped         | ``"external-123"``   | ``/sales/external-123`` (*)   |
+-----------------+----------------------+-------------------------------+

(*) Scraped listings normally navigate to their source URL instead; the
internal route is only used when a scraped record has no source.

Typical usage::

    from estatefinder.core.ids import detail_route

    assert detail_route("42") == "/sales/42"
"""

from __future__ import annotations

from urllib.parse import quote

__all__ = ["detail_route"]


def detail_route(listing_id: str | int, prefix: str = "/sales") -> str:
    """Return the internal detail route for *listing_id*.

    The id is percent-encoded as a single path segment so opaque external
    ids containing ``/`` cannot escape the route.

    Example::

        assert detail_route(7) == "/sales/7"
        assert detail_route("a/b", prefix="/listings/") == "/listings/a%2Fb"
    """
    return f"{prefix.rstrip('/')}/{quote(str(listing_id), safe='')}"
