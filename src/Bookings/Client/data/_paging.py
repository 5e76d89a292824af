# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Lazy iteration over server-paged collections.

A list response carries its items under ``value`` and, when more items
remain, a continuation link under ``@odata.nextLink``. :class:`PagedCollection`
follows those links one page at a time, only when the items already fetched
have been consumed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..common.constants import ODATA_NEXT_LINK, ODATA_NEXT_LINK_LEGACY, ODATA_VALUE
from ..models.entity import Entity
from ..models.schema import EntitySchema
from ._transport import _Transport, join_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """
    One page of a collection response.

    :param items: Raw item payloads in server order.
    :type items: list[dict]
    :param next_link: Opaque continuation link, or ``None`` on the final page.
    :type next_link: str | None
    """

    items: List[Dict[str, Any]] = field(default_factory=list)
    next_link: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return not self.next_link

    @classmethod
    def from_body(cls, body: Any) -> "Page":
        if not isinstance(body, dict):
            return cls()
        items = body.get(ODATA_VALUE)
        next_link = body.get(ODATA_NEXT_LINK) or body.get(ODATA_NEXT_LINK_LEGACY)
        return cls(
            items=[x for x in items if isinstance(x, dict)] if isinstance(items, list) else [],
            next_link=next_link if isinstance(next_link, str) and next_link else None,
        )


class PagedCollection:
    """
    Forward-only, single-pass sequence of entities spanning every page of a collection.

    Nothing is fetched until iteration starts. Items are produced in server
    order with no reordering or de-duplication. If a later page fails, the
    error is raised at that point and items already produced remain valid.
    To start over, call the originating list operation again.

    :param transport: Transport used for the first and every following page.
    :type transport: ~Bookings.Client.data._transport._Transport
    :param collection_path: Service-relative collection path.
    :type collection_path: str
    :param schema: Schema the items are bound to.
    :type schema: ~Bookings.Client.models.schema.EntitySchema
    :param params: Query parameters for the first request only.
    :type params: dict | None
    :param page_size: Preferred page size, sent as ``Prefer: odata.maxpagesize``.
    :type page_size: int | None
    :param timeout: Per-request timeout in seconds.
    :type timeout: float | None
    :param item_collection_path: Collection that addresses individual items, when it
        differs from the listed path (e.g. a calendar view lists appointments).
    :type item_collection_path: str | None

    Example::

        for appointment in client.list(path, BOOKING_APPOINTMENT):
            print(appointment["service_name"])
    """

    def __init__(
        self,
        transport: _Transport,
        collection_path: str,
        schema: EntitySchema,
        *,
        params: Optional[Dict[str, Any]] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
        item_collection_path: Optional[str] = None,
    ) -> None:
        self._transport = transport
        self.collection_path = collection_path
        self.item_collection_path = item_collection_path or collection_path
        self.schema = schema
        self._params = dict(params or {})
        self._headers: Dict[str, str] = {}
        if page_size is not None and int(page_size) > 0:
            self._headers["Prefer"] = f"odata.maxpagesize={int(page_size)}"
        self._timeout = timeout
        self._claimed = False
        self._claim_lock = threading.Lock()
        self.requests_made = 0

    def _claim(self) -> None:
        with self._claim_lock:
            if self._claimed:
                raise RuntimeError(
                    "PagedCollection is single-pass; call the list operation again to restart."
                )
            self._claimed = True

    def __iter__(self) -> Iterator[Entity]:
        return self.iterate()

    def iterate(self) -> Iterator[Entity]:
        """Return the lazy sequence of entities across all pages."""
        self._claim()
        return self._entities()

    def pages(self) -> Iterator[Page]:
        """Return the lazy sequence of raw pages."""
        self._claim()
        return self._pages()

    def _entities(self) -> Iterator[Entity]:
        for page in self._pages():
            for item in page.items:
                key = item.get(self.schema.key_field.wire_name)
                path = join_key(self.item_collection_path, key) if key not in (None, "") else None
                yield Entity.from_wire(self.schema, item, path=path)

    def _pages(self) -> Iterator[Page]:
        page = self._fetch(self.collection_path, self._params)
        yield page
        while page.next_link:
            page = self._fetch(page.next_link, None)
            yield page

    def _fetch(self, path: str, params: Optional[Dict[str, Any]]) -> Page:
        _, body = self._transport.send(
            "GET",
            path,
            params=params,
            headers=self._headers or None,
            timeout=self._timeout,
        )
        self.requests_made += 1
        page = Page.from_body(body)
        logger.debug(
            "Fetched page %d of %s (%d items, last=%s)",
            self.requests_made,
            self.collection_path,
            len(page.items),
            page.is_last,
        )
        return page


__all__ = ["Page", "PagedCollection"]
