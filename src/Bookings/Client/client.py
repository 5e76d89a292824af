# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import datetime as _dt
import logging
import threading
from typing import Any, Dict, Optional, Union

import requests

from azure.core.credentials import TokenCredential

from .common.constants import (
    ACTION_PUBLISH,
    ACTION_UNPUBLISH,
    APPOINTMENTS,
    BOOKING_BUSINESSES,
    CALENDAR_VIEW,
    DEFAULT_SERVICE_ROOT,
    ODATA_VALUE,
)
from .core._auth import CredentialProvider, TokenCredentialProvider
from .core.config import ClientConfig
from .data._paging import PagedCollection
from .data._transport import _Transport, join_key
from .models.bookings import BOOKING_APPOINTMENT, BOOKING_BUSINESS
from .models.entity import Entity
from .models.schema import EntitySchema

logger = logging.getLogger(__name__)

EntityPath = Union[str, Entity]


class BookingsClient:
    """
    Client for an OData-style resource API, with Microsoft Bookings helpers.

    Every call is independent: entities are never cached between calls, and one
    client may be shared by many threads. The only shared mutable state is the
    credential provider's token cache, whose refresh is serialized.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager pools connections and releases
        them on exit::

            with BookingsClient(credential) as client:
                for business in client.list("bookingBusinesses", BOOKING_BUSINESS):
                    print(business["display_name"])

    :param credential: Either a :class:`~Bookings.Client.core._auth.CredentialProvider`
        or an Azure Identity ``TokenCredential``, which is wrapped in a
        :class:`~Bookings.Client.core._auth.TokenCredentialProvider` using ``config.scopes``.
    :type credential: ~Bookings.Client.core._auth.CredentialProvider or ~azure.core.credentials.TokenCredential
    :param service_root: Base URL that collection and entity paths are relative to.
        Trailing slash is automatically removed.
    :type service_root: :class:`str`
    :param config: Optional configuration for timeouts, paging and token refresh.
        If not provided, defaults are loaded from :meth:`~Bookings.Client.core.config.ClientConfig.from_env`.
    :type config: ~Bookings.Client.core.config.ClientConfig or None

    :raises ValueError: If ``service_root`` is missing or empty after trimming.
    :raises TypeError: If ``credential`` is neither supported type.

    Example:
        Create a business with only its display name set::

            from azure.identity import InteractiveBrowserCredential

            with BookingsClient(InteractiveBrowserCredential()) as client:
                business = Entity.new_tracked(BOOKING_BUSINESS)
                business.set("display_name", "Contoso Lunch Delivery")
                client.create("bookingBusinesses", business)
                client.publish(business)
    """

    def __init__(
        self,
        credential: Union[CredentialProvider, TokenCredential],
        service_root: str = DEFAULT_SERVICE_ROOT,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._config = config or ClientConfig.from_env()
        if isinstance(credential, CredentialProvider):
            self.credentials: CredentialProvider = credential
        elif isinstance(credential, TokenCredential):
            self.credentials = TokenCredentialProvider(
                credential,
                self._config.scopes,
                refresh_margin=self._config.token_refresh_margin,
            )
        else:
            raise TypeError("credential must be a CredentialProvider or an azure.core.credentials.TokenCredential.")
        self._service_root = (service_root or "").strip().rstrip("/")
        if not self._service_root:
            raise ValueError("service_root is required.")
        self._transport: Optional[_Transport] = None
        self._transport_lock = threading.Lock()
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False

    def __enter__(self) -> "BookingsClient":
        """
        Enter the context manager.

        Creates an HTTP session for connection pooling. All operations within
        the context reuse this session.
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
            # A transport built before entering would bypass the new session.
            with self._transport_lock:
                if self._transport is not None:
                    self._transport.close()
                    self._transport = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the client and release resources.

        Safe to call multiple times. The client lazily recreates its transport
        if used again afterwards.
        """
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        if self._session is not None and self._owns_session:
            self._session.close()
        self._session = None
        self._owns_session = False

    def _get_transport(self) -> _Transport:
        """Get or create the transport. Deferred so construction makes no network calls."""
        with self._transport_lock:
            if self._transport is None:
                self._transport = _Transport(
                    self.credentials,
                    self._service_root,
                    self._config,
                    session=self._session,
                )
            return self._transport

    # ----------------------------------------------------------- core API

    def list(
        self,
        collection_path: str,
        schema: EntitySchema,
        *,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> PagedCollection:
        """
        Enumerate a collection lazily across all of its pages.

        No request is made until the result is iterated.

        :param collection_path: Collection path, e.g. ``"bookingBusinesses"`` or
            ``"bookingBusinesses/<id>/appointments"``.
        :type collection_path: :class:`str`
        :param schema: Schema the items are bound to.
        :type schema: ~Bookings.Client.models.schema.EntitySchema
        :param page_size: Preferred page size; defaults to ``config.page_size``.
        :type page_size: :class:`int` | None
        :param timeout: Per-request timeout in seconds.
        :type timeout: :class:`float` | None
        :return: Single-pass lazy sequence of entities.
        :rtype: ~Bookings.Client.data._paging.PagedCollection
        """
        return PagedCollection(
            self._get_transport(),
            collection_path,
            schema,
            page_size=page_size if page_size is not None else self._config.page_size,
            timeout=timeout,
        )

    def create(self, collection_path: str, entity: Entity, *, timeout: Optional[float] = None) -> Entity:
        """
        Create ``entity`` in ``collection_path``, sending only its dirty fields.

        On success the server response (including the assigned identifier) is
        merged into ``entity``, its dirty set is cleared and its :attr:`path` set.
        On failure the entity is left untouched so the call can be retried.

        :return: The same entity instance.
        :rtype: ~Bookings.Client.models.entity.Entity
        """
        body = entity.serialize_partial()
        _, payload = self._get_transport().send("POST", collection_path, body, timeout=timeout)
        entity.mark_saved(payload if isinstance(payload, dict) else None)
        if entity.id is not None:
            entity.path = join_key(collection_path, entity.id)
        logger.debug("Created %s %s", entity.schema.name, entity.id)
        return entity

    def get_by_key(
        self,
        collection_path: str,
        key: Any,
        schema: EntitySchema,
        *,
        timeout: Optional[float] = None,
    ) -> Entity:
        """
        Fetch one entity by identifier.

        :raises ~Bookings.Client.core.errors.NotFoundError: If the server returns 404.
        """
        path = join_key(collection_path, key)
        _, payload = self._get_transport().send("GET", path, timeout=timeout)
        return Entity.from_wire(schema, payload if isinstance(payload, dict) else {}, path=path)

    def update(self, entity: Entity, *, timeout: Optional[float] = None) -> Entity:
        """
        Send the entity's dirty fields as a PATCH to :attr:`Entity.path`.

        Does nothing when no field is dirty.

        :raises ValueError: If the entity has no path (it was never created or fetched).
        """
        if not entity.path:
            raise ValueError("entity has no path; create or fetch it first.")
        if not entity.is_dirty:
            return entity
        headers = {"If-Match": entity.etag} if entity.etag else None
        _, payload = self._get_transport().send(
            "PATCH", entity.path, entity.serialize_partial(), headers=headers, timeout=timeout
        )
        entity.mark_saved(payload if isinstance(payload, dict) else None)
        return entity

    def invoke_action(
        self,
        entity_path: EntityPath,
        action_name: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Invoke a bound action, e.g. ``publish``, on one entity.

        :param entity_path: Entity path or an entity that has a path.
        :param action_name: Action name appended to the entity path.
        :param body: Optional action parameters.
        :return: ``None`` for an empty response, the unwrapped ``value`` for a
            scalar or collection result, otherwise the response object.
        """
        if not action_name or "/" in action_name:
            raise ValueError("action_name must be a single path segment.")
        path = f"{_resolve_path(entity_path).rstrip('/')}/{action_name}"
        _, payload = self._get_transport().send("POST", path, body, timeout=timeout)
        return _unwrap_action_result(payload)

    # --------------------------------------------------- Bookings helpers

    @staticmethod
    def business_path(business_id: str) -> str:
        return join_key(BOOKING_BUSINESSES, business_id)

    def publish(self, business: EntityPath, *, timeout: Optional[float] = None) -> None:
        """Make the business's public scheduling page available to customers."""
        self.invoke_action(business, ACTION_PUBLISH, timeout=timeout)

    def unpublish(self, business: EntityPath, *, timeout: Optional[float] = None) -> None:
        """Hide the business's public scheduling page."""
        self.invoke_action(business, ACTION_UNPUBLISH, timeout=timeout)

    def calendar_view(
        self,
        business: EntityPath,
        start: _dt.datetime,
        end: _dt.datetime,
        *,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> PagedCollection:
        """
        Appointments of a business between ``start`` and ``end``.

        Naive datetimes are taken as UTC.
        """
        base = _resolve_path(business).rstrip("/")
        return PagedCollection(
            self._get_transport(),
            f"{base}/{CALENDAR_VIEW}",
            BOOKING_APPOINTMENT,
            params={"start": _utc_param(start), "end": _utc_param(end)},
            page_size=page_size if page_size is not None else self._config.page_size,
            timeout=timeout,
            item_collection_path=f"{base}/{APPOINTMENTS}",
        )

    def list_businesses(self, *, page_size: Optional[int] = None, timeout: Optional[float] = None) -> PagedCollection:
        return self.list(BOOKING_BUSINESSES, BOOKING_BUSINESS, page_size=page_size, timeout=timeout)


def _resolve_path(target: EntityPath) -> str:
    if isinstance(target, Entity):
        if not target.path:
            raise ValueError(f"{target.schema.name} has no path; create or fetch it first.")
        return target.path
    if not isinstance(target, str) or not target.strip():
        raise ValueError("entity path is required.")
    return target


def _unwrap_action_result(payload: Any) -> Any:
    if not isinstance(payload, dict):
        return payload
    data = {k: v for k, v in payload.items() if "@" not in k}
    if set(data) == {ODATA_VALUE}:
        return data[ODATA_VALUE]
    return data or None


def _utc_param(value: _dt.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


__all__ = ["BookingsClient"]
