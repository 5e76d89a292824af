# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Change-tracked entity.

An :class:`Entity` records which fields the caller assigned through
:meth:`Entity.set`. Only those fields are serialized when the entity is
created or updated, so server-side defaults are never overwritten by
client-side zero values.
"""

from __future__ import annotations

import datetime as _dt
import enum
import logging
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Optional

from ..common.constants import ODATA_ETAG
from ..core._error_codes import SCHEMA_KEY_CHANGED, SCHEMA_READ_ONLY_FIELD
from ..core.errors import SchemaError
from .schema import EntitySchema

logger = logging.getLogger(__name__)


class Entity:
    """
    Record bound to an :class:`~Bookings.Client.models.schema.EntitySchema`
    with an explicit dirty-field set.

    :param schema: Schema describing the allowed fields.
    :type schema: ~Bookings.Client.models.schema.EntitySchema
    :param values: Initial values keyed by Python field name. They are treated
        as server state and are not marked dirty.
    :type values: dict[str, Any] | None
    :param etag: Optional ETag reported by the server.
    :type etag: str | None
    :param path: Service-relative path of the entity once it exists on the server.
    :type path: str | None

    Example::

        business = Entity.new_tracked(BOOKING_BUSINESS)
        business.set("display_name", "Contoso")
        business.serialize_partial()  # {"displayName": "Contoso"}
    """

    def __init__(
        self,
        schema: EntitySchema,
        values: Optional[Mapping[str, Any]] = None,
        *,
        etag: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        self.schema = schema
        self.etag = etag
        self.path = path
        self._values: Dict[str, Any] = {}
        self._dirty: set = set()
        for name, value in (values or {}).items():
            self.schema.field(name)
            self._values[name] = value

    @classmethod
    def new_tracked(cls, schema: EntitySchema) -> "Entity":
        """Return an entity with every field unset and nothing dirty."""
        return cls(schema)

    @classmethod
    def from_wire(cls, schema: EntitySchema, payload: Mapping[str, Any], *, path: Optional[str] = None) -> "Entity":
        """
        Build an entity from a service payload.

        OData annotations are dropped (``@odata.etag`` is kept on :attr:`etag`);
        properties the schema does not declare are ignored.
        """
        entity = cls(schema, etag=payload.get(ODATA_ETAG), path=path)
        entity._merge_wire(payload)
        return entity

    # ------------------------------------------------------------- tracking

    def set(self, name: str, value: Any) -> "Entity":
        """
        Assign ``value`` to ``name`` and mark the field dirty.

        Assigning a default or zero value still marks the field dirty.

        :raises ~Bookings.Client.core.errors.SchemaError: If ``name`` is unknown or read-only.
        """
        field = self.schema.field(name)
        if field.read_only:
            raise SchemaError(
                f"'{name}' is read-only on {self.schema.name}.",
                subcode=SCHEMA_READ_ONLY_FIELD,
                details={"schema": self.schema.name, "field": name},
            )
        self._values[name] = value
        self._dirty.add(name)
        return self

    @property
    def dirty_fields(self) -> FrozenSet[str]:
        return frozenset(self._dirty)

    @property
    def is_dirty(self) -> bool:
        return bool(self._dirty)

    def serialize_partial(self) -> Dict[str, Any]:
        """
        Return the JSON body for a create or update: only dirty fields, keyed
        by wire name, in schema declaration order.
        """
        body: Dict[str, Any] = {}
        for field in self.schema:
            if field.name in self._dirty:
                body[field.wire_name] = to_wire(self._values[field.name])
        return body

    def mark_saved(self, payload: Optional[Mapping[str, Any]] = None) -> None:
        """
        Record a successful save.

        Server-populated values from ``payload`` (including the identifier)
        are merged in and the dirty set is cleared.

        :raises ~Bookings.Client.core.errors.SchemaError: If the payload carries an
            identifier different from the one already held.
        """
        if payload:
            key_wire = self.schema.key_field.wire_name
            current = self.id
            incoming = payload.get(key_wire)
            if current is not None and incoming is not None and incoming != current:
                raise SchemaError(
                    f"Server returned identifier {incoming!r} for {self.schema.name} {current!r}.",
                    subcode=SCHEMA_KEY_CHANGED,
                    details={"schema": self.schema.name, "id": current, "incoming": incoming},
                )
            if ODATA_ETAG in payload:
                self.etag = payload[ODATA_ETAG]
            self._merge_wire(payload)
        self._dirty.clear()

    def _merge_wire(self, payload: Mapping[str, Any]) -> None:
        for wire_name, value in payload.items():
            # Instance and property annotations: "@odata.context", "start@odata.type"
            if "@" in wire_name:
                continue
            field = self.schema.by_wire_name(wire_name)
            if field is None:
                logger.debug("Ignoring undeclared property %r on %s", wire_name, self.schema.name)
                continue
            self._values[field.name] = value

    # --------------------------------------------------------------- access

    @property
    def id(self) -> Optional[Any]:
        return self._values.get(self.schema.key)

    def get(self, name: str, default: Any = None) -> Any:
        self.schema.field(name)
        return self._values.get(name, default)

    def __getitem__(self, name: str) -> Any:
        self.schema.field(name)
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def to_dict(self) -> Dict[str, Any]:
        """Return all known values keyed by Python field name."""
        return dict(self._values)

    def __repr__(self) -> str:
        return f"Entity({self.schema.name!r}, id={self.id!r}, dirty={sorted(self._dirty)!r})"


def to_wire(value: Any) -> Any:
    """Convert a Python value to its JSON wire form."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, _dt.timedelta):
        return iso_duration(value)
    if isinstance(value, Mapping):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_wire(v) for v in value]
    return value


def iso_duration(value: _dt.timedelta) -> str:
    """Format a timedelta as an ISO 8601 duration, e.g. ``PT1H30M``."""
    micros = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if micros < 0 else ""
    whole, fraction = divmod(abs(micros), 1_000_000)
    days, rem = divmod(whole, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)
    out = f"{sign}P"
    if days:
        out += f"{days}D"
    clock = ""
    if hours:
        clock += f"{hours}H"
    if minutes:
        clock += f"{minutes}M"
    if seconds or fraction or not (days or clock):
        clock += str(seconds)
        if fraction:
            clock += f".{fraction:06d}".rstrip("0")
        clock += "S"
    if clock:
        out += "T" + clock
    return out


__all__ = ["Entity", "to_wire", "iso_duration"]
