# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Static entity schemas.

An :class:`EntitySchema` declares the fields an entity may carry and the
wire-level name of each one. The mapping is explicit, so renaming between the
Python attribute (``display_name``) and the JSON property (``displayName``)
never relies on string case conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..core._error_codes import SCHEMA_UNKNOWN_FIELD
from ..core.errors import SchemaError


@dataclass(frozen=True)
class Field:
    """
    One property of an entity.

    :param name: Python-facing field name.
    :type name: str
    :param wire_name: JSON property name used by the service.
    :type wire_name: str
    :param read_only: Whether the value is populated by the server only.
    :type read_only: bool
    """

    name: str
    wire_name: str
    read_only: bool = False


class EntitySchema:
    """
    Ordered set of :class:`Field` objects for one entity type.

    :param name: Entity type name, used in error messages (e.g. ``"bookingBusiness"``).
    :type name: str
    :param fields: Field declarations. Names and wire names must be unique.
    :type fields: Iterable[Field]
    :param key: Name of the identifier field. It is always treated as read-only.
    :type key: str

    :raises ValueError: On duplicate names or a key that is not declared.
    """

    def __init__(self, name: str, fields: Iterable[Field], key: str = "id") -> None:
        self.name = name
        self.key = key
        self._by_name: Dict[str, Field] = {}
        self._by_wire: Dict[str, Field] = {}
        for f in fields:
            if f.name in self._by_name:
                raise ValueError(f"Duplicate field name '{f.name}' in schema '{name}'.")
            if f.wire_name in self._by_wire:
                raise ValueError(f"Duplicate wire name '{f.wire_name}' in schema '{name}'.")
            if f.name == key and not f.read_only:
                f = Field(f.name, f.wire_name, read_only=True)
            self._by_name[f.name] = f
            self._by_wire[f.wire_name] = f
        if key not in self._by_name:
            raise ValueError(f"Key field '{key}' is not declared in schema '{name}'.")

    @property
    def key_field(self) -> Field:
        return self._by_name[self.key]

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._by_name)

    def field(self, name: str) -> Field:
        """
        Look up a field by its Python name.

        :raises ~Bookings.Client.core.errors.SchemaError: If the schema has no such field.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise SchemaError(
                f"'{name}' is not a field of {self.name}.",
                subcode=SCHEMA_UNKNOWN_FIELD,
                details={"schema": self.name, "field": name},
            ) from None

    def by_wire_name(self, wire_name: str) -> Optional[Field]:
        return self._by_wire.get(wire_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Field]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"EntitySchema({self.name!r}, fields={list(self._by_name)!r})"


__all__ = ["Field", "EntitySchema"]
