# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from Bookings.Client.core.errors import SchemaError
from Bookings.Client.models.schema import EntitySchema, Field


def make_schema():
    return EntitySchema(
        "widget",
        [Field("id", "id"), Field("display_name", "displayName"), Field("is_live", "isLive", read_only=True)],
    )


def test_lookup_by_name_and_wire_name():
    schema = make_schema()
    assert schema.field("display_name").wire_name == "displayName"
    assert schema.by_wire_name("displayName").name == "display_name"
    assert schema.by_wire_name("DisplayName") is None
    assert schema.names == ("id", "display_name", "is_live")
    assert len(schema) == 3
    assert "display_name" in schema
    assert "displayName" not in schema


def test_key_is_forced_read_only():
    schema = make_schema()
    assert schema.key_field.read_only is True


def test_unknown_field_raises_schema_error():
    with pytest.raises(SchemaError) as ei:
        make_schema().field("colour")
    assert ei.value.subcode == "schema_unknown_field"
    assert ei.value.details == {"schema": "widget", "field": "colour"}


def test_duplicate_names_rejected():
    with pytest.raises(ValueError):
        EntitySchema("w", [Field("id", "id"), Field("id", "other")])
    with pytest.raises(ValueError):
        EntitySchema("w", [Field("id", "id"), Field("a", "id")])


def test_missing_key_rejected():
    with pytest.raises(ValueError):
        EntitySchema("w", [Field("name", "name")])


def test_custom_key():
    schema = EntitySchema("w", [Field("code", "code"), Field("name", "name")], key="code")
    assert schema.key_field.name == "code"
