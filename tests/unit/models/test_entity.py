# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for the change-tracked Entity."""

import datetime as dt
import unittest

from Bookings.Client.core.errors import SchemaError
from Bookings.Client.models.bookings import BOOKING_BUSINESS, BOOKING_STAFF_MEMBER, BookingStaffRole
from Bookings.Client.models.entity import Entity, iso_duration, to_wire


class TestEntityTracking(unittest.TestCase):
    def test_new_tracked_is_empty(self):
        e = Entity.new_tracked(BOOKING_BUSINESS)
        self.assertIsNone(e.id)
        self.assertEqual(e.dirty_fields, frozenset())
        self.assertFalse(e.is_dirty)
        self.assertEqual(e.serialize_partial(), {})

    def test_serialize_only_set_fields_with_wire_names(self):
        e = Entity.new_tracked(BOOKING_BUSINESS)
        e.set("display_name", "Acme").set("web_site_url", "https://acme.example")
        self.assertEqual(
            e.serialize_partial(),
            {"displayName": "Acme", "webSiteUrl": "https://acme.example"},
        )

    def test_default_values_are_still_transmitted(self):
        e = Entity.new_tracked(BOOKING_STAFF_MEMBER)
        e.set("use_business_hours", False)
        e.set("display_name", "")
        e.set("working_hours", [])
        e.set("time_zone", None)
        self.assertEqual(
            e.serialize_partial(),
            {"displayName": "", "timeZone": None, "useBusinessHours": False, "workingHours": []},
        )

    def test_initial_values_are_not_dirty(self):
        e = Entity(BOOKING_BUSINESS, {"display_name": "Acme", "phone": "555"})
        self.assertEqual(e["display_name"], "Acme")
        self.assertEqual(e.serialize_partial(), {})

    def test_unknown_field_does_not_touch_dirty_set(self):
        e = Entity.new_tracked(BOOKING_BUSINESS)
        e.set("display_name", "Acme")
        with self.assertRaises(SchemaError):
            e.set("displayName", "Other")
        with self.assertRaises(SchemaError):
            e.set("nonexistent", 1)
        self.assertEqual(e.dirty_fields, frozenset({"display_name"}))
        self.assertEqual(e.serialize_partial(), {"displayName": "Acme"})

    def test_read_only_fields_rejected(self):
        e = Entity.new_tracked(BOOKING_BUSINESS)
        with self.assertRaises(SchemaError) as cm:
            e.set("id", "123")
        self.assertEqual(cm.exception.subcode, "schema_read_only_field")
        with self.assertRaises(SchemaError):
            e.set("is_published", True)
        self.assertFalse(e.is_dirty)

    def test_mark_saved_merges_and_clears(self):
        e = Entity.new_tracked(BOOKING_BUSINESS)
        e.set("display_name", "Acme")
        e.mark_saved(
            {
                "@odata.context": "https://graph.example/$metadata#bookingBusinesses/$entity",
                "@odata.etag": 'W/"1"',
                "id": "123",
                "displayName": "Acme",
                "isPublished": False,
                "someNewProperty": "ignored",
            }
        )
        self.assertEqual(e.id, "123")
        self.assertEqual(e["display_name"], "Acme")
        self.assertIs(e["is_published"], False)
        self.assertEqual(e.etag, 'W/"1"')
        self.assertEqual(e.serialize_partial(), {})
        self.assertNotIn("someNewProperty", e.to_dict())

    def test_mark_saved_without_payload(self):
        e = Entity(BOOKING_BUSINESS, {"id": "123"})
        e.set("phone", "555")
        e.mark_saved(None)
        self.assertFalse(e.is_dirty)
        self.assertEqual(e["phone"], "555")

    def test_identifier_is_immutable(self):
        e = Entity(BOOKING_BUSINESS, {"id": "123"})
        e.set("phone", "555")
        with self.assertRaises(SchemaError):
            e.mark_saved({"id": "456"})
        # Failed merge leaves tracking intact.
        self.assertEqual(e.id, "123")
        self.assertEqual(e.dirty_fields, frozenset({"phone"}))

    def test_from_wire(self):
        e = Entity.from_wire(
            BOOKING_BUSINESS,
            {
                "@odata.etag": 'W/"7"',
                "id": "abc",
                "displayName": "Acme",
                "publicUrl": "https://book.example/acme",
                "address@odata.type": "#microsoft.graph.physicalAddress",
            },
            path="bookingBusinesses/abc",
        )
        self.assertEqual(e.id, "abc")
        self.assertEqual(e.etag, 'W/"7"')
        self.assertEqual(e.path, "bookingBusinesses/abc")
        self.assertEqual(e["public_url"], "https://book.example/acme")
        self.assertNotIn("address", e)
        self.assertFalse(e.is_dirty)

    def test_get_and_getitem_validate_names(self):
        e = Entity.new_tracked(BOOKING_BUSINESS)
        self.assertIsNone(e.get("phone"))
        self.assertEqual(e.get("phone", "n/a"), "n/a")
        with self.assertRaises(KeyError):
            _ = e["phone"]
        with self.assertRaises(SchemaError):
            e.get("telephone")

    def test_unknown_initial_value_rejected(self):
        with self.assertRaises(SchemaError):
            Entity(BOOKING_BUSINESS, {"telephone": "555"})


class TestWireConversion(unittest.TestCase):
    def test_enum_and_nested(self):
        value = {"role": BookingStaffRole.EXTERNAL_GUEST, "ids": ("a", "b")}
        self.assertEqual(to_wire(value), {"role": "externalGuest", "ids": ["a", "b"]})

    def test_datetimes(self):
        self.assertEqual(to_wire(dt.datetime(2024, 5, 1, 13, 0)), "2024-05-01T13:00:00")
        self.assertEqual(to_wire(dt.date(2024, 5, 1)), "2024-05-01")

    def test_iso_duration(self):
        self.assertEqual(iso_duration(dt.timedelta(hours=1)), "PT1H")
        self.assertEqual(iso_duration(dt.timedelta(minutes=90)), "PT1H30M")
        self.assertEqual(iso_duration(dt.timedelta(days=2)), "P2D")
        self.assertEqual(iso_duration(dt.timedelta(days=1, seconds=30)), "P1DT30S")
        self.assertEqual(iso_duration(dt.timedelta(0)), "PT0S")
        self.assertEqual(iso_duration(-dt.timedelta(minutes=15)), "-PT15M")
        self.assertEqual(to_wire(dt.timedelta(minutes=30)), "PT30M")

    def test_iso_duration_fractional_seconds(self):
        self.assertEqual(iso_duration(dt.timedelta(microseconds=1)), "PT0.000001S")
        self.assertEqual(iso_duration(dt.timedelta(seconds=1.5)), "PT1.5S")
        self.assertEqual(iso_duration(dt.timedelta(minutes=2, seconds=3, milliseconds=250)), "PT2M3.25S")
        self.assertEqual(iso_duration(-dt.timedelta(microseconds=10)), "-PT0.00001S")


if __name__ == "__main__":
    unittest.main()
