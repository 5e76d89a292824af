# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Bookings quickstart.

Signs in interactively, picks or creates a booking business, adds a staff
member and an appointment, lists appointments across pages and publishes the
business's public page.

Usage:
    python examples/quickstart.py

Environment:
    BOOKINGS_CLIENT_ID  Application (client) ID of your app registration.
    BOOKINGS_TENANT_ID  Optional tenant ID (defaults to "organizations").
"""

import datetime as dt
import logging
import os
import sys

from azure.identity import InteractiveBrowserCredential

from Bookings.Client.client import BookingsClient
from Bookings.Client.common.constants import APPOINTMENTS, BOOKING_BUSINESSES, SERVICES, STAFF_MEMBERS
from Bookings.Client.core.errors import BookingsError
from Bookings.Client.models.bookings import (
    BOOKING_APPOINTMENT,
    BOOKING_BUSINESS,
    BOOKING_SERVICE,
    BOOKING_STAFF_MEMBER,
    BookingStaffRole,
    date_time_time_zone,
    parse_date_time_time_zone,
    reminder,
)
from Bookings.Client.models.entity import Entity


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    client_id = os.environ.get("BOOKINGS_CLIENT_ID") or input("Client application id: ").strip()
    if not client_id:
        print("A client application id is required.")
        return 1
    credential = InteractiveBrowserCredential(
        client_id=client_id,
        tenant_id=os.environ.get("BOOKINGS_TENANT_ID", "organizations"),
    )

    with BookingsClient(credential) as client:
        businesses = list(client.list_businesses())
        for b in businesses:
            print(b["display_name"])

        name = input("Name of the booking business to use or create (empty to exit): ").strip()
        if not name:
            return 0

        business = next((b for b in businesses if b.get("display_name") == name), None)
        if business is None:
            print("Creating new booking business...")
            business = client.create(BOOKING_BUSINESSES, Entity.new_tracked(BOOKING_BUSINESS).set("display_name", name))
            print(f"Booking business created: {business.id}")
        else:
            print("Using existing booking business.")

        staff_path = f"{business.path}/{STAFF_MEMBERS}"
        staff = next(iter(client.list(staff_path, BOOKING_STAFF_MEMBER)), None)
        if staff is None:
            staff = Entity.new_tracked(BOOKING_STAFF_MEMBER)
            staff.set("email_address", "staff1@contoso.com")
            staff.set("display_name", "Staff1")
            staff.set("role", BookingStaffRole.EXTERNAL_GUEST)
            print("Creating staff member...")
            client.create(staff_path, staff)
        else:
            print(f"Using staff member {staff['display_name']}")

        service = next(iter(client.list(f"{business.path}/{SERVICES}", BOOKING_SERVICE)), None)
        if service is None:
            print("The business has no services; add one before booking appointments.")
            return 1

        start = dt.datetime.combine(dt.date.today() + dt.timedelta(days=1), dt.time(13, 0)).astimezone()
        appointment = Entity.new_tracked(BOOKING_APPOINTMENT)
        appointment.set("customer_email_address", "customer@contoso.com")
        appointment.set("customer_name", "John Doe")
        appointment.set("service_id", service.id)
        appointment.set("staff_member_ids", [staff.id])
        appointment.set("reminders", [reminder("Hello", dt.timedelta(hours=1))])
        appointment.set("start_date_time", date_time_time_zone(start))
        appointment.set("end_date_time", date_time_time_zone(start + dt.timedelta(hours=1)))
        print("Creating appointment...")
        client.create(f"{business.path}/{APPOINTMENTS}", appointment)

        for a in client.list(f"{business.path}/{APPOINTMENTS}", BOOKING_APPOINTMENT):
            when = parse_date_time_time_zone(a["start_date_time"]).astimezone()
            print(f"{when:%Y-%m-%d %H:%M}: {a.get('service_name')} with {a.get('customer_name')}")

        print("Publishing booking business public page...")
        client.publish(business)
        print(client.get_by_key(BOOKING_BUSINESSES, business.id, BOOKING_BUSINESS).get("public_url"))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except BookingsError as exc:
        print(f"{type(exc).__name__}: {exc.to_dict()}")
        sys.exit(1)
