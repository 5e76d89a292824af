# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Entity schemas and value helpers for Microsoft Bookings.

Schemas mirror the Microsoft Graph v1.0 ``booking*`` resource types. Only the
properties a client commonly reads or writes are declared; unknown
properties in responses are ignored.
"""

from __future__ import annotations

import datetime as _dt
import enum
import re
from typing import Any, Dict, Mapping, Union

from .entity import iso_duration
from .schema import EntitySchema, Field

_EXTRA_FRACTION = re.compile(r"\.(\d{6})\d+")


class BookingStaffRole(str, enum.Enum):
    GUEST = "guest"
    ADMINISTRATOR = "administrator"
    VIEWER = "viewer"
    EXTERNAL_GUEST = "externalGuest"
    SCHEDULER = "scheduler"
    TEAM_MEMBER = "teamMember"


class BookingReminderRecipients(str, enum.Enum):
    ALL_ATTENDEES = "allAttendees"
    STAFF = "staff"
    CUSTOMER = "customer"


class BookingPriceType(str, enum.Enum):
    UNDEFINED = "undefined"
    FIXED_PRICE = "fixedPrice"
    STARTING_AT = "startingAt"
    HOURLY = "hourly"
    FREE = "free"
    PRICE_VARIES = "priceVaries"
    CALL_US = "callUs"
    NOT_SET = "notSet"


BOOKING_BUSINESS = EntitySchema(
    "bookingBusiness",
    [
        Field("id", "id"),
        Field("display_name", "displayName"),
        Field("business_type", "businessType"),
        Field("phone", "phone"),
        Field("email", "email"),
        Field("web_site_url", "webSiteUrl"),
        Field("default_currency_iso", "defaultCurrencyIso"),
        Field("language_tag", "languageTag"),
        Field("address", "address"),
        Field("business_hours", "businessHours"),
        Field("scheduling_policy", "schedulingPolicy"),
        Field("is_published", "isPublished", read_only=True),
        Field("public_url", "publicUrl", read_only=True),
        Field("created_date_time", "createdDateTime", read_only=True),
        Field("last_updated_date_time", "lastUpdatedDateTime", read_only=True),
    ],
)

BOOKING_STAFF_MEMBER = EntitySchema(
    "bookingStaffMember",
    [
        Field("id", "id"),
        Field("display_name", "displayName"),
        Field("email_address", "emailAddress"),
        Field("role", "role"),
        Field("time_zone", "timeZone"),
        Field("use_business_hours", "useBusinessHours"),
        Field("working_hours", "workingHours"),
        Field("availability_is_affected_by_personal_calendar", "availabilityIsAffectedByPersonalCalendar"),
        Field("is_email_notification_enabled", "isEmailNotificationEnabled"),
        Field("membership_status", "membershipStatus", read_only=True),
    ],
)

BOOKING_SERVICE = EntitySchema(
    "bookingService",
    [
        Field("id", "id"),
        Field("display_name", "displayName"),
        Field("description", "description"),
        Field("default_duration", "defaultDuration"),
        Field("default_price", "defaultPrice"),
        Field("default_price_type", "defaultPriceType"),
        Field("default_reminders", "defaultReminders"),
        Field("staff_member_ids", "staffMemberIds"),
        Field("is_hidden_from_customers", "isHiddenFromCustomers"),
        Field("maximum_attendees_count", "maximumAttendeesCount"),
        Field("notes", "notes"),
    ],
)

BOOKING_CUSTOMER = EntitySchema(
    "bookingCustomer",
    [
        Field("id", "id"),
        Field("display_name", "displayName"),
        Field("email_address", "emailAddress"),
        Field("phones", "phones"),
        Field("addresses", "addresses"),
    ],
)

BOOKING_APPOINTMENT = EntitySchema(
    "bookingAppointment",
    [
        Field("id", "id"),
        Field("service_id", "serviceId"),
        Field("service_name", "serviceName"),
        Field("service_notes", "serviceNotes"),
        Field("staff_member_ids", "staffMemberIds"),
        Field("customer_name", "customerName"),
        Field("customer_email_address", "customerEmailAddress"),
        Field("customer_phone", "customerPhone"),
        Field("customer_notes", "customerNotes"),
        Field("customers", "customers"),
        Field("start_date_time", "startDateTime"),
        Field("end_date_time", "endDateTime"),
        Field("reminders", "reminders"),
        Field("price", "price"),
        Field("price_type", "priceType"),
        Field("is_location_online", "isLocationOnline"),
        Field("opt_out_of_customer_email", "optOutOfCustomerEmail"),
        Field("join_web_url", "joinWebUrl", read_only=True),
        Field("duration", "duration", read_only=True),
    ],
)


def date_time_time_zone(value: _dt.datetime, time_zone: str = "UTC") -> Dict[str, str]:
    """
    Build a Graph ``dateTimeTimeZone`` value.

    Aware datetimes are converted to UTC when ``time_zone`` is ``"UTC"``.
    """
    if value.tzinfo is not None and time_zone == "UTC":
        value = value.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return {"dateTime": value.isoformat(), "timeZone": time_zone}


def parse_date_time_time_zone(value: Mapping[str, Any]) -> _dt.datetime:
    """
    Parse a Graph ``dateTimeTimeZone`` value. UTC values come back timezone-aware;
    other zones are returned naive.
    """
    raw = str(value["dateTime"])
    # Graph emits seven fractional digits, which fromisoformat rejects before 3.11
    raw = _EXTRA_FRACTION.sub(r".\1", raw)
    if raw.endswith("Z"):
        raw = raw[:-1]
    parsed = _dt.datetime.fromisoformat(raw)
    if str(value.get("timeZone", "")).upper() == "UTC" and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_dt.timezone.utc)
    return parsed


def reminder(
    message: str,
    offset: Union[_dt.timedelta, str],
    recipients: BookingReminderRecipients = BookingReminderRecipients.ALL_ATTENDEES,
) -> Dict[str, str]:
    """Build a ``bookingReminder`` sent ``offset`` before the appointment starts."""
    return {
        "message": message,
        "offset": iso_duration(offset) if isinstance(offset, _dt.timedelta) else offset,
        "recipients": recipients.value,
    }


__all__ = [
    "BookingStaffRole",
    "BookingReminderRecipients",
    "BookingPriceType",
    "BOOKING_BUSINESS",
    "BOOKING_STAFF_MEMBER",
    "BOOKING_SERVICE",
    "BOOKING_CUSTOMER",
    "BOOKING_APPOINTMENT",
    "date_time_time_zone",
    "parse_date_time_time_zone",
    "reminder",
]
