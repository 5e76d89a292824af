# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the Microsoft Bookings service endpoints and OData payloads.
"""

# Service root for the Bookings entity sets on Microsoft Graph v1.0
DEFAULT_SERVICE_ROOT = "https://graph.microsoft.com/v1.0/solutions"

# Scope requested from the identity provider
DEFAULT_SCOPE = "https://graph.microsoft.com/.default"

# Entity set names
BOOKING_BUSINESSES = "bookingBusinesses"
APPOINTMENTS = "appointments"
STAFF_MEMBERS = "staffMembers"
SERVICES = "services"
CUSTOMERS = "customers"
CALENDAR_VIEW = "calendarView"

# Bound actions on a booking business
ACTION_PUBLISH = "publish"
ACTION_UNPUBLISH = "unpublish"

# OData payload annotations
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_NEXT_LINK_LEGACY = "odata.nextLink"
ODATA_ETAG = "@odata.etag"
ODATA_VALUE = "value"
