# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Client runtime for Microsoft Bookings and similar OData-style JSON APIs.

- :class:`~Bookings.Client.client.BookingsClient`: create, read, update, list and action calls.
- :class:`~Bookings.Client.models.entity.Entity`: change-tracked entity serialized as a partial body.
- :mod:`~Bookings.Client.core._auth`: pluggable bearer token providers.
"""

from .client import BookingsClient

__version__ = "0.1.0"

__all__ = ["BookingsClient", "__version__"]
