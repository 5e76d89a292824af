# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the Bookings client.

- :class:`~Bookings.Client.models.schema.EntitySchema`: static field declarations with wire names.
- :class:`~Bookings.Client.models.entity.Entity`: change-tracked entity.
- :mod:`~Bookings.Client.models.bookings`: Microsoft Bookings schemas and value helpers.

Note:
    This ``__init__.py`` does NOT import/export models. Import directly from
    the specific module files.
"""

__all__ = []
