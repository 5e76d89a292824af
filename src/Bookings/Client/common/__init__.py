# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Common constants for the Bookings client.
"""

__all__ = []
