# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request transport and paged collection handling for the Bookings client.
"""

__all__ = []
