# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the Bookings client.

This module contains the foundational components including authentication,
configuration, HTTP client, and error handling.
"""

from ._auth import (
    BearerToken,
    CallableTokenProvider,
    CredentialProvider,
    StaticTokenProvider,
    TokenCredentialProvider,
)
from .config import ClientConfig
from .errors import (
    AuthError,
    BookingsError,
    ClientError,
    HttpError,
    NotFoundError,
    SchemaError,
    ServerError,
    TransportError,
)

__all__ = [
    "BearerToken",
    "CredentialProvider",
    "TokenCredentialProvider",
    "CallableTokenProvider",
    "StaticTokenProvider",
    "ClientConfig",
    "BookingsError",
    "AuthError",
    "TransportError",
    "SchemaError",
    "HttpError",
    "ClientError",
    "NotFoundError",
    "ServerError",
]
