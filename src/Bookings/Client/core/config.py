# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from ..common.constants import DEFAULT_SCOPE


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration settings for Bookings client operations.

    :param scopes: Scopes requested from the credential when acquiring a bearer token.
    :type scopes: tuple[str, ...]
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param page_size: Preferred number of items per page for list operations, sent
        as ``Prefer: odata.maxpagesize``. ``None`` leaves the page size to the server.
    :type page_size: int or None
    :param token_refresh_margin: Seconds before expiry at which a cached token is
        considered expired and refreshed (default: 300).
    :type token_refresh_margin: float
    :param refresh_on_unauthorized: Whether an HTTP 401 invalidates the cached token
        and resends the request once with a fresh token (default: True).
    :type refresh_on_unauthorized: bool
    """

    scopes: Tuple[str, ...] = (DEFAULT_SCOPE,)
    http_timeout: Optional[float] = None
    page_size: Optional[int] = None
    token_refresh_margin: float = 300.0
    refresh_on_unauthorized: bool = True

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Create a configuration instance, overriding defaults from the environment.

        Recognized variables: ``BOOKINGS_HTTP_TIMEOUT``, ``BOOKINGS_PAGE_SIZE`` and
        ``BOOKINGS_TOKEN_REFRESH_MARGIN``. Unset or blank variables keep the default.

        :return: Configuration instance.
        :rtype: ~Bookings.Client.core.config.ClientConfig
        """
        margin = _env_float("BOOKINGS_TOKEN_REFRESH_MARGIN")
        return cls(
            http_timeout=_env_float("BOOKINGS_HTTP_TIMEOUT"),
            page_size=_env_int("BOOKINGS_PAGE_SIZE"),
            token_refresh_margin=margin if margin is not None else 300.0,
        )
