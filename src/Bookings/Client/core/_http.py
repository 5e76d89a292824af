# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with timeout handling and optional session support.

This module provides :class:`~Bookings.Client.core._http._HttpClient`, a thin
wrapper around the requests library that applies per-method default timeouts
and optional connection pooling via session reuse. It never retries; retry
policy belongs to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

import requests


class _HttpClient:
    """
    HTTP client with timeout handling and optional session support.

    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    :param session: Optional requests.Session for connection pooling. If provided,
        all requests use this session for efficient connection reuse.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.default_timeout: Optional[float] = timeout
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute a single HTTP request.

        Applies default timeouts based on HTTP method (120s for POST/PATCH, 10s for others)
        unless the caller passed ``timeout``.

        :param method: HTTP method (GET, POST, PATCH, etc.).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers, data, etc.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If the request fails before a response arrives.
        """
        if kwargs.get("timeout") is None:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "patch") else 10

        if self._session is not None:
            return self._session.request(method, url, **kwargs)
        return requests.request(method, url, **kwargs)

    def close(self) -> None:
        """
        Close the HTTP client and release resources.

        If a session was provided, this method closes it. Safe to call multiple times.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
