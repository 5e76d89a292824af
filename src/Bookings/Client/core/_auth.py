# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Credential providers supplying bearer tokens to the Bookings client.

The client depends only on :class:`CredentialProvider`. Concrete providers
decide where tokens come from: an Azure Identity ``TokenCredential``, an
arbitrary callable, or a fixed string.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from azure.core.credentials import TokenCredential
from azure.core.exceptions import AzureError

from ._error_codes import AUTH_EMPTY_TOKEN, AUTH_EXCHANGE_FAILED, AUTH_TIMEOUT
from .errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BearerToken:
    """
    Opaque bearer credential with an optional expiry.

    :param value: The token string sent as ``Authorization: Bearer <value>``.
    :type value: str
    :param expires_on: Expiry as seconds since the epoch, or ``None`` if unknown.
    :type expires_on: float or None
    """

    value: str
    expires_on: Optional[float] = None

    def is_expired(self, margin: float = 0.0, now: Optional[float] = None) -> bool:
        if self.expires_on is None:
            return False
        current = time.time() if now is None else now
        return current >= self.expires_on - margin

    def __repr__(self) -> str:
        return f"BearerToken(value='***', expires_on={self.expires_on!r})"


class CredentialProvider(ABC):
    """Supplies the current bearer token on demand."""

    @abstractmethod
    def token(self, timeout: Optional[float] = None) -> BearerToken:
        """
        Return a token valid for the next request.

        :param timeout: Seconds to wait for a refresh already in progress on
            another thread. ``None`` waits indefinitely.
        :type timeout: :class:`float` | None
        :raises ~Bookings.Client.core.errors.AuthError: If the identity exchange
            fails or the wait for a refresh times out.
        """

    def invalidate(self, token: Optional[BearerToken] = None, timeout: Optional[float] = None) -> None:
        """Forget a cached token so the next :meth:`token` call refreshes it."""


class _CachingCredentialProvider(CredentialProvider):
    """
    Caches one token and refreshes it under a lock.

    Concurrent callers that observe an expired token wait for a single
    refresh instead of each calling :meth:`_acquire`.
    """

    def __init__(self, refresh_margin: float = 300.0) -> None:
        self._refresh_margin = refresh_margin
        self._lock = threading.Lock()
        self._cached: Optional[BearerToken] = None

    def _usable(self, token: Optional[BearerToken]) -> bool:
        return token is not None and not token.is_expired(self._refresh_margin)

    def _wait_for_lock(self, timeout: Optional[float]) -> None:
        if not self._lock.acquire(timeout=-1 if timeout is None else max(timeout, 0.0)):
            raise AuthError(
                f"Timed out after {timeout}s waiting for a token refresh in progress.",
                subcode=AUTH_TIMEOUT,
                details={"timeout": timeout},
            )

    def token(self, timeout: Optional[float] = None) -> BearerToken:
        cached = self._cached
        if self._usable(cached):
            return cached
        self._wait_for_lock(timeout)
        try:
            # Another thread may have refreshed while we waited.
            cached = self._cached
            if self._usable(cached):
                return cached
            fresh = self._acquire()
            if not fresh.value:
                raise AuthError("Credential returned an empty token.", subcode=AUTH_EMPTY_TOKEN)
            self._cached = fresh
            logger.info("Acquired bearer token (expires_on=%s)", fresh.expires_on)
            return fresh
        finally:
            self._lock.release()

    def invalidate(self, token: Optional[BearerToken] = None, timeout: Optional[float] = None) -> None:
        self._wait_for_lock(timeout)
        try:
            if token is None or self._cached == token:
                self._cached = None
        finally:
            self._lock.release()

    @abstractmethod
    def _acquire(self) -> BearerToken:
        """Perform the underlying identity exchange."""


class TokenCredentialProvider(_CachingCredentialProvider):
    """
    Adapts an Azure Identity credential to :class:`CredentialProvider`.

    :param credential: Any ``azure.core.credentials.TokenCredential``, for example
        ``InteractiveBrowserCredential`` or ``ClientSecretCredential``.
    :type credential: ~azure.core.credentials.TokenCredential
    :param scopes: Scopes to request.
    :type scopes: Iterable[str]
    :param refresh_margin: Seconds before expiry at which the token is refreshed.
    :type refresh_margin: float

    Example::

        from azure.identity import InteractiveBrowserCredential

        provider = TokenCredentialProvider(
            InteractiveBrowserCredential(),
            ["https://graph.microsoft.com/.default"],
        )
    """

    def __init__(self, credential: TokenCredential, scopes: Iterable[str], refresh_margin: float = 300.0) -> None:
        if not isinstance(credential, TokenCredential):
            raise TypeError("credential must implement azure.core.credentials.TokenCredential.")
        super().__init__(refresh_margin)
        self.credential: TokenCredential = credential
        self.scopes = tuple(scopes)
        if not self.scopes:
            raise ValueError("At least one scope is required.")

    def _acquire(self) -> BearerToken:
        try:
            access = self.credential.get_token(*self.scopes)
        except AzureError as exc:
            raise AuthError(
                f"Token acquisition failed: {exc}",
                subcode=AUTH_EXCHANGE_FAILED,
                details={"scopes": list(self.scopes)},
            ) from exc
        return BearerToken(access.token, float(access.expires_on) if access.expires_on else None)


class CallableTokenProvider(_CachingCredentialProvider):
    """
    Wraps a callable returning a token string or :class:`BearerToken`.

    Tokens returned as plain strings have no known expiry, so they are reused
    until :meth:`invalidate` is called (for example after an HTTP 401).
    """

    def __init__(self, fn: Callable[[], Union[str, BearerToken]], refresh_margin: float = 300.0) -> None:
        if not callable(fn):
            raise TypeError("fn must be callable.")
        super().__init__(refresh_margin)
        self._fn = fn

    def _acquire(self) -> BearerToken:
        try:
            result = self._fn()
        except AuthError:
            raise
        except Exception as exc:
            raise AuthError(f"Token callback failed: {exc}", subcode=AUTH_EXCHANGE_FAILED) from exc
        if isinstance(result, BearerToken):
            return result
        if isinstance(result, str):
            return BearerToken(_strip_scheme(result))
        raise AuthError(
            f"Token callback returned {type(result).__name__}, expected str or BearerToken.",
            subcode=AUTH_EXCHANGE_FAILED,
        )


class StaticTokenProvider(CredentialProvider):
    """Always returns the same token (API keys, tests)."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("token is required.")
        self._token = BearerToken(_strip_scheme(token))

    def token(self, timeout: Optional[float] = None) -> BearerToken:
        return self._token


def _strip_scheme(value: str) -> str:
    # Accept a full header value such as "Bearer eyJ..."
    value = value.strip()
    if value[:7].lower() == "bearer ":
        return value[7:].strip()
    return value


__all__ = [
    "BearerToken",
    "CredentialProvider",
    "TokenCredentialProvider",
    "CallableTokenProvider",
    "StaticTokenProvider",
]
