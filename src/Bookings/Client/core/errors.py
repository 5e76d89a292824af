# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exception hierarchy for the Bookings client.

Every error raised by the client derives from :class:`BookingsError`, which
carries a stable ``code``, an optional ``subcode`` and a ``details`` mapping
that can be serialized with :meth:`BookingsError.to_dict`.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional

from ._error_codes import http_subcode


class BookingsError(Exception):
    """Base structured error for the Bookings client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = dict(details or {})
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class AuthError(BookingsError):
    """Acquiring or refreshing a bearer token failed."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="auth_error", subcode=subcode, details=details, source="client")


class TransportError(BookingsError):
    """The request never produced an HTTP response (connection failure, timeout)."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            code="transport_error",
            subcode=subcode,
            details=details,
            source="client",
            is_transient=True,
        )


class SchemaError(BookingsError):
    """A field was used that the entity schema does not allow."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="schema_error", subcode=subcode, details=details, source="client")


class HttpError(BookingsError):
    """The service answered with a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        service_error_code: Optional[str] = None,
        request_id: Optional[str] = None,
        client_request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if request_id is not None:
            d["request_id"] = request_id
        if client_request_id is not None:
            d["client_request_id"] = client_request_id
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code="http_error",
            subcode=http_subcode(status_code),
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )


class ClientError(HttpError):
    """HTTP 4xx. The request must be fixed by the caller; never retried."""

    def __init__(self, status_code: int, server_message: Optional[str] = None, **kwargs: Any) -> None:
        self.server_message = server_message
        message = f"HTTP {status_code}"
        if server_message:
            message = f"{message}: {server_message}"
        super().__init__(message, status_code, is_transient=False, **kwargs)


class NotFoundError(ClientError):
    """HTTP 404 on the addressed resource."""

    def __init__(self, server_message: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(404, server_message, **kwargs)


class ServerError(HttpError):
    """HTTP 5xx. Safe to retry with backoff at the caller's discretion."""

    def __init__(self, status_code: int, server_message: Optional[str] = None, **kwargs: Any) -> None:
        self.server_message = server_message
        message = f"HTTP {status_code}"
        if server_message:
            message = f"{message}: {server_message}"
        super().__init__(message, status_code, is_transient=True, **kwargs)


__all__ = [
    "BookingsError",
    "AuthError",
    "TransportError",
    "SchemaError",
    "HttpError",
    "ClientError",
    "NotFoundError",
    "ServerError",
]
