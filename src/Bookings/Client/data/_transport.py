# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Authenticated JSON transport.

:class:`_Transport` turns ``(method, path, body)`` into an HTTP call against
the configured service root, injects the bearer token, decodes the JSON
response and classifies failures into the client's error hierarchy.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import requests

from ..core._auth import BearerToken, CredentialProvider
from ..core._error_codes import TRANSPORT_CONNECTION, TRANSPORT_TIMEOUT
from ..core._http import _HttpClient
from ..core.config import ClientConfig
from ..core.errors import ClientError, HttpError, NotFoundError, ServerError, TransportError

logger = logging.getLogger(__name__)

_BODY_EXCERPT_LIMIT = 200


def join_key(collection_path: str, key: Any) -> str:
    """Address one member of a collection: ``bookingBusinesses/<quoted key>``."""
    k = str(key).strip()
    if not k:
        raise ValueError("key is required")
    return f"{collection_path.rstrip('/')}/{quote(k, safe='@.-_~')}"


def is_absolute(path: str) -> bool:
    lowered = path.lower()
    return lowered.startswith("https://") or lowered.startswith("http://")


class _Transport:
    """
    Sends requests relative to a service root with bearer authentication.

    Stateless between calls apart from the credential provider's token cache.
    Never retries, except for one resend with a fresh token after HTTP 401
    when ``config.refresh_on_unauthorized`` is set.

    :param credentials: Source of bearer tokens.
    :type credentials: ~Bookings.Client.core._auth.CredentialProvider
    :param service_root: Base URL every relative path is joined to.
    :type service_root: str
    :param config: Client configuration.
    :type config: ~Bookings.Client.core.config.ClientConfig or None
    :param session: Optional session for connection pooling.
    :type session: requests.Session or None
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        service_root: str,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.credentials = credentials
        self.service_root = (service_root or "").strip().rstrip("/")
        if not self.service_root:
            raise ValueError("service_root is required.")
        self.config = config or ClientConfig.from_env()
        self._http = _HttpClient(timeout=self.config.http_timeout, session=session)

    def url_for(self, path: str) -> str:
        # Continuation links arrive absolute and must be used verbatim.
        if is_absolute(path):
            return path
        return f"{self.service_root}/{path.lstrip('/')}"

    def _headers(self, token: BearerToken, has_body: bool, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {token.value}",
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "client-request-id": str(uuid.uuid4()),
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        if extra:
            headers.update(extra)
        return headers

    def send(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[int, Any]:
        """
        Send one request and return ``(status, decoded_body)``.

        ``decoded_body`` is the parsed JSON document, the raw text for non-JSON
        responses, or ``None`` for an empty body.

        :raises ~Bookings.Client.core.errors.AuthError: If no token can be obtained.
        :raises ~Bookings.Client.core.errors.TransportError: On connection failure or timeout.
        :raises ~Bookings.Client.core.errors.NotFoundError: On HTTP 404.
        :raises ~Bookings.Client.core.errors.ClientError: On any other HTTP 4xx.
        :raises ~Bookings.Client.core.errors.ServerError: On HTTP 5xx.
        """
        url = self.url_for(path)
        token = self.credentials.token(timeout=_wait_budget(timeout))
        r = self._send_once(method, url, token, body, params, headers, timeout)
        if r.status_code == 401 and self.config.refresh_on_unauthorized:
            logger.info("%s %s returned 401; refreshing token and resending once", method.upper(), url)
            self.credentials.invalidate(token, timeout=_wait_budget(timeout))
            token = self.credentials.token(timeout=_wait_budget(timeout))
            r = self._send_once(method, url, token, body, params, headers, timeout)

        decoded = _decode(r)
        if r.status_code >= 400:
            raise _http_error(r, decoded)
        return r.status_code, decoded

    def _send_once(
        self,
        method: str,
        url: str,
        token: BearerToken,
        body: Optional[Any],
        params: Optional[Dict[str, Any]],
        extra_headers: Optional[Dict[str, str]],
        timeout: Optional[float],
    ) -> requests.Response:
        headers = self._headers(token, body is not None, extra_headers)
        kwargs: Dict[str, Any] = {"headers": headers, "timeout": timeout}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["json"] = body
        start = time.perf_counter()
        try:
            r = self._http._request(method, url, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise TransportError(
                f"{method.upper()} {url} timed out: {exc}",
                subcode=TRANSPORT_TIMEOUT,
                details={"url": url, "client_request_id": headers["client-request-id"]},
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                f"{method.upper()} {url} failed: {exc}",
                subcode=TRANSPORT_CONNECTION,
                details={"url": url, "client_request_id": headers["client-request-id"]},
            ) from exc
        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.WARNING if r.status_code >= 400 else logging.DEBUG
        logger.log(
            level,
            "%s %s %s %.1fms",
            method.upper(),
            url,
            r.status_code,
            elapsed_ms,
            extra={"client_request_id": headers["client-request-id"]},
        )
        return r

    def close(self) -> None:
        self._http.close()


def _wait_budget(timeout: Any) -> Optional[float]:
    # requests also accepts a (connect, read) pair.
    if isinstance(timeout, tuple):
        return sum(t for t in timeout if t is not None) or None
    return timeout


def _decode(r: Any) -> Any:
    text = getattr(r, "text", "") or ""
    if not text.strip():
        return None
    try:
        return r.json()
    except ValueError:
        return text


def _http_error(r: Any, decoded: Any) -> HttpError:
    status = r.status_code
    headers = getattr(r, "headers", None) or {}
    service_code: Optional[str] = None
    message: Optional[str] = None
    if isinstance(decoded, dict):
        err = decoded.get("error")
        if isinstance(err, dict):
            service_code = err.get("code")
            message = err.get("message")
        elif isinstance(decoded.get("message"), str):
            message = decoded["message"]
    text = getattr(r, "text", "") or ""
    kwargs: Dict[str, Any] = {
        "service_error_code": service_code,
        "request_id": headers.get("request-id"),
        "client_request_id": headers.get("client-request-id"),
        "body_excerpt": text[:_BODY_EXCERPT_LIMIT] if text else None,
    }
    if status == 404:
        return NotFoundError(message, **kwargs)
    if status < 500:
        return ClientError(status, message, **kwargs)
    return ServerError(status, message, **kwargs)


__all__ = ["_Transport", "join_key", "is_absolute"]
