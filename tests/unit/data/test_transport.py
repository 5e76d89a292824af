# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import threading

import pytest
import requests

from Bookings.Client.core._auth import CallableTokenProvider, StaticTokenProvider
from Bookings.Client.core.config import ClientConfig
from Bookings.Client.core.errors import (
    AuthError,
    ClientError,
    NotFoundError,
    ServerError,
    TransportError,
)
from Bookings.Client.data._transport import _Transport, is_absolute, join_key
from tests.unit.test_helpers import SERVICE_ROOT, make_transport


def test_send_injects_bearer_and_decodes_json():
    t, http = make_transport([(200, {}, {"id": "1"})])
    status, body = t.send("GET", "bookingBusinesses/1")
    assert (status, body) == (200, {"id": "1"})
    method, url, kwargs = http.calls[0]
    assert method == "GET"
    assert url == f"{SERVICE_ROOT}/bookingBusinesses/1"
    headers = kwargs["headers"]
    assert headers["Authorization"] == "Bearer test_token"
    assert headers["Accept"] == "application/json"
    assert headers["client-request-id"]
    assert "Content-Type" not in headers
    assert "json" not in kwargs


def test_send_body_as_json():
    t, http = make_transport([(201, {}, {"id": "1", "displayName": "Acme"})])
    t.send("POST", "/bookingBusinesses", {"displayName": "Acme"})
    _, url, kwargs = http.calls[0]
    assert url == f"{SERVICE_ROOT}/bookingBusinesses"
    assert kwargs["json"] == {"displayName": "Acme"}
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_absolute_url_used_verbatim():
    link = "https://graph.example/v1.0/solutions/bookingBusinesses?$skiptoken=abc%3D%3D"
    t, http = make_transport([(200, {}, {"value": []})])
    t.send("GET", link)
    assert http.calls[0][1] == link


def test_empty_and_text_bodies():
    t, _ = make_transport([(204, {}, None), (200, {}, "plain text")])
    assert t.send("POST", "x/publish") == (204, None)
    assert t.send("GET", "x") == (200, "plain text")


def test_per_call_headers_and_timeout():
    t, http = make_transport([(200, {}, {})])
    t.send("GET", "x", headers={"Prefer": "odata.maxpagesize=2"}, timeout=3, params={"a": "b"})
    _, _, kwargs = http.calls[0]
    assert kwargs["headers"]["Prefer"] == "odata.maxpagesize=2"
    assert kwargs["timeout"] == 3
    assert kwargs["params"] == {"a": "b"}


def test_404_raises_not_found():
    t, _ = make_transport(
        [
            (
                404,
                {"request-id": "req-1"},
                {"error": {"code": "ErrorItemNotFound", "message": "The specified object was not found."}},
            )
        ]
    )
    with pytest.raises(NotFoundError) as ei:
        t.send("GET", "bookingBusinesses/missing")
    err = ei.value
    assert err.status_code == 404
    assert err.server_message == "The specified object was not found."
    assert err.details["service_error_code"] == "ErrorItemNotFound"
    assert err.details["request_id"] == "req-1"


def test_4xx_raises_client_error():
    t, _ = make_transport([(400, {}, {"error": {"code": "BadRequest", "message": "Invalid role"}})])
    with pytest.raises(ClientError) as ei:
        t.send("POST", "x", {"role": "bogus"})
    assert not isinstance(ei.value, NotFoundError)
    assert ei.value.status_code == 400
    assert ei.value.server_message == "Invalid role"
    assert ei.value.is_transient is False


def test_5xx_raises_server_error_without_retry():
    t, http = make_transport([(503, {}, "Service Unavailable"), (200, {}, {})])
    with pytest.raises(ServerError) as ei:
        t.send("GET", "x")
    assert ei.value.status_code == 503
    assert ei.value.details["body_excerpt"] == "Service Unavailable"
    assert len(http.calls) == 1


def test_connection_failure_raises_transport_error():
    t, http = make_transport([requests.exceptions.ConnectionError("refused"), (200, {}, {})])
    with pytest.raises(TransportError) as ei:
        t.send("POST", "x", {"a": 1})
    assert ei.value.subcode == "transport_connection"
    assert ei.value.is_transient is True
    assert len(http.calls) == 1


def test_timeout_raises_transport_error():
    t, _ = make_transport([requests.exceptions.ReadTimeout("slow")])
    with pytest.raises(TransportError) as ei:
        t.send("GET", "x", timeout=0.01)
    assert ei.value.subcode == "transport_timeout"


def test_401_refreshes_token_once():
    tokens = iter(["first", "second", "third"])
    provider = CallableTokenProvider(lambda: next(tokens))
    t, http = make_transport([(401, {}, {"error": {"message": "expired"}}), (200, {}, {"ok": True})], provider=provider)
    assert t.send("GET", "x") == (200, {"ok": True})
    assert [c[2]["headers"]["Authorization"] for c in http.calls] == ["Bearer first", "Bearer second"]


def test_second_401_surfaces_client_error():
    tokens = iter(["first", "second"])
    provider = CallableTokenProvider(lambda: next(tokens))
    t, http = make_transport([(401, {}, {}), (401, {}, {"error": {"message": "no access"}})], provider=provider)
    with pytest.raises(ClientError) as ei:
        t.send("GET", "x")
    assert ei.value.status_code == 401
    assert len(http.calls) == 2


def test_401_refresh_can_be_disabled():
    t, http = make_transport([(401, {}, {})], config=ClientConfig(refresh_on_unauthorized=False))
    with pytest.raises(ClientError):
        t.send("GET", "x")
    assert len(http.calls) == 1


def test_auth_failure_propagates_before_request():
    def fail():
        raise AuthError("cancelled")

    t, http = make_transport([(200, {}, {})], provider=CallableTokenProvider(fail))
    with pytest.raises(AuthError):
        t.send("GET", "x")
    assert http.calls == []


def test_service_root_required():
    with pytest.raises(ValueError):
        _Transport(StaticTokenProvider("t"), "  ", ClientConfig())


def test_join_key_quotes_segment():
    assert join_key("bookingBusinesses", "Contoso@contoso.com") == "bookingBusinesses/Contoso@contoso.com"
    assert join_key("bookingBusinesses/", "a/b c") == "bookingBusinesses/a%2Fb%20c"
    with pytest.raises(ValueError):
        join_key("bookingBusinesses", " ")


def test_is_absolute():
    assert is_absolute("https://x/y")
    assert is_absolute("HTTP://x/y")
    assert not is_absolute("bookingBusinesses")


def test_send_timeout_bounds_wait_for_token_refresh():
    started = threading.Event()
    release = threading.Event()

    def slow_token():
        started.set()
        release.wait(5)
        return "fresh"

    provider = CallableTokenProvider(slow_token)
    t, http = make_transport([(200, {}, {"id": "1"})], provider=provider)
    refresher = threading.Thread(target=provider.token)
    refresher.start()
    try:
        assert started.wait(5)
        with pytest.raises(AuthError) as ei:
            t.send("GET", "bookingBusinesses/1", timeout=0.1)
        assert ei.value.subcode == "auth_timeout"
        assert http.calls == []
    finally:
        release.set()
        refresher.join()
