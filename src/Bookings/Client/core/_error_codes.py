# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# Auth subcodes
AUTH_EXCHANGE_FAILED = "auth_exchange_failed"
AUTH_EMPTY_TOKEN = "auth_empty_token"
AUTH_TIMEOUT = "auth_timeout"

# Transport subcodes
TRANSPORT_TIMEOUT = "transport_timeout"
TRANSPORT_CONNECTION = "transport_connection"

# Schema subcodes
SCHEMA_UNKNOWN_FIELD = "schema_unknown_field"
SCHEMA_READ_ONLY_FIELD = "schema_read_only_field"
SCHEMA_KEY_CHANGED = "schema_key_changed"


def http_subcode(status_code: int) -> str:
    return f"http_{status_code}"
