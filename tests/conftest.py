# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for Bookings client tests.
"""

import pytest

from Bookings.Client.core._auth import StaticTokenProvider
from Bookings.Client.core.config import ClientConfig


@pytest.fixture
def static_provider():
    """Credential provider returning a fixed token."""
    return StaticTokenProvider("test_token_12345")


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return ClientConfig(http_timeout=5, page_size=None)


@pytest.fixture
def sample_business_id():
    """Booking businesses are keyed by their SMTP address."""
    return "ContosoLunchDelivery@contoso.onmicrosoft.com"
