"""Shared test fixtures.

Provides:
- Settings for both Salesforce connection flows (no .env lookup)
- A MagicMock standing in for the simple-salesforce handle
- A SalesforceClient wired to that mock
- Wire-format integration config payloads
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.salesforce_mcp.config import ConnectionType, Settings
from src.salesforce_mcp.salesforce.client import SalesforceClient


@pytest.fixture
def password_settings() -> Settings:
    """Settings for the username/password grant."""
    return Settings(
        _env_file=None,
        SALESFORCE_CONNECTION_TYPE=ConnectionType.USER_PASSWORD,
        SALESFORCE_USERNAME="integration@example.com",
        SALESFORCE_PASSWORD="hunter2",
        SALESFORCE_TOKEN="SECTOKEN",
        SALESFORCE_INSTANCE_URL="https://login.salesforce.com",
    )


@pytest.fixture
def oauth_settings() -> Settings:
    """Settings for the OAuth 2.0 client credentials grant."""
    return Settings(
        _env_file=None,
        SALESFORCE_CONNECTION_TYPE=ConnectionType.CLIENT_CREDENTIALS,
        SALESFORCE_CLIENT_ID="client-id",
        SALESFORCE_CLIENT_SECRET="client-secret",
        SALESFORCE_INSTANCE_URL="https://acme.my.salesforce.com",
    )


@pytest.fixture
def mock_sf() -> MagicMock:
    """Mock simple-salesforce handle."""
    return MagicMock()


@pytest.fixture
def sf_client(mock_sf) -> SalesforceClient:
    """SalesforceClient over the mock handle."""
    return SalesforceClient(mock_sf)


@pytest.fixture
def whatsapp_config_payload() -> dict:
    """Wire-format create config for a WhatsApp lead notification."""
    return {
        "name": "lead_whatsapp",
        "type": "whatsapp",
        "endpoint": "https://graph.facebook.com/v17.0/123/messages",
        "authType": "bearer",
        "authConfig": {"token": "wa-token", "phoneNumber": "+15550100"},
        "objectName": "Lead",
        "triggerEvents": ["insert"],
        "messageTemplate": "New lead: {Name} from {Company}",
        "active": True,
    }
