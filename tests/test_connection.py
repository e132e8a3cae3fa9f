"""Tests for the Salesforce connection establisher.

simple_salesforce.Salesforce and httpx are patched -- no network calls.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from simple_salesforce.exceptions import SalesforceAuthenticationFailed

from src.salesforce_mcp.core.errors import AuthenticationError, ConfigurationError
from src.salesforce_mcp.salesforce.connection import (
    create_salesforce_connection,
    login_domain,
)

TOKEN_URL = "https://acme.my.salesforce.com/services/oauth2/token"


# ── Login Domain ─────────────────────────────────────────────────────────────


class TestLoginDomain:
    """login_domain maps login URLs to simple-salesforce domains."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://login.salesforce.com", "login"),
            ("https://test.salesforce.com/", "test"),
            ("https://acme.my.salesforce.com", "acme.my"),
        ],
    )
    def test_known_hosts(self, url, expected):
        assert login_domain(url) == expected

    @pytest.mark.parametrize(
        "url",
        ["https://acme.my.salesforce.mil", "https://login.example-gov.force.com"],
    )
    def test_other_hosts_have_no_domain(self, url):
        assert login_domain(url) is None

    def test_rejects_url_without_host(self):
        with pytest.raises(ConfigurationError, match="absolute login URL"):
            login_domain("login.salesforce.com")


# ── Password Grant ───────────────────────────────────────────────────────────


class TestUserPasswordConnection:
    """Username/password + security token flow."""

    async def test_missing_credentials_names_variables(self, password_settings):
        settings = password_settings.model_copy(update={"SALESFORCE_TOKEN": ""})

        with pytest.raises(ConfigurationError) as exc_info:
            await create_salesforce_connection(settings)

        message = str(exc_info.value)
        assert "SALESFORCE_USERNAME" in message
        assert "SALESFORCE_PASSWORD" in message
        assert "SALESFORCE_TOKEN" in message

    async def test_delegates_login_to_simple_salesforce(self, password_settings):
        with patch("src.salesforce_mcp.salesforce.connection.Salesforce") as mock_cls:
            conn = await create_salesforce_connection(password_settings)

        assert conn is mock_cls.return_value
        kwargs = mock_cls.call_args.kwargs
        assert kwargs["username"] == "integration@example.com"
        assert kwargs["password"] == "hunter2"
        assert kwargs["security_token"] == "SECTOKEN"
        assert kwargs["domain"] == "login"

    async def test_login_failure_raises_authentication_error(self, password_settings):
        failure = SalesforceAuthenticationFailed("INVALID_LOGIN", "Invalid username or password")

        with patch(
            "src.salesforce_mcp.salesforce.connection.Salesforce",
            side_effect=failure,
        ):
            with pytest.raises(AuthenticationError, match="INVALID_LOGIN"):
                await create_salesforce_connection(password_settings)


# ── SOAP Login (non-salesforce.com hosts) ────────────────────────────────────

SOAP_URL = "https://acme.my.salesforce.mil/services/Soap/u/59.0"

SOAP_LOGIN_OK = b"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns="urn:partner.soap.sforce.com">
<soapenv:Body><loginResponse><result>
<serverUrl>https://acme.my.salesforce.mil/services/Soap/u/59.0/00Dxx0000001</serverUrl>
<sessionId>00Dxx!session</sessionId>
</result></loginResponse></soapenv:Body></soapenv:Envelope>"""

SOAP_LOGIN_FAULT = b"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
<soapenv:Body><soapenv:Fault>
<faultcode>INVALID_LOGIN</faultcode>
<faultstring>INVALID_LOGIN: Invalid username, password, security token; or user locked out.</faultstring>
</soapenv:Fault></soapenv:Body></soapenv:Envelope>"""


class TestSoapLoginConnection:
    """Password grant against login hosts simple-salesforce cannot address."""

    @pytest.fixture
    def gov_settings(self, password_settings):
        return password_settings.model_copy(
            update={"SALESFORCE_INSTANCE_URL": "https://acme.my.salesforce.mil"}
        )

    async def test_session_from_login_response(self, gov_settings):
        response = httpx.Response(200, content=SOAP_LOGIN_OK, request=httpx.Request("POST", SOAP_URL))

        with (
            patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response) as mock_post,
            patch("src.salesforce_mcp.salesforce.connection.Salesforce") as mock_cls,
        ):
            conn = await create_salesforce_connection(gov_settings)

        assert conn is mock_cls.return_value
        assert mock_post.call_args.args[0] == SOAP_URL
        body = mock_post.call_args.kwargs["content"]
        assert "<urn:username>integration@example.com</urn:username>" in body
        assert "<urn:password>hunter2SECTOKEN</urn:password>" in body
        mock_cls.assert_called_once_with(
            instance="acme.my.salesforce.mil",
            session_id="00Dxx!session",
            version="59.0",
        )

    async def test_credentials_are_xml_escaped(self, gov_settings):
        settings = gov_settings.model_copy(update={"SALESFORCE_PASSWORD": "a<b&c"})
        response = httpx.Response(200, content=SOAP_LOGIN_OK, request=httpx.Request("POST", SOAP_URL))

        with (
            patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response) as mock_post,
            patch("src.salesforce_mcp.salesforce.connection.Salesforce"),
        ):
            await create_salesforce_connection(settings)

        assert "<urn:password>a&lt;b&amp;cSECTOKEN</urn:password>" in mock_post.call_args.kwargs["content"]

    async def test_fault_raises_authentication_error(self, gov_settings):
        response = httpx.Response(500, content=SOAP_LOGIN_FAULT, request=httpx.Request("POST", SOAP_URL))

        with (
            patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response),
            patch("src.salesforce_mcp.salesforce.connection.Salesforce") as mock_cls,
        ):
            with pytest.raises(AuthenticationError, match="INVALID_LOGIN: Invalid username"):
                await create_salesforce_connection(gov_settings)

        mock_cls.assert_not_called()

    async def test_non_xml_failure_uses_status_text(self, gov_settings):
        response = httpx.Response(
            503, content=b"<html>down", request=httpx.Request("POST", SOAP_URL)
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response):
            with pytest.raises(AuthenticationError, match="Service Unavailable"):
                await create_salesforce_connection(gov_settings)


# ── Client Credentials Grant ─────────────────────────────────────────────────


class TestOAuthConnection:
    """OAuth 2.0 client credentials flow."""

    async def test_missing_credentials_names_variables(self, oauth_settings):
        settings = oauth_settings.model_copy(update={"SALESFORCE_CLIENT_SECRET": ""})

        with pytest.raises(ConfigurationError, match="SALESFORCE_CLIENT_SECRET"):
            await create_salesforce_connection(settings)

    async def test_token_exchange_initializes_handle(self, oauth_settings):
        token_response = httpx.Response(
            200,
            json={
                "access_token": "00Dxx!token",
                "instance_url": "https://acme.my.salesforce.com",
            },
            request=httpx.Request("POST", TOKEN_URL),
        )

        with (
            patch(
                "httpx.AsyncClient.post",
                new_callable=AsyncMock,
                return_value=token_response,
            ) as mock_post,
            patch("src.salesforce_mcp.salesforce.connection.Salesforce") as mock_cls,
        ):
            conn = await create_salesforce_connection(oauth_settings)

        assert conn is mock_cls.return_value
        assert mock_post.call_args.args[0] == TOKEN_URL
        assert mock_post.call_args.kwargs["data"] == {
            "grant_type": "client_credentials",
            "client_id": "client-id",
            "client_secret": "client-secret",
        }
        mock_cls.assert_called_once_with(
            instance_url="https://acme.my.salesforce.com",
            session_id="00Dxx!token",
            version=oauth_settings.SALESFORCE_API_VERSION,
        )

    async def test_non_2xx_raises_with_status_text(self, oauth_settings):
        token_response = httpx.Response(
            400,
            json={"error": "invalid_client"},
            request=httpx.Request("POST", TOKEN_URL),
        )

        with (
            patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=token_response),
            patch("src.salesforce_mcp.salesforce.connection.Salesforce") as mock_cls,
        ):
            with pytest.raises(AuthenticationError, match="OAuth authentication failed: Bad Request"):
                await create_salesforce_connection(oauth_settings)

        mock_cls.assert_not_called()

    async def test_selects_flow_from_settings(self, oauth_settings):
        """The client credentials flow never attempts a password login."""
        token_response = httpx.Response(
            200,
            json={"access_token": "t", "instance_url": "https://acme.my.salesforce.com"},
            request=httpx.Request("POST", TOKEN_URL),
        )

        with (
            patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=token_response),
            patch("src.salesforce_mcp.salesforce.connection.Salesforce", MagicMock()) as mock_cls,
        ):
            await create_salesforce_connection(oauth_settings)

        assert "username" not in mock_cls.call_args.kwargs
