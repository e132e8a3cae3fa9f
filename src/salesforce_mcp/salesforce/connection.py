"""Salesforce connection establisher.

Obtains an authenticated ``simple_salesforce.Salesforce`` handle using one
of two flows, selected by ``Settings.SALESFORCE_CONNECTION_TYPE``:

- Username/password grant: delegated to simple-salesforce, which appends
  the security token to the password per Salesforce convention. Login hosts
  outside salesforce.com go through a partner SOAP ``login`` over httpx.
- OAuth 2.0 client credentials: a form-encoded token exchange over httpx,
  then a handle initialized from the returned access token and instance URL.

No retry and no refresh-on-expiry. A handle lives as long as the
Salesforce session it wraps.
"""

from __future__ import annotations

import asyncio
from html import escape
from urllib.parse import urlparse
from xml.parsers.expat import ExpatError

import httpx
import structlog
from simple_salesforce import Salesforce
from simple_salesforce.exceptions import SalesforceAuthenticationFailed
from simple_salesforce.util import getUniqueElementValueFromXmlString

from src.salesforce_mcp.config import ConnectionType, Settings
from src.salesforce_mcp.core.errors import AuthenticationError, ConfigurationError

logger = structlog.get_logger(__name__)

_SALESFORCE_HOST_SUFFIX = ".salesforce.com"

_SOAP_LOGIN_BODY = """<?xml version="1.0" encoding="utf-8" ?>
<env:Envelope xmlns:xsd="http://www.w3.org/2001/XMLSchema"
        xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
        xmlns:env="http://schemas.xmlsoap.org/soap/envelope/"
        xmlns:urn="urn:partner.soap.sforce.com">
    <env:Body>
        <urn:login>
            <urn:username>{username}</urn:username>
            <urn:password>{password}</urn:password>
        </urn:login>
    </env:Body>
</env:Envelope>"""


def login_domain(login_url: str) -> str | None:
    """Derive the simple-salesforce ``domain`` from a login URL.

    ``https://login.salesforce.com`` -> ``login``,
    ``https://acme.my.salesforce.com`` -> ``acme.my``. Hosts outside
    salesforce.com (Gov Cloud, custom login hosts) return None.

    Raises:
        ConfigurationError: If the URL has no host.
    """
    host = urlparse(login_url).hostname
    if not host:
        raise ConfigurationError(
            f"SALESFORCE_INSTANCE_URL must be an absolute login URL, got {login_url!r}"
        )
    if host.endswith(_SALESFORCE_HOST_SUFFIX):
        return host[: -len(_SALESFORCE_HOST_SUFFIX)]
    return None


async def create_salesforce_connection(settings: Settings) -> Salesforce:
    """Return an authenticated Salesforce handle for the configured flow."""
    if settings.SALESFORCE_CONNECTION_TYPE == ConnectionType.CLIENT_CREDENTIALS:
        return await _create_oauth_connection(settings)
    return await _create_user_password_connection(settings)


async def _create_user_password_connection(settings: Settings) -> Salesforce:
    username = settings.SALESFORCE_USERNAME
    password = settings.SALESFORCE_PASSWORD
    token = settings.SALESFORCE_TOKEN

    if not username or not password or not token:
        raise ConfigurationError(
            "Missing required Salesforce credentials: "
            "SALESFORCE_USERNAME, SALESFORCE_PASSWORD, SALESFORCE_TOKEN"
        )

    login_url = settings.get_login_url()
    domain = login_domain(login_url)
    if domain is None:
        # simple-salesforce only logs in against *.salesforce.com
        conn = await _soap_login(settings, login_url, username, password + token)
    else:

        def _login() -> Salesforce:
            return Salesforce(
                username=username,
                password=password,
                security_token=token,
                domain=domain,
                version=settings.SALESFORCE_API_VERSION,
            )

        try:
            conn = await asyncio.to_thread(_login)
        except SalesforceAuthenticationFailed as exc:
            logger.warning("salesforce.login_failed", domain=domain, username=username)
            raise AuthenticationError(f"Salesforce login failed: {exc}") from exc

    logger.info(
        "salesforce.connected",
        flow=ConnectionType.USER_PASSWORD.value,
        instance=conn.sf_instance,
    )
    return conn


def _xml_value(content: bytes, element: str) -> str | None:
    try:
        return getUniqueElementValueFromXmlString(content, element)
    except ExpatError:
        return None


async def _soap_login(
    settings: Settings,
    login_url: str,
    username: str,
    password: str,
) -> Salesforce:
    """Partner SOAP ``login`` against an arbitrary login host.

    Args:
        password: Password with the security token appended.
    """
    soap_url = f"{login_url.rstrip('/')}/services/Soap/u/{settings.SALESFORCE_API_VERSION}"
    body = _SOAP_LOGIN_BODY.format(username=escape(username), password=escape(password))

    async with httpx.AsyncClient(timeout=settings.SALESFORCE_TIMEOUT) as client:
        response = await client.post(
            soap_url,
            content=body,
            headers={"Content-Type": "text/xml; charset=UTF-8", "SOAPAction": "login"},
        )

    if not response.is_success:
        fault = _xml_value(response.content, "faultstring") or response.reason_phrase
        logger.warning("salesforce.login_failed", login_url=login_url, username=username)
        raise AuthenticationError(f"Salesforce login failed: {fault}")

    session_id = _xml_value(response.content, "sessionId")
    server_url = _xml_value(response.content, "serverUrl")
    if not session_id or not server_url:
        raise AuthenticationError("Salesforce login failed: no session in login response")

    return Salesforce(
        instance=urlparse(server_url).hostname,
        session_id=session_id,
        version=settings.SALESFORCE_API_VERSION,
    )


async def _create_oauth_connection(settings: Settings) -> Salesforce:
    client_id = settings.SALESFORCE_CLIENT_ID
    client_secret = settings.SALESFORCE_CLIENT_SECRET
    instance_url = settings.SALESFORCE_INSTANCE_URL

    if not client_id or not client_secret or not instance_url:
        raise ConfigurationError(
            "Missing required OAuth credentials: "
            "SALESFORCE_CLIENT_ID, SALESFORCE_CLIENT_SECRET, SALESFORCE_INSTANCE_URL"
        )

    token_url = f"{instance_url.rstrip('/')}/services/oauth2/token"
    async with httpx.AsyncClient(timeout=settings.SALESFORCE_TIMEOUT) as client:
        response = await client.post(
            token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
        )

    if not response.is_success:
        logger.warning(
            "salesforce.token_exchange_failed",
            status_code=response.status_code,
            token_url=token_url,
        )
        raise AuthenticationError(f"OAuth authentication failed: {response.reason_phrase}")

    token_data = response.json()
    conn = Salesforce(
        instance_url=token_data["instance_url"],
        session_id=token_data["access_token"],
        version=settings.SALESFORCE_API_VERSION,
    )

    logger.info(
        "salesforce.connected",
        flow=ConnectionType.CLIENT_CREDENTIALS.value,
        instance=conn.sf_instance,
    )
    return conn
