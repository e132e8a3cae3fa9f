"""Pydantic schemas for integration configuration.

Defines the structured types behind the integration tools:
- Enums: IntegrationType, AuthType, TriggerEvent, QuickSetupType
- Auth variants: NoAuth, BearerAuth, ApiKeyAuth, OAuthAuth (tagged by auth_type)
- IntegrationConfig: full configuration accepted by the create operation
- IntegrationUpdate: partial configuration accepted by the update operation
- IntegrationRecord: stored configuration as read back for listing
- QuickSetupOptions / QuickSetupArgs: quick setup preset input

Field aliases follow the camelCase names used on the tool wire format;
Python code uses the snake_case field names.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ── Enums ───────────────────────────────────────────────────────────────────


class IntegrationType(str, Enum):
    """Destination service kind; selects the payload shape of the callout."""

    WHATSAPP = "whatsapp"
    SLACK = "slack"
    EMAIL = "email"
    WEBHOOK = "webhook"
    CUSTOM = "custom"


class AuthType(str, Enum):
    """How the generated callout authenticates against the endpoint."""

    NONE = "none"
    BEARER = "bearer"
    API_KEY = "api_key"
    OAUTH = "oauth"


class TriggerEvent(str, Enum):
    """Record events that fire the integration trigger."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class QuickSetupType(str, Enum):
    """Named quick setup presets."""

    WHATSAPP_LEAD = "whatsapp_lead"
    SLACK_OPPORTUNITY = "slack_opportunity"
    EMAIL_CASE = "email_case"
    WEBHOOK_CUSTOM = "webhook_custom"


# ── Auth Variants ───────────────────────────────────────────────────────────


class NoAuth(BaseModel):
    """No authentication header is sent."""

    auth_type: Literal["none"] = "none"


class BearerAuth(BaseModel):
    """``Authorization: Bearer <token>`` header."""

    auth_type: Literal["bearer"] = "bearer"
    token: str = Field(min_length=1)


class ApiKeyAuth(BaseModel):
    """``X-API-Key: <apiKey>`` header."""

    model_config = ConfigDict(populate_by_name=True)

    auth_type: Literal["api_key"] = "api_key"
    api_key: str = Field(alias="apiKey", min_length=1)


class OAuthAuth(BaseModel):
    """OAuth client credentials, stored for the remote side."""

    model_config = ConfigDict(populate_by_name=True)

    auth_type: Literal["oauth"] = "oauth"
    client_id: str = Field(alias="clientId", min_length=1)
    client_secret: str = Field(alias="clientSecret", min_length=1)


AuthConfig = Annotated[
    Union[NoAuth, BearerAuth, ApiKeyAuth, OAuthAuth],
    Field(discriminator="auth_type"),
]

_AUTH_MODELS: dict[AuthType, type[BaseModel]] = {
    AuthType.NONE: NoAuth,
    AuthType.BEARER: BearerAuth,
    AuthType.API_KEY: ApiKeyAuth,
    AuthType.OAUTH: OAuthAuth,
}

# Wire key -> model field, per auth type
_CREDENTIAL_KEYS: dict[AuthType, dict[str, str]] = {
    AuthType.NONE: {},
    AuthType.BEARER: {"token": "token"},
    AuthType.API_KEY: {"apiKey": "api_key"},
    AuthType.OAUTH: {"clientId": "client_id", "clientSecret": "client_secret"},
}

_ALL_CREDENTIAL_KEYS = {key for keys in _CREDENTIAL_KEYS.values() for key in keys}


def parse_auth_config(
    auth_type: AuthType | str,
    raw: dict[str, Any] | None,
) -> tuple[BaseModel, dict[str, Any]]:
    """Split a free-form authConfig map into a typed auth variant and options.

    Credential keys belonging to the selected auth type populate the variant;
    the remaining keys (phoneNumber, channel, headers, ...) are returned as
    delivery options. Credential keys of a different auth type are rejected.

    Args:
        auth_type: Selected authentication type.
        raw: The authConfig map as received on the wire.

    Returns:
        Tuple of (auth variant, options dict).

    Raises:
        ValueError: Unknown auth type or credentials of another auth type.
        pydantic.ValidationError: Required credentials missing.
    """
    auth_type = AuthType(auth_type)
    remaining = {k: v for k, v in (raw or {}).items() if v is not None}
    own_keys = _CREDENTIAL_KEYS[auth_type]

    foreign = sorted(k for k in remaining if k in _ALL_CREDENTIAL_KEYS and k not in own_keys)
    if foreign:
        raise ValueError(
            f"authConfig keys {foreign} are not valid for authType '{auth_type.value}'"
        )

    credentials = {
        field_name: remaining.pop(wire_key)
        for wire_key, field_name in own_keys.items()
        if wire_key in remaining
    }
    auth = _AUTH_MODELS[auth_type](**credentials)
    return auth, remaining


def serialize_auth_config(auth: BaseModel, options: dict[str, Any] | None = None) -> str:
    """Serialize credentials and options into the stored JSON blob.

    The generated callout service reads ``token``, ``apiKey`` and
    ``channel`` from this single object.
    """
    credentials = auth.model_dump(by_alias=True, exclude={"auth_type"})
    return json.dumps({**(options or {}), **credentials})


# ── Integration Configuration ───────────────────────────────────────────────


class IntegrationConfig(BaseModel):
    """Full description of one event-to-callout binding.

    Accepts the wire shape (``authType`` + ``authConfig``) and splits it
    into a tagged ``auth`` variant plus delivery ``options``.

    Attributes:
        name: Unique name, also the Salesforce record Name.
        type: Destination service kind.
        endpoint: URL the callout POSTs to.
        auth: Typed credentials for the selected auth type.
        options: Non-credential authConfig entries (phone number, channel, ...).
        object_name: API name of the monitored Salesforce object.
        trigger_events: Record events that fire the trigger (at least one).
        message_template: Text with ``{FieldName}`` merge fields.
        condition: Filter expression, stored but not evaluated.
        active: Inactive configurations are skipped by the callout service.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    type: IntegrationType
    endpoint: str
    auth: AuthConfig
    options: dict[str, Any] = Field(default_factory=dict)
    object_name: str = Field(alias="objectName", min_length=1)
    trigger_events: list[TriggerEvent] = Field(alias="triggerEvents", min_length=1)
    message_template: str = Field(alias="messageTemplate")
    condition: str | None = None
    active: bool

    @model_validator(mode="before")
    @classmethod
    def _split_auth_config(cls, data: Any) -> Any:
        """Convert wire ``authType``/``authConfig`` into ``auth``/``options``."""
        if not isinstance(data, dict) or "auth" in data:
            return data

        data = dict(data)
        auth_type = data.pop("authType", None) or data.pop("auth_type", None)
        raw = data.pop("authConfig", None) or data.pop("auth_config", None)
        if auth_type is None:
            raise ValueError("authType is required")

        auth, options = parse_auth_config(auth_type, raw)
        data["auth"] = auth
        data.setdefault("options", options)
        return data

    @field_validator("trigger_events")
    @classmethod
    def _dedupe_events(cls, events: list[TriggerEvent]) -> list[TriggerEvent]:
        """Drop repeated events, keeping first-seen order."""
        return list(dict.fromkeys(events))

    @property
    def auth_type(self) -> AuthType:
        return AuthType(self.auth.auth_type)

    def auth_config_json(self) -> str:
        return serialize_auth_config(self.auth, self.options)


class IntegrationUpdate(BaseModel):
    """Partial configuration for the update operation.

    Only endpoint, authConfig, messageTemplate, condition and active are
    updatable. ``auth_type`` may accompany ``auth_config`` to switch the
    authentication type; otherwise the stored type validates the new map.
    Fields left as None are not written, nor are blank endpoint or
    messageTemplate values.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint: str | None = None
    auth_type: AuthType | None = Field(default=None, alias="authType")
    auth_config: dict[str, Any] | None = Field(default=None, alias="authConfig")
    message_template: str | None = Field(default=None, alias="messageTemplate")
    condition: str | None = None
    active: bool | None = None

    def is_empty(self) -> bool:
        """True when nothing would be written; blank endpoint and template count as absent."""
        return (
            not self.endpoint
            and not self.message_template
            and all(
                value is None
                for value in (self.auth_type, self.auth_config, self.condition, self.active)
            )
        )


class IntegrationRecord(BaseModel):
    """Stored integration configuration as returned by the list query."""

    id: str | None = None
    name: str
    type: str = ""
    object_name: str = ""
    trigger_events: list[str] = Field(default_factory=list)
    active: bool = False
    created_date: str | None = None


# ── Quick Setup ─────────────────────────────────────────────────────────────


class QuickSetupOptions(BaseModel):
    """Preset-specific quick setup configuration.

    Only ``messageTemplate`` is always required; the rest depends on the
    preset (token and phone for WhatsApp, webhook URL and channel for
    Slack, endpoint and API key for email, URL and headers for webhooks).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # WhatsApp
    whatsapp_api_token: str | None = Field(default=None, alias="whatsappApiToken")
    phone_number: str | None = Field(default=None, alias="phoneNumber")

    # Slack
    slack_webhook_url: str | None = Field(default=None, alias="slackWebhookUrl")
    slack_channel: str | None = Field(default=None, alias="slackChannel")

    # Email
    email_endpoint: str | None = Field(default=None, alias="emailEndpoint")
    email_api_key: str | None = Field(default=None, alias="emailApiKey")

    # Webhook
    webhook_url: str | None = Field(default=None, alias="webhookUrl")
    webhook_headers: dict[str, str] | None = Field(default=None, alias="webhookHeaders")

    # Common
    message_template: str = Field(alias="messageTemplate")
    condition: str | None = None


class QuickSetupArgs(BaseModel):
    """Arguments of the quick setup tool."""

    model_config = ConfigDict(populate_by_name=True)

    type: QuickSetupType
    object_name: str = Field(alias="objectName", min_length=1)
    config: QuickSetupOptions
