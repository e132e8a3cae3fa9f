"""Quick setup presets mapped onto the generic integration configuration.

Each preset fixes the integration type, auth type, endpoint default and
trigger events for a common scenario; the caller supplies credentials and
the message template. The resulting IntegrationConfig is forwarded to
IntegrationManager.create by the tool handler.
"""

from __future__ import annotations

import time
from typing import Any

from src.salesforce_mcp.integrations.schemas import (
    IntegrationConfig,
    QuickSetupArgs,
    QuickSetupType,
)

WHATSAPP_GRAPH_ENDPOINT = "https://graph.facebook.com/v17.0/YOUR_PHONE_NUMBER_ID/messages"
SENDGRID_MAIL_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"
DEFAULT_SLACK_CHANNEL = "#sales"


def _now_ms() -> int:
    return int(time.time() * 1000)


def quick_setup_name(setup_type: QuickSetupType, object_name: str, now_ms: int) -> str:
    return f"{setup_type.value}_{object_name}_{now_ms}"


def build_quick_setup_config(args: QuickSetupArgs, now_ms: int | None = None) -> IntegrationConfig:
    """Expand a quick setup preset into a full IntegrationConfig.

    Args:
        args: Validated quick setup arguments.
        now_ms: Epoch milliseconds used in the generated name. Defaults to now.

    Returns:
        Active IntegrationConfig for the preset.

    Raises:
        pydantic.ValidationError: Preset credentials are missing (e.g. no
            WhatsApp token for the bearer-authenticated preset).
    """
    options = args.config
    base: dict[str, Any] = {
        "name": quick_setup_name(args.type, args.object_name, now_ms or _now_ms()),
        "objectName": args.object_name,
        "triggerEvents": ["insert"],
        "messageTemplate": options.message_template,
        "condition": options.condition,
        "active": True,
    }

    if args.type == QuickSetupType.WHATSAPP_LEAD:
        preset = {
            "type": "whatsapp",
            "endpoint": WHATSAPP_GRAPH_ENDPOINT,
            "authType": "bearer",
            "authConfig": {
                "token": options.whatsapp_api_token,
                "phoneNumber": options.phone_number,
            },
        }
    elif args.type == QuickSetupType.SLACK_OPPORTUNITY:
        preset = {
            "type": "slack",
            "endpoint": options.slack_webhook_url or "",
            "authType": "none",
            "authConfig": {"channel": options.slack_channel or DEFAULT_SLACK_CHANNEL},
            "triggerEvents": ["insert", "update"],
        }
    elif args.type == QuickSetupType.EMAIL_CASE:
        preset = {
            "type": "email",
            "endpoint": options.email_endpoint or SENDGRID_MAIL_ENDPOINT,
            "authType": "api_key",
            "authConfig": {"apiKey": options.email_api_key},
        }
    else:
        preset = {
            "type": "webhook",
            "endpoint": options.webhook_url or "",
            "authType": "none",
            "authConfig": {"headers": options.webhook_headers} if options.webhook_headers else {},
        }

    return IntegrationConfig.model_validate({**base, **preset})
