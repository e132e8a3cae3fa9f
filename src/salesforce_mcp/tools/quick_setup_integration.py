"""salesforce_quick_setup_integration tool: definition and handler.

Expands a named preset into a full configuration and forwards it to the
create operation.
"""

from __future__ import annotations

from typing import Any

import structlog
from mcp import types
from pydantic import ValidationError

from src.salesforce_mcp.core.errors import IntegrationError
from src.salesforce_mcp.integrations.manager import IntegrationManager
from src.salesforce_mcp.integrations.quick_setup import build_quick_setup_config
from src.salesforce_mcp.integrations.schemas import QuickSetupArgs
from src.salesforce_mcp.tools.results import describe_validation_error, text_result

logger = structlog.get_logger(__name__)

TOOL_NAME = "salesforce_quick_setup_integration"

QUICK_SETUP_INTEGRATION = types.Tool(
    name=TOOL_NAME,
    description=(
        "Quick setup for common integrations like WhatsApp notifications for new leads, "
        "Slack alerts for opportunities, email notifications for cases, etc."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "type": {
                "type": "string",
                "enum": ["whatsapp_lead", "slack_opportunity", "email_case", "webhook_custom"],
                "description": "Type of quick setup integration",
            },
            "objectName": {
                "type": "string",
                "description": "Salesforce object to monitor (e.g., 'Lead', 'Opportunity', 'Case')",
            },
            "config": {
                "type": "object",
                "description": "Configuration specific to the integration type",
                "properties": {
                    "whatsappApiToken": {"type": "string", "description": "WhatsApp Business API token"},
                    "phoneNumber": {
                        "type": "string",
                        "description": "Target phone number for WhatsApp (with country code)",
                    },
                    "slackWebhookUrl": {"type": "string", "description": "Slack webhook URL"},
                    "slackChannel": {
                        "type": "string",
                        "description": "Slack channel (e.g., '#sales', '#leads')",
                    },
                    "emailEndpoint": {"type": "string", "description": "Email service API endpoint"},
                    "emailApiKey": {"type": "string", "description": "Email service API key"},
                    "webhookUrl": {"type": "string", "description": "Custom webhook URL"},
                    "webhookHeaders": {"type": "object", "description": "Custom headers for webhook"},
                    "messageTemplate": {
                        "type": "string",
                        "description": (
                            "Message template with field placeholders "
                            "(e.g., 'New lead: {Name} from {Company}')"
                        ),
                    },
                    "condition": {
                        "type": "string",
                        "description": "Optional condition to filter when to trigger (e.g., 'Rating = Hot')",
                    },
                },
                "required": ["messageTemplate"],
            },
        },
        "required": ["type", "objectName", "config"],
    },
)


async def handle_quick_setup_integration(
    manager: IntegrationManager,
    arguments: dict[str, Any],
) -> types.CallToolResult:
    """Build the preset configuration and create the integration."""
    try:
        args = QuickSetupArgs.model_validate(arguments)
        config = build_quick_setup_config(args)
        logger.info(
            "tool.quick_setup",
            preset=args.type.value,
            object_name=args.object_name,
            name=config.name,
        )
        text = await manager.create(config)
    except ValidationError as exc:
        return text_result(
            f"Error setting up quick integration: {describe_validation_error(exc)}",
            is_error=True,
        )
    except IntegrationError as exc:
        logger.warning(
            "tool.quick_setup_failed",
            preset=arguments.get("type"),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return text_result(f"Error setting up quick integration: {exc}", is_error=True)

    return text_result(text)
