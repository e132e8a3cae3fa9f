"""salesforce_manage_integrations tool: definition, argument schema and handler.

Dispatches one of create/list/update/delete/activate/deactivate to the
IntegrationManager and returns its text summary. Argument and integration
errors are returned as text with ``isError`` set rather than raised.
"""

from __future__ import annotations

from typing import Any, Literal

import structlog
from mcp import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.salesforce_mcp.core.errors import ConfigurationError, IntegrationError
from src.salesforce_mcp.integrations.manager import IntegrationManager
from src.salesforce_mcp.integrations.schemas import IntegrationConfig, IntegrationUpdate
from src.salesforce_mcp.tools.results import describe_validation_error, text_result

logger = structlog.get_logger(__name__)

TOOL_NAME = "salesforce_manage_integrations"

Operation = Literal["create", "list", "update", "delete", "activate", "deactivate"]

_NAMED_OPERATIONS = {"update", "delete", "activate", "deactivate"}

MANAGE_INTEGRATIONS = types.Tool(
    name=TOOL_NAME,
    description=(
        "Manage external API integrations for Salesforce objects. Create webhooks, "
        "notifications to WhatsApp, Slack, email, etc. when records are created, "
        "updated, or deleted."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": ["create", "list", "update", "delete", "activate", "deactivate"],
                "description": "Operation to perform on integrations",
            },
            "integrationName": {
                "type": "string",
                "description": (
                    "Name of the integration (required for update, delete, activate, "
                    "deactivate operations)"
                ),
            },
            "config": {
                "type": "object",
                "description": (
                    "Integration configuration (required for create and update operations). "
                    "create requires name, type, endpoint, authType, objectName, "
                    "triggerEvents, messageTemplate and active; update accepts any of "
                    "endpoint, authType + authConfig, messageTemplate, condition, active."
                ),
                "properties": {
                    "name": {"type": "string", "description": "Unique name for the integration"},
                    "type": {
                        "type": "string",
                        "enum": ["whatsapp", "slack", "email", "webhook", "custom"],
                        "description": "Type of integration",
                    },
                    "endpoint": {
                        "type": "string",
                        "description": "API endpoint URL for the external service",
                    },
                    "authType": {
                        "type": "string",
                        "enum": ["none", "bearer", "api_key", "oauth"],
                        "description": "Authentication type for the API",
                    },
                    "authConfig": {
                        "type": "object",
                        "description": "Authentication configuration",
                        "properties": {
                            "token": {"type": "string", "description": "Bearer token or API token"},
                            "apiKey": {"type": "string", "description": "API key"},
                            "clientId": {"type": "string", "description": "OAuth client ID"},
                            "clientSecret": {"type": "string", "description": "OAuth client secret"},
                            "phoneNumber": {"type": "string", "description": "Phone number for WhatsApp"},
                            "channel": {"type": "string", "description": "Channel for Slack"},
                        },
                    },
                    "objectName": {
                        "type": "string",
                        "description": "Salesforce object to monitor (e.g., 'Lead', 'Account', 'Contact')",
                    },
                    "triggerEvents": {
                        "type": "array",
                        "items": {"type": "string", "enum": ["insert", "update", "delete"]},
                        "description": "Events that trigger the integration",
                    },
                    "messageTemplate": {
                        "type": "string",
                        "description": (
                            "Message template with merge fields "
                            "(e.g., 'New lead: {Name} from {Company}')"
                        ),
                    },
                    "condition": {
                        "type": "string",
                        "description": (
                            "Optional SOQL condition to filter when integration triggers "
                            "(e.g., 'Rating = Hot'). Stored only; not evaluated yet."
                        ),
                    },
                    "active": {"type": "boolean", "description": "Whether the integration is active"},
                },
            },
        },
        "required": ["operation"],
    },
)


class ManageIntegrationsArgs(BaseModel):
    """Arguments of the manage integrations tool."""

    model_config = ConfigDict(populate_by_name=True)

    operation: Operation
    integration_name: str | None = Field(default=None, alias="integrationName")
    config: dict[str, Any] | None = None


async def handle_manage_integrations(
    manager: IntegrationManager,
    arguments: dict[str, Any],
) -> types.CallToolResult:
    """Validate arguments, run the requested operation, return its text."""
    try:
        args = ManageIntegrationsArgs.model_validate(arguments)
        text = await _dispatch(manager, args)
    except ValidationError as exc:
        return text_result(
            f"Error managing integration: {describe_validation_error(exc)}",
            is_error=True,
        )
    except IntegrationError as exc:
        logger.warning(
            "tool.manage_integrations_failed",
            operation=arguments.get("operation"),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return text_result(f"Error managing integration: {exc}", is_error=True)

    return text_result(text)


async def _dispatch(manager: IntegrationManager, args: ManageIntegrationsArgs) -> str:
    if args.operation in _NAMED_OPERATIONS and not args.integration_name:
        raise ConfigurationError(f"integrationName is required for the {args.operation} operation")
    if args.operation in ("create", "update") and args.config is None:
        raise ConfigurationError(f"config is required for the {args.operation} operation")

    if args.operation == "create":
        return await manager.create(IntegrationConfig.model_validate(args.config))
    if args.operation == "list":
        return await manager.list_integrations()
    if args.operation == "update":
        return await manager.update(
            args.integration_name,
            IntegrationUpdate.model_validate(args.config),
        )
    if args.operation == "delete":
        return await manager.delete(args.integration_name)
    if args.operation == "activate":
        return await manager.activate(args.integration_name)
    return await manager.deactivate(args.integration_name)
