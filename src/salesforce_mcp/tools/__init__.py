"""MCP tool definitions and handlers.

Each tool module exposes a ``types.Tool`` definition and an async handler
taking an IntegrationManager and the raw argument dict.
"""

from src.salesforce_mcp.tools.manage_integrations import (
    MANAGE_INTEGRATIONS,
    handle_manage_integrations,
)
from src.salesforce_mcp.tools.quick_setup_integration import (
    QUICK_SETUP_INTEGRATION,
    handle_quick_setup_integration,
)

TOOLS = [MANAGE_INTEGRATIONS, QUICK_SETUP_INTEGRATION]

TOOL_HANDLERS = {
    MANAGE_INTEGRATIONS.name: handle_manage_integrations,
    QUICK_SETUP_INTEGRATION.name: handle_quick_setup_integration,
}

__all__ = [
    "MANAGE_INTEGRATIONS",
    "QUICK_SETUP_INTEGRATION",
    "TOOLS",
    "TOOL_HANDLERS",
    "handle_manage_integrations",
    "handle_quick_setup_integration",
]
