"""Integration configuration lifecycle and Apex code generation.

Provides:
- IntegrationManager: create/list/update/delete/activate/deactivate operations
- build_quick_setup_config: preset expansion for the quick setup tool
- Schemas: IntegrationConfig, IntegrationUpdate, QuickSetupArgs and auth variants
- Apex templates: render_trigger, render_callout_service

Configurations are stored as Integration_Config__c records on the
Salesforce org; the generated Apex reads them at run time.
"""

from src.salesforce_mcp.integrations.apex import (
    render_callout_service,
    render_trigger,
    substitute_merge_fields,
)
from src.salesforce_mcp.integrations.manager import IntegrationManager
from src.salesforce_mcp.integrations.quick_setup import build_quick_setup_config
from src.salesforce_mcp.integrations.schemas import (
    AuthType,
    IntegrationConfig,
    IntegrationType,
    IntegrationUpdate,
    QuickSetupArgs,
    QuickSetupType,
    TriggerEvent,
)

__all__ = [
    "AuthType",
    "IntegrationConfig",
    "IntegrationManager",
    "IntegrationType",
    "IntegrationUpdate",
    "QuickSetupArgs",
    "QuickSetupType",
    "TriggerEvent",
    "build_quick_setup_config",
    "render_callout_service",
    "render_trigger",
    "substitute_merge_fields",
]
