"""Integration lifecycle operations: create, list, update, delete, activate.

Each operation is a short fixed sequence of remote calls through
SalesforceClient and returns a human-readable text summary.

create() runs four steps in a fixed order (schema, record, trigger, class)
with no transaction across them. Schema and record failures abort the
operation; trigger and class deployment failures are downgraded to warning
lines in the summary. Nothing is rolled back.
"""

from __future__ import annotations

import structlog

from src.salesforce_mcp.core.errors import (
    ConfigurationError,
    IntegrationNotFoundError,
    RemoteCallError,
)
from src.salesforce_mcp.integrations.apex import (
    CALLOUT_SERVICE_CLASS,
    merge_fields,
    render_callout_service,
    render_trigger,
    trigger_name,
)
from src.salesforce_mcp.integrations.field_mapping import (
    from_salesforce_record,
    to_salesforce_record,
    to_salesforce_update,
)
from src.salesforce_mcp.integrations.schemas import IntegrationConfig, IntegrationUpdate
from src.salesforce_mcp.salesforce.client import SalesforceClient
from src.salesforce_mcp.salesforce.schema import CONFIG_OBJECT

logger = structlog.get_logger(__name__)

EMPTY_LIST_MESSAGE = "No integrations found. Use 'create' operation to set up your first integration!"
MISSING_SCHEMA_MESSAGE = (
    f"No integrations found. The {CONFIG_OBJECT} object may not exist yet. "
    "Create your first integration to get started!"
)


class IntegrationManager:
    """Create and maintain integration configurations on one Salesforce org.

    Args:
        client: Gateway over an authenticated Salesforce handle.
    """

    def __init__(self, client: SalesforceClient) -> None:
        self._client = client

    async def create(self, config: IntegrationConfig) -> str:
        """Provision schema if needed, store the config, deploy trigger and class."""
        steps: list[str] = []

        # Step 1: schema
        if await self._client.config_object_exists():
            steps.append(f"✅ {CONFIG_OBJECT} custom object already exists")
        else:
            await self._client.create_config_object()
            steps.append(f"✅ Created {CONFIG_OBJECT} custom object")

        # Step 2: configuration record; names are unique
        if await self._client.find_config(config.name) is not None:
            raise ConfigurationError(f'Integration "{config.name}" already exists')
        record_id = await self._client.insert_config(to_salesforce_record(config))
        steps.append(f"✅ Created integration config record: {record_id}")

        # Steps 3 and 4: the trigger body references the callout service, so
        # the class is deployed first; summary lines keep trigger before class.
        class_step = await self._deploy_callout_service()
        trigger_step = await self._deploy_trigger(config)
        steps.extend([trigger_step, class_step])

        logger.info(
            "integration.created",
            name=config.name,
            record_id=record_id,
            object_name=config.object_name,
            warnings=sum(1 for step in steps if step.startswith("⚠️")),
        )

        events = [event.value for event in config.trigger_events]
        fields = merge_fields(config.message_template)
        summary = [
            f'🚀 Integration "{config.name}" created successfully!',
            "",
            *steps,
            "",
            "📋 Summary:",
            f"- Type: {config.type.value}",
            f"- Object: {config.object_name}",
            f"- Events: {', '.join(events)}",
            f"- Status: {'Active' if config.active else 'Inactive'}",
            f"- Merge fields: {', '.join(fields) if fields else 'none'}",
            "",
            f"💡 Your integration will trigger on {'/'.join(events)} events "
            f"for {config.object_name} records.",
        ]
        return "\n".join(summary)

    async def list_integrations(self) -> str:
        """Render all configurations, newest first.

        Query failures (typically the custom object not existing yet) yield
        an empty-state message instead of an error.
        """
        try:
            rows = await self._client.query_configs()
        except RemoteCallError:
            logger.info("integration.list_unavailable", object_name=CONFIG_OBJECT)
            return MISSING_SCHEMA_MESSAGE

        if not rows:
            return EMPTY_LIST_MESSAGE

        entries = []
        for row in rows:
            record = from_salesforce_record(row)
            status = "🟢 Active" if record.active else "🔴 Inactive"
            entries.append(
                f"📱 {record.name}\n"
                f"   Type: {record.type} | Object: {record.object_name}\n"
                f"   Events: {','.join(record.trigger_events)} | Status: {status}"
            )

        return f"🔗 Your Integrations ({len(entries)} total):\n\n" + "\n\n".join(entries)

    async def update(self, name: str, update: IntegrationUpdate) -> str:
        """Write only the fields present on the partial update."""
        if update.is_empty():
            raise ConfigurationError(
                "Nothing to update: provide endpoint, authConfig, messageTemplate, condition or active"
            )

        record = await self._find(name)
        try:
            fields = to_salesforce_update(update, stored_auth_type=record.get("Auth_Type__c"))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        await self._client.update_config(record["Id"], fields)
        logger.info("integration.updated", name=name, fields=sorted(fields))
        return f'✅ Integration "{name}" updated successfully!'

    async def delete(self, name: str) -> str:
        """Delete the configuration record; deployed Apex is left in place."""
        record = await self._find(name)
        await self._client.delete_config(record["Id"])
        logger.info("integration.deleted", name=name)
        return f'🗑️ Integration "{name}" deleted successfully!'

    async def set_active(self, name: str, active: bool) -> str:
        """Flip Active__c only."""
        record = await self._find(name)
        await self._client.update_config(record["Id"], {"Active__c": active})

        status = "activated" if active else "deactivated"
        emoji = "🟢" if active else "🔴"
        logger.info("integration.status_changed", name=name, active=active)
        return f'{emoji} Integration "{name}" {status} successfully!'

    async def activate(self, name: str) -> str:
        return await self.set_active(name, True)

    async def deactivate(self, name: str) -> str:
        return await self.set_active(name, False)

    async def _find(self, name: str) -> dict:
        record = await self._client.find_config(name)
        if record is None:
            raise IntegrationNotFoundError(name)
        return record

    async def _deploy_trigger(self, config: IntegrationConfig) -> str:
        """Create the object trigger; replace its body if it already exists."""
        name = trigger_name(config.object_name)
        body = render_trigger(config)
        try:
            await self._client.create_trigger(name, config.object_name, body)
            return f"✅ Created trigger: {name}"
        except RemoteCallError as exc:
            if "DUPLICATE" not in exc.detail.upper():
                logger.warning("integration.trigger_deploy_failed", trigger=name, error=str(exc))
                return f"⚠️ Warning: Could not create/update trigger: {exc}"

        try:
            await self._client.update_trigger(name, body)
        except RemoteCallError as exc:
            logger.warning("integration.trigger_deploy_failed", trigger=name, error=str(exc))
            return f"⚠️ Warning: Could not create/update trigger: {exc}"
        return f"✅ Updated existing trigger: {name}"

    async def _deploy_callout_service(self) -> str:
        """Create the shared callout service class; replace its body if it already exists."""
        body = render_callout_service()
        try:
            outcome = await self._client.upsert_apex_class(CALLOUT_SERVICE_CLASS, body)
        except RemoteCallError as exc:
            logger.warning(
                "integration.class_deploy_failed",
                apex_class=CALLOUT_SERVICE_CLASS,
                error=str(exc),
            )
            if exc.operation != "create_apex_class":
                return f"✅ Utility class already exists: {CALLOUT_SERVICE_CLASS} (update skipped: {exc})"
            return f"⚠️ Warning: Could not create utility class: {exc}"

        if outcome == "updated":
            return f"✅ Updated existing utility class: {CALLOUT_SERVICE_CLASS}"
        return f"✅ Created utility class: {CALLOUT_SERVICE_CLASS}"
