"""Field mappings between integration schemas and Integration_Config__c records.

Defines:
- to_salesforce_record(): IntegrationConfig -> Salesforce record dict.
- to_salesforce_update(): IntegrationUpdate -> partial record dict.
- from_salesforce_record(): query row -> IntegrationRecord.
"""

from __future__ import annotations

from typing import Any

from src.salesforce_mcp.integrations.schemas import (
    AuthType,
    IntegrationConfig,
    IntegrationRecord,
    IntegrationUpdate,
    parse_auth_config,
    serialize_auth_config,
)


# ── Conversion Functions ───────────────────────────────────────────────────


def to_salesforce_record(config: IntegrationConfig) -> dict[str, Any]:
    """Convert a full configuration into an Integration_Config__c record."""
    return {
        "Name": config.name,
        "Type__c": config.type.value,
        "Endpoint__c": config.endpoint,
        "Auth_Type__c": config.auth_type.value,
        "Auth_Config__c": config.auth_config_json(),
        "Object_Name__c": config.object_name,
        "Trigger_Events__c": ",".join(event.value for event in config.trigger_events),
        "Message_Template__c": config.message_template,
        "Condition__c": config.condition or "",
        "Active__c": config.active,
    }


def to_salesforce_update(
    update: IntegrationUpdate,
    stored_auth_type: str | None = None,
) -> dict[str, Any]:
    """Convert a partial update into the record fields to write.

    Only fields present on the update are included. Empty endpoint and
    messageTemplate values are skipped so a callout is never left without a
    URL or message; an empty condition clears the filter. A new authConfig is
    validated against ``update.auth_type`` if given, else against the
    stored auth type of the record.

    Raises:
        ValueError: authType given without authConfig, authConfig given
            but no auth type is known, or the map does not fit the auth type.
    """
    fields: dict[str, Any] = {}

    if update.auth_type is not None and update.auth_config is None:
        raise ValueError("authConfig is required when changing authType")

    if update.endpoint:
        fields["Endpoint__c"] = update.endpoint
    if update.auth_type is not None:
        fields["Auth_Type__c"] = update.auth_type.value
    if update.auth_config is not None:
        auth_type = update.auth_type or stored_auth_type
        if not auth_type:
            raise ValueError("authType is required to update authConfig")
        auth, options = parse_auth_config(AuthType(auth_type), update.auth_config)
        fields["Auth_Config__c"] = serialize_auth_config(auth, options)
    if update.message_template:
        fields["Message_Template__c"] = update.message_template
    if update.condition is not None:
        fields["Condition__c"] = update.condition
    if update.active is not None:
        fields["Active__c"] = update.active

    return fields


def from_salesforce_record(record: dict[str, Any]) -> IntegrationRecord:
    """Convert a SOQL result row into an IntegrationRecord."""
    events = record.get("Trigger_Events__c") or ""
    return IntegrationRecord(
        id=record.get("Id"),
        name=record.get("Name") or "",
        type=record.get("Type__c") or "",
        object_name=record.get("Object_Name__c") or "",
        trigger_events=[event for event in events.split(",") if event],
        active=bool(record.get("Active__c")),
        created_date=record.get("CreatedDate"),
    )
