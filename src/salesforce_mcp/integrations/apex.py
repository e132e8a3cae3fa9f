"""Apex source templates deployed alongside each integration.

Two artifacts are rendered as text and handed to the Tooling API:

- A per-object trigger, ``<ObjectName>IntegrationTrigger``, that forwards the
  triggering records to the shared callout service.
- The shared ``IntegrationCalloutService`` class, which looks up the active
  configuration by name, resolves ``{FieldName}`` merge fields against each
  record and POSTs a JSON payload shaped per integration type.

The callout service runs inside Salesforce. ``substitute_merge_fields`` is
the Python reference model of its merge-field behavior.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from src.salesforce_mcp.integrations.schemas import IntegrationConfig, TriggerEvent

CALLOUT_SERVICE_CLASS = "IntegrationCalloutService"

_MERGE_FIELD = re.compile(r"\{([^{}]+)\}")

# Canonical clause order, independent of the order events were configured in
_TRIGGER_CLAUSES: dict[TriggerEvent, str] = {
    TriggerEvent.INSERT: "after insert",
    TriggerEvent.UPDATE: "after update",
    TriggerEvent.DELETE: "after delete",
}


def trigger_name(object_name: str) -> str:
    return f"{object_name}IntegrationTrigger"


def _apex_string(value: str) -> str:
    """Escape a value for use inside an Apex single-quoted literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def trigger_clauses(events: Iterable[TriggerEvent]) -> list[str]:
    selected = set(events)
    return [clause for event, clause in _TRIGGER_CLAUSES.items() if event in selected]


def render_trigger(config: IntegrationConfig) -> str:
    """Render the trigger body for one integration."""
    clauses = ", ".join(trigger_clauses(config.trigger_events))
    return (
        f"trigger {trigger_name(config.object_name)} on {config.object_name} ({clauses}) {{\n"
        f"    {CALLOUT_SERVICE_CLASS}.handleIntegrationCallout("
        f"'{_apex_string(config.name)}', Trigger.new, Trigger.old, Trigger.operationType);\n"
        "}"
    )


def render_callout_service() -> str:
    """Render the shared callout service class.

    The body is fixed; integrations differ only in the stored configuration
    record it reads at run time.
    """
    return _CALLOUT_SERVICE_TEMPLATE.replace("{class_name}", CALLOUT_SERVICE_CLASS)


def merge_fields(template: str) -> list[str]:
    """Return the distinct ``{FieldName}`` placeholders, in first-seen order."""
    return list(dict.fromkeys(match.strip() for match in _MERGE_FIELD.findall(template)))


def substitute_merge_fields(template: str, values: Mapping[str, Any]) -> str:
    """Replace each ``{Field}`` whose value is populated; keep the rest verbatim."""
    message = template
    for field_name, value in values.items():
        if value is not None:
            message = message.replace("{" + field_name + "}", str(value))
    return message


# Callouts are not allowed from trigger context, so the trigger entry point
# enqueues a Queueable job that carries the records and performs the POSTs.
# NOTE: Condition__c is read but not evaluated; every record matching the
# trigger events is sent.
_CALLOUT_SERVICE_TEMPLATE = """public class {class_name} implements Queueable, Database.AllowsCallouts {

    private final String integrationName;
    private final List<SObject> records;

    public {class_name}(String integrationName, List<SObject> records) {
        this.integrationName = integrationName;
        this.records = records;
    }

    public static void handleIntegrationCallout(String integrationName, List<SObject> newRecords, List<SObject> oldRecords, System.TriggerOperation operationType) {
        List<SObject> records = newRecords != null ? newRecords : oldRecords;
        if (records == null || records.isEmpty()) return;
        System.enqueueJob(new {class_name}(integrationName, records));
    }

    public void execute(QueueableContext context) {
        try {
            List<Integration_Config__c> configs = [
                SELECT Type__c, Endpoint__c, Auth_Type__c, Auth_Config__c, Message_Template__c, Condition__c, Active__c
                FROM Integration_Config__c
                WHERE Name = :integrationName AND Active__c = true
                LIMIT 1
            ];
            if (configs.isEmpty()) return;
            Integration_Config__c config = configs[0];

            for (SObject record : records) {
                String message = prepareMessage(config.Message_Template__c, record);
                makeCallout(config, message, record);
            }
        } catch (Exception e) {
            System.debug('Integration callout error: ' + e.getMessage());
        }
    }

    private static String prepareMessage(String template, SObject record) {
        String message = template;
        Map<String, Object> fieldMap = record.getPopulatedFieldsAsMap();
        for (String fieldName : fieldMap.keySet()) {
            Object fieldValue = fieldMap.get(fieldName);
            if (fieldValue != null) {
                message = message.replace('{' + fieldName + '}', String.valueOf(fieldValue));
            }
        }
        return message;
    }

    private static void makeCallout(Integration_Config__c config, String message, SObject record) {
        Http http = new Http();
        HttpRequest req = new HttpRequest();
        req.setEndpoint(config.Endpoint__c);
        req.setMethod('POST');
        req.setHeader('Content-Type', 'application/json');

        Map<String, Object> authConfig = String.isBlank(config.Auth_Config__c)
            ? new Map<String, Object>()
            : (Map<String, Object>) JSON.deserializeUntyped(config.Auth_Config__c);

        if (config.Auth_Type__c == 'bearer' && authConfig.containsKey('token')) {
            req.setHeader('Authorization', 'Bearer ' + (String) authConfig.get('token'));
        } else if (config.Auth_Type__c == 'api_key' && authConfig.containsKey('apiKey')) {
            req.setHeader('X-API-Key', (String) authConfig.get('apiKey'));
        }

        Map<String, Object> payload = new Map<String, Object>();
        if (config.Type__c == 'whatsapp') {
            payload.put('phone', getPhoneFromRecord(record));
            payload.put('message', message);
        } else if (config.Type__c == 'slack') {
            payload.put('text', message);
            payload.put('channel', getSlackChannelFromConfig(authConfig));
        } else {
            payload.put('message', message);
            payload.put('data', record);
        }
        req.setBody(JSON.serialize(payload));

        try {
            HttpResponse res = http.send(req);
            System.debug('Integration response: ' + res.getStatusCode() + ' ' + res.getBody());
        } catch (Exception e) {
            System.debug('Callout error: ' + e.getMessage());
        }
    }

    private static String getPhoneFromRecord(SObject record) {
        Map<String, Object> fieldMap = record.getPopulatedFieldsAsMap();
        if (fieldMap.get('Phone') != null) return (String) fieldMap.get('Phone');
        if (fieldMap.get('MobilePhone') != null) return (String) fieldMap.get('MobilePhone');
        return null;
    }

    private static String getSlackChannelFromConfig(Map<String, Object> authConfig) {
        return authConfig.containsKey('channel') ? (String) authConfig.get('channel') : '#general';
    }
}"""
