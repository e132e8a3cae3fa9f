"""Definition of the Integration_Config__c custom object.

The object is provisioned lazily through the Metadata API the first time an
integration is created. One record holds one integration configuration.
"""

from __future__ import annotations

from typing import Any

CONFIG_OBJECT = "Integration_Config__c"

CONFIG_OBJECT_METADATA: dict[str, str] = {
    "label": "Integration Config",
    "plural_label": "Integration Configs",
    "name_field_label": "Integration Name",
    "name_field_type": "Text",
    "deployment_status": "Deployed",
    "sharing_model": "ReadWrite",
}

CONFIG_FIELDS: list[dict[str, Any]] = [
    {"name": "Type__c", "type": "Text", "length": 50, "label": "Type"},
    {"name": "Endpoint__c", "type": "LongTextArea", "length": 1000, "label": "Endpoint"},
    {"name": "Auth_Type__c", "type": "Text", "length": 50, "label": "Auth Type"},
    {"name": "Auth_Config__c", "type": "LongTextArea", "length": 2000, "label": "Auth Config"},
    {"name": "Object_Name__c", "type": "Text", "length": 100, "label": "Object Name"},
    {"name": "Trigger_Events__c", "type": "Text", "length": 100, "label": "Trigger Events"},
    {"name": "Message_Template__c", "type": "LongTextArea", "length": 1000, "label": "Message Template"},
    {"name": "Condition__c", "type": "LongTextArea", "length": 1000, "label": "Condition"},
    {"name": "Active__c", "type": "Checkbox", "label": "Active"},
]

# Columns read by the list operation
LIST_FIELDS = ["Id", "Name", "Type__c", "Object_Name__c", "Trigger_Events__c", "Active__c", "CreatedDate"]
