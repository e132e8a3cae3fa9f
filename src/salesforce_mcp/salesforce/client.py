"""Async gateway over a simple-salesforce handle.

Every method performs one remote call (or a short fixed sequence) against
the REST, Metadata or Tooling API. simple-salesforce is synchronous, so all
calls are wrapped in asyncio.to_thread() to avoid blocking the event loop
that serves the MCP stdio stream.

Library exceptions are re-raised as RemoteCallError with the original
exception chained.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from simple_salesforce import Salesforce, format_soql
from simple_salesforce.exceptions import SalesforceError

from src.salesforce_mcp.core.errors import RemoteCallError
from src.salesforce_mcp.salesforce.schema import (
    CONFIG_FIELDS,
    CONFIG_OBJECT,
    CONFIG_OBJECT_METADATA,
    LIST_FIELDS,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SalesforceClient:
    """Integration store and Apex deployment operations on one Salesforce org.

    Args:
        sf: Authenticated simple-salesforce handle.
    """

    def __init__(self, sf: Salesforce) -> None:
        self._sf = sf

    async def _run(
        self,
        operation: str,
        fn: Callable[[], T],
        errors: tuple[type[BaseException], ...] = (SalesforceError,),
    ) -> T:
        try:
            return await asyncio.to_thread(fn)
        except errors as exc:
            logger.warning("salesforce.call_failed", operation=operation, error=str(exc))
            raise RemoteCallError(operation, str(exc)) from exc

    def _config_sobject(self) -> Any:
        return getattr(self._sf, CONFIG_OBJECT)

    # ── Schema ──────────────────────────────────────────────────────────────

    async def config_object_exists(self) -> bool:
        """Check for Integration_Config__c with a describe call."""
        try:
            await self._run("describe_config_object", lambda: self._config_sobject().describe())
        except RemoteCallError:
            return False
        return True

    async def create_config_object(self) -> None:
        """Provision Integration_Config__c and its nine custom fields via the Metadata API.

        Metadata API failures surface as zeep faults or plain exceptions
        rather than SalesforceError, so any exception is wrapped here.
        """
        mdapi = self._sf.mdapi

        def _create_object() -> None:
            custom_object = mdapi.CustomObject(
                fullName=CONFIG_OBJECT,
                label=CONFIG_OBJECT_METADATA["label"],
                pluralLabel=CONFIG_OBJECT_METADATA["plural_label"],
                nameField=mdapi.CustomField(
                    label=CONFIG_OBJECT_METADATA["name_field_label"],
                    type=mdapi.FieldType(CONFIG_OBJECT_METADATA["name_field_type"]),
                ),
                deploymentStatus=mdapi.DeploymentStatus(CONFIG_OBJECT_METADATA["deployment_status"]),
                sharingModel=mdapi.SharingModel(CONFIG_OBJECT_METADATA["sharing_model"]),
            )
            mdapi.CustomObject.create(custom_object)

        await self._run("create_config_object", _create_object, errors=(Exception,))

        for field in CONFIG_FIELDS:
            full_name = f"{CONFIG_OBJECT}.{field['name']}"
            kwargs: dict[str, Any] = {
                "fullName": full_name,
                "label": field["label"],
                "type": mdapi.FieldType(field["type"]),
            }
            if "length" in field:
                kwargs["length"] = field["length"]
            if field["type"] == "LongTextArea":
                kwargs["visibleLines"] = 3
            if field["type"] == "Checkbox":
                kwargs["defaultValue"] = "false"

            await self._run(
                f"create_field {full_name}",
                lambda kwargs=kwargs: mdapi.CustomField.create(mdapi.CustomField(**kwargs)),
                errors=(Exception,),
            )

        logger.info(
            "salesforce.config_object_created",
            object_name=CONFIG_OBJECT,
            field_count=len(CONFIG_FIELDS),
        )

    # ── Records ─────────────────────────────────────────────────────────────

    async def insert_config(self, record: dict[str, Any]) -> str:
        """Insert one configuration record, return its Salesforce ID."""
        result = await self._run("insert_config", lambda: self._config_sobject().create(record))
        record_id = result["id"]
        logger.info("salesforce.config_inserted", record_id=record_id, name=record.get("Name"))
        return record_id

    async def query_configs(self) -> list[dict[str, Any]]:
        """Return all configuration records, newest first."""
        soql = f"SELECT {', '.join(LIST_FIELDS)} FROM {CONFIG_OBJECT} ORDER BY CreatedDate DESC"
        result = await self._run("query_configs", lambda: self._sf.query_all(soql))
        return result.get("records", [])

    async def find_config(self, name: str) -> dict[str, Any] | None:
        """Return the Id and Auth_Type__c of the record with the given Name, if any."""
        soql = format_soql(
            "SELECT Id, Auth_Type__c FROM {:literal} WHERE Name = {} ORDER BY CreatedDate LIMIT 1",
            CONFIG_OBJECT,
            name,
        )
        result = await self._run("find_config", lambda: self._sf.query(soql))
        records = result.get("records", [])
        return records[0] if records else None

    async def update_config(self, record_id: str, fields: dict[str, Any]) -> None:
        await self._run(
            "update_config",
            lambda: self._config_sobject().update(record_id, fields),
        )
        logger.info("salesforce.config_updated", record_id=record_id, fields=sorted(fields))

    async def delete_config(self, record_id: str) -> None:
        await self._run("delete_config", lambda: self._config_sobject().delete(record_id))
        logger.info("salesforce.config_deleted", record_id=record_id)

    # ── Apex (Tooling API) ──────────────────────────────────────────────────

    async def _find_tooling_id(self, sobject: str, name: str) -> str:
        soql = format_soql(
            "SELECT Id FROM {:literal} WHERE Name = {} LIMIT 1",
            sobject,
            name,
        )
        result = await self._run(
            f"find_{sobject}",
            lambda: self._sf.toolingexecute("query/", params={"q": soql}),
        )
        records = result.get("records", [])
        if not records:
            raise RemoteCallError(f"find_{sobject}", f"{sobject} {name} does not exist")
        return records[0]["Id"]

    async def create_trigger(self, name: str, object_name: str, body: str) -> None:
        await self._run(
            "create_trigger",
            lambda: self._sf.toolingexecute(
                "sobjects/ApexTrigger/",
                method="POST",
                data={"Name": name, "TableEnumOrId": object_name, "Body": body},
            ),
        )
        logger.info("salesforce.trigger_created", trigger=name, object_name=object_name)

    async def update_trigger(self, name: str, body: str) -> None:
        trigger_id = await self._find_tooling_id("ApexTrigger", name)
        await self._run(
            "update_trigger",
            lambda: self._sf.toolingexecute(
                f"sobjects/ApexTrigger/{trigger_id}",
                method="PATCH",
                data={"Body": body},
            ),
        )
        logger.info("salesforce.trigger_updated", trigger=name)

    async def create_apex_class(self, name: str, body: str) -> None:
        await self._run(
            "create_apex_class",
            lambda: self._sf.toolingexecute(
                "sobjects/ApexClass/",
                method="POST",
                data={"Name": name, "Body": body},
            ),
        )
        logger.info("salesforce.apex_class_created", apex_class=name)

    async def update_apex_class(self, name: str, body: str) -> None:
        class_id = await self._find_tooling_id("ApexClass", name)
        await self._run(
            "update_apex_class",
            lambda: self._sf.toolingexecute(
                f"sobjects/ApexClass/{class_id}",
                method="PATCH",
                data={"Body": body},
            ),
        )
        logger.info("salesforce.apex_class_updated", apex_class=name)

    async def upsert_apex_class(self, name: str, body: str) -> str:
        """Create the class, or replace its body when the name is taken.

        Returns:
            ``"created"`` or ``"updated"``.

        Raises:
            RemoteCallError: With operation ``create_apex_class`` when creation
                failed for a reason other than a duplicate name, otherwise the
                error of the lookup or update that followed.
        """
        try:
            await self.create_apex_class(name, body)
            return "created"
        except RemoteCallError as exc:
            if "DUPLICATE" not in exc.detail.upper():
                raise

        await self.update_apex_class(name, body)
        return "updated"
