"""Tests for quick setup preset expansion."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from src.salesforce_mcp.integrations.quick_setup import (
    DEFAULT_SLACK_CHANNEL,
    SENDGRID_MAIL_ENDPOINT,
    WHATSAPP_GRAPH_ENDPOINT,
    build_quick_setup_config,
    quick_setup_name,
)
from src.salesforce_mcp.integrations.schemas import (
    ApiKeyAuth,
    AuthType,
    BearerAuth,
    IntegrationType,
    NoAuth,
    QuickSetupArgs,
    QuickSetupType,
    TriggerEvent,
)

NOW_MS = 1760000000000


def _args(setup_type: str, object_name: str, **config) -> QuickSetupArgs:
    return QuickSetupArgs.model_validate(
        {"type": setup_type, "objectName": object_name, "config": config}
    )


# ── Presets ──────────────────────────────────────────────────────────────────


class TestPresets:
    """Each preset fixes type, auth, endpoint default and events."""

    def test_whatsapp_lead(self):
        args = _args(
            "whatsapp_lead",
            "Lead",
            whatsappApiToken="wa-token",
            phoneNumber="+15550100",
            messageTemplate="New lead: {Name} from {Company}",
        )

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert config.type == IntegrationType.WHATSAPP
        assert config.endpoint == WHATSAPP_GRAPH_ENDPOINT
        assert config.endpoint.startswith("https://graph.facebook.com/")
        assert config.auth_type == AuthType.BEARER
        assert isinstance(config.auth, BearerAuth)
        assert config.auth.token == "wa-token"
        assert config.options == {"phoneNumber": "+15550100"}
        assert config.trigger_events == [TriggerEvent.INSERT]
        assert config.active is True

    def test_whatsapp_without_token_is_rejected(self):
        args = _args("whatsapp_lead", "Lead", messageTemplate="Hi {Name}")

        with pytest.raises(ValidationError):
            build_quick_setup_config(args, now_ms=NOW_MS)

    def test_slack_opportunity_fires_on_insert_and_update(self):
        args = _args(
            "slack_opportunity",
            "Opportunity",
            slackWebhookUrl="https://hooks.slack.com/services/T/B/X",
            messageTemplate="Deal {Name}: {Amount}",
        )

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert config.type == IntegrationType.SLACK
        assert isinstance(config.auth, NoAuth)
        assert config.endpoint == "https://hooks.slack.com/services/T/B/X"
        assert config.options == {"channel": DEFAULT_SLACK_CHANNEL}
        assert config.trigger_events == [TriggerEvent.INSERT, TriggerEvent.UPDATE]

    def test_slack_custom_channel(self):
        args = _args(
            "slack_opportunity",
            "Opportunity",
            slackWebhookUrl="https://hooks.slack.com/services/T/B/X",
            slackChannel="#deals",
            messageTemplate="Deal {Name}",
        )

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert json.loads(config.auth_config_json()) == {"channel": "#deals"}

    def test_email_case_defaults_to_sendgrid(self):
        args = _args("email_case", "Case", emailApiKey="SG.key", messageTemplate="Case {CaseNumber}")

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert config.type == IntegrationType.EMAIL
        assert config.endpoint == SENDGRID_MAIL_ENDPOINT
        assert isinstance(config.auth, ApiKeyAuth)
        assert config.auth.api_key == "SG.key"
        assert config.trigger_events == [TriggerEvent.INSERT]

    def test_email_custom_endpoint(self):
        args = _args(
            "email_case",
            "Case",
            emailEndpoint="https://mail.example.com/send",
            emailApiKey="K",
            messageTemplate="Case {CaseNumber}",
        )

        assert build_quick_setup_config(args, now_ms=NOW_MS).endpoint == "https://mail.example.com/send"

    def test_webhook_custom_keeps_headers(self):
        args = _args(
            "webhook_custom",
            "Account",
            webhookUrl="https://hooks.example.com/in",
            webhookHeaders={"X-Source": "salesforce"},
            messageTemplate="{Name}",
        )

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert config.type == IntegrationType.WEBHOOK
        assert isinstance(config.auth, NoAuth)
        assert config.options == {"headers": {"X-Source": "salesforce"}}
        assert config.trigger_events == [TriggerEvent.INSERT]

    def test_webhook_without_headers(self):
        args = _args("webhook_custom", "Account", webhookUrl="https://hooks.example.com/in", messageTemplate="{Name}")

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert config.options == {}

    def test_condition_is_carried(self):
        args = _args(
            "email_case",
            "Case",
            emailApiKey="K",
            messageTemplate="Case {CaseNumber}",
            condition="Priority = 'High'",
        )

        assert build_quick_setup_config(args, now_ms=NOW_MS).condition == "Priority = 'High'"


# ── Naming ───────────────────────────────────────────────────────────────────


class TestNaming:
    """Generated integration names."""

    def test_name_format(self):
        assert quick_setup_name(QuickSetupType.EMAIL_CASE, "Case", NOW_MS) == f"email_case_Case_{NOW_MS}"

    def test_config_uses_generated_name(self):
        args = _args("email_case", "Case", emailApiKey="K", messageTemplate="x")

        config = build_quick_setup_config(args, now_ms=NOW_MS)

        assert config.name == f"email_case_Case_{NOW_MS}"

    def test_defaults_to_current_time(self):
        args = _args("email_case", "Case", emailApiKey="K", messageTemplate="x")

        config = build_quick_setup_config(args)

        prefix, _, stamp = config.name.rpartition("_")
        assert prefix == "email_case_Case"
        assert stamp.isdigit()

    def test_message_template_is_required(self):
        with pytest.raises(ValidationError):
            _args("email_case", "Case", emailApiKey="K")
