"""Exception taxonomy for integration management.

Every error raised by the connection establisher, the Salesforce gateway
or the integration manager derives from ``IntegrationError``. The tool
handlers catch these at the operation boundary and turn them into text
responses flagged with ``isError``.
"""

from __future__ import annotations


class IntegrationError(Exception):
    """Base class for all integration management failures."""


class ConfigurationError(IntegrationError):
    """Missing or invalid tool arguments or environment variables."""


class AuthenticationError(IntegrationError):
    """Salesforce login or token exchange failed."""


class IntegrationNotFoundError(IntegrationError):
    """No integration configuration record exists with the given name."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Integration "{name}" not found')
        self.name = name


class RemoteCallError(IntegrationError):
    """A Salesforce REST, Metadata or Tooling API call failed.

    Args:
        operation: Short label of the remote call (e.g. ``"insert_config"``).
        detail: Error text reported by the client library.
    """

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
