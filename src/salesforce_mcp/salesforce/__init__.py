"""Salesforce access layer.

Connection establishment (password or client-credentials grant) and an
async gateway that wraps the synchronous simple-salesforce client.
"""

from src.salesforce_mcp.salesforce.client import SalesforceClient
from src.salesforce_mcp.salesforce.connection import create_salesforce_connection

__all__ = [
    "SalesforceClient",
    "create_salesforce_connection",
]
