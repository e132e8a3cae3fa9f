"""Application configuration via Pydantic BaseSettings.

Settings are read once at process start (``get_settings()``) and passed
explicitly to the server and the connection establisher. Nothing else in
the package reads the environment.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class ConnectionType(str, Enum):
    """Salesforce authentication flow selector."""

    USER_PASSWORD = "User_Password"
    CLIENT_CREDENTIALS = "OAuth_2.0_Client_Credentials"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # Salesforce connection
    SALESFORCE_CONNECTION_TYPE: ConnectionType = ConnectionType.USER_PASSWORD
    SALESFORCE_INSTANCE_URL: str = ""  # Login URL (password) or instance URL (client credentials)
    SALESFORCE_API_VERSION: str = "59.0"
    SALESFORCE_TIMEOUT: float = 30.0  # Token exchange timeout, seconds

    # Username/password grant
    SALESFORCE_USERNAME: str = ""
    SALESFORCE_PASSWORD: str = ""
    SALESFORCE_TOKEN: str = ""

    # OAuth 2.0 client credentials grant
    SALESFORCE_CLIENT_ID: str = ""
    SALESFORCE_CLIENT_SECRET: str = ""

    def get_login_url(self) -> str:
        """Return the login URL for the password grant.

        Falls back to the production login host when no instance URL is set.
        """
        return self.SALESFORCE_INSTANCE_URL or "https://login.salesforce.com"


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
