"""
Process configuration.

All environment input is read once, here, into a Settings value that is
passed explicitly to the components that need it. Nothing below the CLI
reads os.environ.

Environment Variables:
    TENANT_ID, CLIENT_ID, CLIENT_SECRET, SUBSCRIPTION_ID  (required)
    REGION                     Azure region, default "eastus"
    MODE                       "DEBUG" enables debug logging
    OPERATION_TIMEOUT_SECONDS  Bound on each long-running operation
    RESOURCE_PREFIX            Optional prefix prepended to generated names
    CERTIFICATE_THUMBPRINT     Enables SNI SSL on the host name binding

Usage:
    from cloud_provisioner.core.config import load_settings

    settings = load_settings()
    settings.SUBSCRIPTION_ID
"""

from typing import Any, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloud_provisioner import constants as CONSTANTS

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    # Service principal
    TENANT_ID: str = ""
    CLIENT_ID: str = ""
    CLIENT_SECRET: str = ""
    SUBSCRIPTION_ID: str = ""

    # Deployment
    REGION: str = CONSTANTS.DEFAULT_REGION
    MODE: str = CONSTANTS.DEFAULT_MODE
    OPERATION_TIMEOUT_SECONDS: float = CONSTANTS.DEFAULT_OPERATION_TIMEOUT_SECONDS
    RESOURCE_PREFIX: str = ""
    CERTIFICATE_THUMBPRINT: str = ""

    model_config = SettingsConfigDict(env_file=CONSTANTS.ENV_FILE, extra="ignore")

    @property
    def debug(self) -> bool:
        return self.MODE.upper() == "DEBUG"

    def redacted(self) -> dict:
        """Settings as a dict with the client secret masked, for logging."""
        values = self.model_dump()
        if values.get("CLIENT_SECRET"):
            values["CLIENT_SECRET"] = "***"
        return values


def load_settings(env_file: Optional[str] = CONSTANTS.ENV_FILE, **overrides: Any) -> Settings:
    """
    Load and validate process configuration.

    Args:
        env_file: Optional dotenv file to read in addition to the environment
        **overrides: Explicit values that win over the environment

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If a required key is missing/empty or a value is invalid
    """
    try:
        settings = Settings(_env_file=env_file, **overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid configuration value for {key}: {first.get('msg')}",
            key=key,
        ) from e

    for key in CONSTANTS.REQUIRED_SETTINGS:
        if not getattr(settings, key).strip():
            raise ConfigurationError(f"Missing required configuration: {key}", key=key)

    if settings.OPERATION_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError(
            "OPERATION_TIMEOUT_SECONDS must be positive",
            key="OPERATION_TIMEOUT_SECONDS",
        )

    return settings
