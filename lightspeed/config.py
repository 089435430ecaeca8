"""
Configuration management for Lightspeed.

Implements multi-level configuration loading with precedence:
1. Environment variables (highest priority)
2. Project config (./.lightspeed/config.yaml)
3. User config (~/.lightspeed/config.yaml)
4. System config (/etc/lightspeed/config.yaml)
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource, PydanticBaseSettingsSource


REQUEST_TIMEOUT_SECONDS = 10 * 60


class Config(BaseSettings):
    """Complete configuration schema for Lightspeed with flat structure."""

    model_config = SettingsConfigDict(
        # Load from .env files in order of precedence (lowest to highest)
        env_file=[
            ".env",
            str(Path.home() / ".lightspeed" / ".env"),
        ],
        # Load from YAML files in order of precedence (lowest to highest)
        yaml_file=[
            "/etc/lightspeed/config.yaml",
            str(Path.home() / ".lightspeed" / "config.yaml"),
            str(Path.cwd() / ".lightspeed" / "config.yaml"),
        ],
        env_prefix="LIGHTSPEED_",
        case_sensitive=False,
        # Ignore unrelated variables that share the prefix
        extra="ignore",
        env_file_encoding="utf-8",
    )

    # =================================================================
    # Service endpoints
    # =================================================================

    console_url: str = Field(
        default="http://localhost:9000", description="Base URL of the cluster console"
    )
    query_endpoint: str = Field(
        default="/api/proxy/plugin/lightspeed-console-plugin/ols/v1/query",
        description="Path of the query endpoint, relative to console_url",
    )
    feedback_endpoint: str = Field(
        default="/api/proxy/plugin/lightspeed-console-plugin/ols/v1/feedback",
        description="Path of the feedback endpoint, relative to console_url",
    )
    request_timeout_seconds: float = Field(
        default=REQUEST_TIMEOUT_SECONDS, gt=0, description="Upper bound for a single request"
    )
    verify_tls: bool = Field(default=True, description="Verify the console TLS certificate")

    # =================================================================
    # Authentication
    # =================================================================

    auth_token: Optional[str] = Field(default=None, description="Bearer token sent to the console")
    auth_token_env: str = Field(
        default="OLS_AUTH_TOKEN", description="Environment variable holding the bearer token"
    )

    # =================================================================
    # Resource watch
    # =================================================================

    kubectl_context: Optional[str] = Field(default=None, description="kubectl context for resource lookups")
    kubectl_timeout_seconds: int = Field(default=30, ge=1, description="Timeout for kubectl calls")

    # =================================================================
    # UI / logging
    # =================================================================

    hide_privacy_alert: bool = Field(default=False, description="Never show the data privacy alert")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Log level for the console renderer"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML support."""
        yaml_settings = YamlConfigSettingsSource(settings_cls)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def get_api_config(self) -> Dict[str, Any]:
        """Get HTTP settings for the Lightspeed endpoints."""
        base = self.console_url.rstrip("/")
        return {
            "query_url": f"{base}{self.query_endpoint}",
            "feedback_url": f"{base}{self.feedback_endpoint}",
            "timeout": self.request_timeout_seconds,
            "verify": self.verify_tls,
        }

    def get_kubernetes_config(self) -> Dict[str, Any]:
        """Get kubectl settings for the resource watch provider."""
        return {
            "context": self.kubectl_context,
            "timeout": self.kubectl_timeout_seconds,
        }


def load_config() -> Config:
    """
    Load configuration from all sources with proper precedence.

    Precedence (highest to lowest):
    1. Environment variables (LIGHTSPEED_*)
    2. Project config (./.lightspeed/config.yaml)
    3. User config (~/.lightspeed/config.yaml)
    4. System config (/etc/lightspeed/config.yaml)
    5. User .env (~/.lightspeed/.env)
    6. Project .env (./.env)
    7. Default values

    Returns:
        Config: The loaded and validated configuration

    Examples:
        >>> config = load_config()
        >>> config.get_api_config()["timeout"]
        600

        # export LIGHTSPEED_CONSOLE_URL=https://console.apps.example.com
        >>> load_config().console_url
        'https://console.apps.example.com'
    """
    return Config()
