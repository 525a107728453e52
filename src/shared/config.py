"""Configuration management for the GitLab Zero-Leak MCP Server.

Supports environment variables, a `.env` file and an optional YAML file.
Configuration is loaded once at startup and treated as immutable for the
lifetime of the process.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError

DEFAULT_GITLAB_API_URL = "https://gitlab.com/api/v4"


def parse_csv(value: Optional[str]) -> frozenset[str]:
    """Split a comma-separated list, trimming entries and dropping blanks."""
    if not value:
        return frozenset()
    return frozenset(item.strip() for item in value.split(",") if item.strip())


class PolicyConfig(BaseModel):
    """Static security policy derived from settings at startup."""
    disabled_operations: frozenset[str] = Field(default_factory=frozenset)
    allowed_read_projects: frozenset[str] = Field(default_factory=frozenset)
    strict_read_policy: bool = False

    model_config = ConfigDict(frozen=True)


class Settings(BaseSettings):
    """Main application settings."""
    # GitLab backend
    gitlab_personal_access_token: Optional[SecretStr] = Field(default=None)
    gitlab_api_url: str = Field(default=DEFAULT_GITLAB_API_URL)
    request_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    # Security policy (comma-separated lists)
    disabled_handlers: str = Field(default="")
    allowed_read_projects: str = Field(default="")
    strict_read_policy: bool = Field(default=False)

    # Transport
    mcp_transport: Literal["stdio", "http"] = Field(default="stdio")
    mcp_http_host: str = Field(default="127.0.0.1")
    mcp_http_port: int = Field(default=8001)
    mcp_http_api_key: Optional[SecretStr] = Field(default=None)

    # Logging
    mcp_log_level: str = Field(default="INFO")
    mcp_log_json: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file, falling back to the environment."""
        data = load_yaml_config(path)
        return cls(**data)

    def policy_config(self) -> PolicyConfig:
        """Build the immutable policy configuration."""
        return PolicyConfig(
            disabled_operations=parse_csv(self.disabled_handlers),
            allowed_read_projects=parse_csv(self.allowed_read_projects),
            strict_read_policy=self.strict_read_policy,
        )

    def require_token(self) -> str:
        """Return the GitLab credential or raise if it is not configured."""
        token = self.gitlab_personal_access_token
        if token is None or not token.get_secret_value():
            raise ConfigurationError(
                "GITLAB_PERSONAL_ACCESS_TOKEN environment variable is not set"
            )
        return token.get_secret_value()

    def banner(self) -> dict[str, Any]:
        """Effective, non-secret configuration for the startup banner."""
        policy = self.policy_config()
        return {
            "disabled_handlers": ", ".join(sorted(policy.disabled_operations)) or "None",
            "allowed_read_projects": ", ".join(sorted(policy.allowed_read_projects)) or "None",
            "gitlab_api_url": self.gitlab_api_url,
            "strict_read_policy": policy.strict_read_policy,
            "transport": self.mcp_transport,
        }


def load_yaml_config(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        return {}

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return data


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    config_path = os.environ.get("GITLAB_MCP_CONFIG_PATH", "config/settings.yaml")
    return Settings.from_yaml(config_path)
