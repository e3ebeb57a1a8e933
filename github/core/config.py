"""
Runtime configuration.

Every setting is read from a GITHUB_* (or CORS_*) environment variable, with a
``.env`` file in the working directory as fallback. The container image sets
GITHUB_ENV, GITHUB_LOG_LEVEL, GITHUB_API_HOST and GITHUB_API_PORT; everything
else has a default. Related settings are also exposed as small grouped models
(``settings.github``, ``settings.policy``, ``settings.cors``).
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from github import __version__
from github.core.logging_config import FORMATS, LOG_LEVELS

API_V1_STR = "/api/v1"
PROJECT_NAME = "GitHub"


class Environment(str, Enum):
    """Deployment environment of the running process."""

    production = "production"
    development = "development"


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
        return [item for item in items if item] or None
    return value


# =====================================================================
# Grouped Configuration Models
# =====================================================================


class GitHubApiConfig(BaseModel):
    """GitHub REST API connection configuration."""

    token: Optional[str] = Field(default=None, alias="GITHUB_TOKEN", description="Personal access token")
    api_url: str = Field(
        default="https://api.github.com", alias="GITHUB_API_URL", description="GitHub REST API base URL"
    )
    api_version: str = Field(
        default="2022-11-28", alias="GITHUB_API_VERSION", description="Value sent as X-GitHub-Api-Version"
    )
    timeout: float = Field(default=10.0, gt=0, alias="GITHUB_TIMEOUT", description="HTTP timeout in seconds")
    user_agent: str = Field(
        default=f"github-capability-server/{__version__}",
        alias="GITHUB_USER_AGENT",
        description="User-Agent header sent to GitHub",
    )

    model_config = {"populate_by_name": True}


class PolicyConfig(BaseModel):
    """Capability access policy configuration."""

    read_only: bool = Field(
        default=False, alias="GITHUB_READ_ONLY", description="Reject capabilities that modify GitHub state"
    )
    allowed_capabilities: Optional[list[str]] = Field(
        default=None,
        alias="GITHUB_ALLOWED_CAPABILITIES",
        description="Comma separated allow-list of capability names (all when unset)",
    )

    model_config = {"populate_by_name": True}

    @field_validator("allowed_capabilities", mode="before")
    @classmethod
    def split_allowed(cls, value: Any) -> Any:
        return _split_csv(value)


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}

    @field_validator("origins", "allow_methods", "allow_headers", mode="before")
    @classmethod
    def split_lists(cls, value: Any) -> Any:
        return _split_csv(value) or []


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Flat settings bound by environment variable name.

    Field names are the Python-side names; aliases are the variable names. An
    invalid value (for example a non-numeric GITHUB_API_PORT) raises
    ``ValidationError`` when the settings are first loaded.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Runtime Environment
    # =====================================================================
    env: Environment = Field(
        default=Environment.production,
        description="Deployment environment (production or development)",
        alias="GITHUB_ENV",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="GITHUB_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="GITHUB_LOG_FORMAT",
    )
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="GITHUB_LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Also write logs to a file", alias="GITHUB_ENABLE_FILE_LOGGING"
    )

    # =====================================================================
    # REST API Listener
    # =====================================================================
    api_host: str = Field(default="0.0.0.0", description="REST API host address to bind to", alias="GITHUB_API_HOST")
    api_port: int = Field(default=8000, ge=1, le=65535, description="REST API port number", alias="GITHUB_API_PORT")
    api_workers: int = Field(default=1, ge=1, description="Number of server worker processes", alias="GITHUB_API_WORKERS")

    # =====================================================================
    # GitHub API
    # =====================================================================
    github_token: Optional[str] = Field(default=None, alias="GITHUB_TOKEN")
    github_api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")
    github_api_version: str = Field(default="2022-11-28", alias="GITHUB_API_VERSION")
    github_timeout: float = Field(default=10.0, gt=0, alias="GITHUB_TIMEOUT")
    github_user_agent: str = Field(default=f"github-capability-server/{__version__}", alias="GITHUB_USER_AGENT")

    # =====================================================================
    # Capability Layer
    # =====================================================================
    read_only: bool = Field(default=False, alias="GITHUB_READ_ONLY")
    allowed_capabilities: Optional[str] = Field(default=None, alias="GITHUB_ALLOWED_CAPABILITIES")
    cache_ttl: float = Field(
        default=30.0, ge=0, description="Seconds to cache read-only results (0 disables)", alias="GITHUB_CACHE_TTL"
    )
    cache_max_size: int = Field(default=256, ge=0, alias="GITHUB_CACHE_MAX_SIZE")

    # =====================================================================
    # CORS
    # =====================================================================
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: str = Field(default="*", alias="CORS_ALLOW_METHODS")
    cors_allow_headers: str = Field(default="*", alias="CORS_ALLOW_HEADERS")

    @field_validator("env", mode="before")
    @classmethod
    def normalize_env(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def normalize_log_format(cls, value: str) -> str:
        fmt = value.strip().lower()
        if fmt not in FORMATS:
            raise ValueError(f"must be one of {', '.join(FORMATS)}")
        return fmt

    @model_validator(mode="after")
    def apply_development_defaults(self) -> "Settings":
        # Development images log at DEBUG unless the level was set explicitly
        if self.env is Environment.development and "log_level" not in self.model_fields_set:
            self.log_level = "DEBUG"
        return self

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def is_production(self) -> bool:
        return self.env is Environment.production

    @property
    def is_development(self) -> bool:
        return self.env is Environment.development

    @property
    def github(self) -> GitHubApiConfig:
        """Get GitHub API configuration from environment variables."""
        return GitHubApiConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def policy(self) -> PolicyConfig:
        """Get capability policy configuration from environment variables."""
        return PolicyConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    def masked_dump(self) -> dict[str, Any]:
        """Dump settings by environment variable name with the token masked."""
        data = self.model_dump(by_alias=True, mode="json")
        if data.get("GITHUB_TOKEN"):
            data["GITHUB_TOKEN"] = "***"
        return data


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
