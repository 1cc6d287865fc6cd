"""Configuration management for cli-updater."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cli_updater.constants import CHECK_TIMEOUT_SECONDS, INSTALL_ARGS, REGISTRY_PACKAGE_MANAGERS

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Development mode: skips update checks entirely
    dev: bool = Field(default=False, description="Running from source")

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="WARNING", description="Logging level")

    # Package identity
    package_name: str = Field(
        default="cli-updater",
        validation_alias=AliasChoices("update_package_name", "package_name"),
        description="Installed distribution to read the local version from",
    )
    package_json_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("update_package_json_dir", "package_json_dir"),
        description="Directory to search upwards from for package.json",
    )
    tool_display_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("update_tool_name", "tool_display_name"),
        description="Name shown in the update notice",
    )

    # Registry
    registry: Literal["npm", "pypi"] = Field(
        default="npm",
        validation_alias=AliasChoices("update_registry", "registry"),
    )
    registry_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("update_registry_url", "registry_url"),
        description="Registry base URL; defaults to the public registry for ``registry``",
    )
    dist_tag: str = Field(
        default="latest",
        validation_alias=AliasChoices("update_dist_tag", "dist_tag"),
    )

    # Check policy
    check_timeout_seconds: float = Field(
        default=CHECK_TIMEOUT_SECONDS,
        gt=0,
        validation_alias=AliasChoices("update_check_timeout", "check_timeout_seconds"),
    )
    update_check_interval: int = Field(
        default=0,
        ge=0,
        description="Seconds to reuse a cached registry answer; 0 checks every time",
    )
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "cli-updater",
        validation_alias=AliasChoices("update_cache_dir", "cache_dir"),
    )

    # Installer
    package_manager: str | None = Field(
        default=None,
        validation_alias=AliasChoices("update_package_manager", "package_manager"),
        description="Installer to run; defaults to the first one serving ``registry``",
    )

    @field_validator("dev", mode="before")
    @classmethod
    def _parse_dev_flag(cls, value: object) -> bool:
        if isinstance(value, bool):
            return value
        return is_truthy(value)

    @field_validator("package_manager")
    @classmethod
    def _check_package_manager(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in INSTALL_ARGS:
            raise ValueError(
                f"unsupported package manager {value!r}; expected one of {sorted(INSTALL_ARGS)}"
            )
        return value

    @model_validator(mode="after")
    def _match_package_manager_to_registry(self) -> "Settings":
        managers = REGISTRY_PACKAGE_MANAGERS[self.registry]
        if self.package_manager is None:
            self.package_manager = managers[0]
        elif self.package_manager not in managers:
            raise ValueError(
                f"package manager {self.package_manager!r} cannot install from the "
                f"{self.registry} registry; expected one of {list(managers)}"
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


def is_truthy(value: object) -> bool:
    """Interpret an environment-style flag value."""
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def dev_mode_enabled(settings: Settings) -> bool:
    """Return True when update checks should be skipped.

    ``DEV`` is re-read from the environment on every call because settings
    are cached for the life of the process.
    """
    return settings.dev or is_truthy(os.environ.get("DEV"))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Values are read once per process; see :func:`dev_mode_enabled` for the
    one flag that is checked live.
    """
    return Settings()
