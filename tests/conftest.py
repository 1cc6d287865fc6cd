"""Shared pytest fixtures for cli-updater tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from cli_updater.config import Settings, get_settings

_ENV_VARS = (
    "DEV",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "REGISTRY",
    "REGISTRY_URL",
    "PACKAGE_NAME",
    "PACKAGE_MANAGER",
    "PACKAGE_JSON_DIR",
    "TOOL_DISPLAY_NAME",
    "DIST_TAG",
    "CHECK_TIMEOUT_SECONDS",
    "CACHE_DIR",
    "UPDATE_PACKAGE_NAME",
    "UPDATE_PACKAGE_JSON_DIR",
    "UPDATE_TOOL_NAME",
    "UPDATE_REGISTRY",
    "UPDATE_REGISTRY_URL",
    "UPDATE_DIST_TAG",
    "UPDATE_CHECK_TIMEOUT",
    "UPDATE_CHECK_INTERVAL",
    "UPDATE_CACHE_DIR",
    "UPDATE_PACKAGE_MANAGER",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Strip updater env vars and drop the cached settings around each test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def make_settings() -> Callable[..., Settings]:
    """Factory for Settings isolated from any .env file."""

    def _make(**overrides: Any) -> Settings:
        defaults: dict[str, Any] = {"_env_file": None}
        defaults.update(overrides)
        return Settings(**defaults)

    return _make
