"""Best-effort update check.

``check_for_updates()`` is meant to be called on every start of a CLI. It
never raises: any failure is logged as a warning and reported as "no
update", so a slow or broken registry can never take the host tool down.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from cli_updater.config import Settings, dev_mode_enabled, get_settings
from cli_updater.installer import install_command
from cli_updater.logging import get_logger
from cli_updater.metadata import MetadataReader, default_reader
from cli_updater.registry import RegistryClient, default_registry
from cli_updater.versions import is_newer

log = get_logger("cli_updater.checker")


@dataclass(frozen=True)
class UpdateInfo:
    """Installed version and the latest one the registry knows about."""

    current: str
    latest: str
    package: str = ""

    @property
    def is_newer(self) -> bool:
        return is_newer(self.latest, self.current)

    def to_dict(self) -> dict[str, Any]:
        return {"package": self.package, "current": self.current, "latest": self.latest}


def format_update_notice(info: UpdateInfo, *, tool_name: str, install_command: str) -> str:
    """Render the message shown to the user when an update exists."""
    return (
        f"{tool_name} update available! {info.current} → {info.latest}\n"
        f"Run {install_command} to update"
    )


async def get_update_info(
    *,
    reader: MetadataReader | None = None,
    registry: RegistryClient | None = None,
    settings: Settings | None = None,
) -> UpdateInfo | None:
    """Return current/latest versions, or None when there is nothing to compare.

    Unlike :func:`check_for_updates` this propagates errors.
    """
    settings = settings or get_settings()
    if dev_mode_enabled(settings):
        log.debug("update_check_skipped", reason="dev_mode")
        return None

    reader = reader or default_reader(settings)
    identity = await reader.get_identity()
    if identity is None or not identity.is_complete:
        log.debug("update_check_skipped", reason="no_package_metadata")
        return None
    name, version = str(identity.name), str(identity.version)

    registry = registry or default_registry(settings)
    try:
        # wait_for cancels the lookup if the timeout wins
        latest = await asyncio.wait_for(
            registry.fetch_latest(name),
            timeout=settings.check_timeout_seconds,
        )
    except TimeoutError:
        log.debug("update_check_timed_out", package=name, timeout=settings.check_timeout_seconds)
        return None

    if not latest:
        return None
    return UpdateInfo(current=version, latest=latest, package=name)


async def check_for_updates(
    *,
    reader: MetadataReader | None = None,
    registry: RegistryClient | None = None,
    settings: Settings | None = None,
) -> str | None:
    """Return an update notice if a newer version is published, else None."""
    try:
        settings = settings or get_settings()
        info = await get_update_info(reader=reader, registry=registry, settings=settings)
        if info is None or not info.is_newer:
            return None

        log.info("update_available", **info.to_dict())
        return format_update_notice(
            info,
            tool_name=settings.tool_display_name or info.package,
            install_command=" ".join(install_command(settings.package_manager, info.package)),
        )
    except Exception as exc:
        log.warning("update_check_failed", error=str(exc), error_type=type(exc).__name__)
        return None
