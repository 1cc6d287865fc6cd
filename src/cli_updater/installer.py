"""Self-update through the system package manager.

Runs ``<manager> <install args> <package>`` with the parent's stdio so the
user sees installer output live. Failures are raised: the caller asked for
the update and must be told when it did not happen.
"""

from __future__ import annotations

import asyncio

from cli_updater.config import Settings, get_settings
from cli_updater.constants import INSTALL_ARGS
from cli_updater.logging import get_logger
from cli_updater.metadata import MetadataReader, default_reader

log = get_logger("cli_updater.installer")


class UpdateFailedError(RuntimeError):
    """Raised when the installer exits with a nonzero status."""

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"Update failed with exit code {exit_code}")
        self.exit_code = exit_code


def install_command(package_manager: str, package_name: str) -> list[str]:
    """Return the argv that globally installs *package_name*."""
    try:
        args = INSTALL_ARGS[package_manager]
    except KeyError:
        raise ValueError(f"Unsupported package manager: {package_manager}") from None
    return [package_manager, *args, package_name]


async def apply_update(
    *,
    reader: MetadataReader | None = None,
    settings: Settings | None = None,
) -> None:
    """Install the latest published version of the running tool.

    Returns without doing anything when the package name is unknown.

    Raises:
        UpdateFailedError: The installer exited with a nonzero status.
        OSError: The installer could not be started (e.g. not on PATH).
    """
    settings = settings or get_settings()
    reader = reader or default_reader(settings)

    identity = await reader.get_identity()
    if identity is None or not identity.name:
        log.debug("update_install_skipped", reason="no_package_name")
        return

    argv = install_command(settings.package_manager, identity.name)
    log.info("update_install_started", command=" ".join(argv))

    try:
        # stdin/stdout/stderr default to the parent's streams
        proc = await asyncio.create_subprocess_exec(*argv)
    except OSError as exc:
        log.warning("update_install_spawn_failed", command=argv[0], error=str(exc))
        raise

    returncode = await proc.wait()
    if returncode != 0:
        log.warning("update_install_failed", returncode=returncode)
        raise UpdateFailedError(returncode)

    log.info("update_install_succeeded", package=identity.name)
