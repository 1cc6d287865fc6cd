"""Local package identity readers.

A reader answers "which package is running, and at what version". Two
implementations are provided: one that walks up the directory tree to the
nearest ``package.json`` and one that reads installed Python distribution
metadata.
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import dataclass
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from cli_updater.logging import get_logger

if TYPE_CHECKING:
    from cli_updater.config import Settings

log = get_logger("cli_updater.metadata")

PACKAGE_JSON = "package.json"


class MetadataError(Exception):
    """Raised when package metadata exists but cannot be read."""


@dataclass(frozen=True)
class PackageIdentity:
    """Name and version of the running tool."""

    name: str | None
    version: str | None

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.version)


class MetadataReader(Protocol):
    """Anything that can report the running tool's identity."""

    async def get_identity(self) -> PackageIdentity | None: ...


def find_package_json(start_dir: Path) -> Path | None:
    """Return the nearest ``package.json`` at or above *start_dir*."""
    start_dir = start_dir.resolve()
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / PACKAGE_JSON
        if candidate.is_file():
            return candidate
    return None


def _read_package_json(path: Path) -> PackageIdentity:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MetadataError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MetadataError(f"{path} does not contain a JSON object")

    name = data.get("name")
    version = data.get("version")
    return PackageIdentity(
        name=name if isinstance(name, str) and name else None,
        version=version if isinstance(version, str) and version else None,
    )


class PackageJsonReader:
    """Reads identity from the closest ``package.json`` above a directory."""

    def __init__(self, start_dir: Path | str) -> None:
        self._start_dir = Path(start_dir)

    async def get_identity(self) -> PackageIdentity | None:
        path = await asyncio.to_thread(find_package_json, self._start_dir)
        if path is None:
            log.debug("package_json_not_found", start_dir=str(self._start_dir))
            return None
        return await asyncio.to_thread(_read_package_json, path)


class DistributionMetadataReader:
    """Reads identity from an installed Python distribution."""

    def __init__(self, dist_name: str) -> None:
        self._dist_name = dist_name

    def _read(self) -> PackageIdentity | None:
        try:
            dist = importlib_metadata.distribution(self._dist_name)
        except importlib_metadata.PackageNotFoundError:
            log.debug("distribution_not_installed", dist_name=self._dist_name)
            return None
        return PackageIdentity(
            name=dist.metadata["Name"] or None,
            version=dist.version or None,
        )

    async def get_identity(self) -> PackageIdentity | None:
        return await asyncio.to_thread(self._read)


def entrypoint_dir() -> Path:
    """Directory of the running program, where its package.json search starts."""
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()


def default_reader(settings: Settings) -> MetadataReader:
    """Build the reader that matches the configured registry.

    npm tools are identified by their package.json, PyPI tools by the
    installed distribution.
    """
    if settings.registry == "pypi":
        return DistributionMetadataReader(settings.package_name)
    return PackageJsonReader(settings.package_json_dir or entrypoint_dir())
