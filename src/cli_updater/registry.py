"""Registry clients that answer "what is the latest published version".

The checker only depends on the :class:`RegistryClient` protocol so any
client can be swapped in (or mocked in tests). Transport errors from httpx
are allowed to propagate; callers decide whether they are fatal.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

import httpx

from cli_updater.constants import (
    CACHE_FILE_NAME,
    HTTP_TIMEOUT_SECONDS,
    NPM_ABBREVIATED_ACCEPT,
    NPM_REGISTRY_URL,
    PYPI_INDEX_URL,
)
from cli_updater.logging import get_logger

if TYPE_CHECKING:
    from cli_updater.config import Settings

log = get_logger("cli_updater.registry")


class RegistryError(Exception):
    """Raised when the registry returns an unexpected response."""


class RegistryClient(Protocol):
    """Looks up the latest published version of a package."""

    async def fetch_latest(self, name: str) -> str | None: ...


def _encode_package_name(name: str) -> str:
    # Scoped packages keep the leading '@' but the slash must be escaped
    if name.startswith("@"):
        return "@" + quote(name[1:], safe="")
    return quote(name, safe="")


class NpmRegistryClient:
    """Client for npm-compatible registries."""

    def __init__(
        self,
        registry_url: str,
        *,
        dist_tag: str = "latest",
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._registry_url = registry_url.rstrip("/")
        self._dist_tag = dist_tag
        self._timeout = timeout
        self._transport = transport

    def package_url(self, name: str) -> str:
        return f"{self._registry_url}/{_encode_package_name(name)}"

    async def fetch_latest(self, name: str) -> str | None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(
                self.package_url(name),
                headers={"Accept": NPM_ABBREVIATED_ACCEPT},
            )

        if resp.status_code == 404:
            log.debug("registry_package_not_found", package=name)
            return None
        if resp.status_code != 200:
            raise RegistryError(f"npm registry returned HTTP {resp.status_code} for {name}")

        data = _json_object(resp, name)
        dist_tags = data.get("dist-tags")
        if not isinstance(dist_tags, dict):
            raise RegistryError(f"npm registry response for {name} has no dist-tags")
        latest = dist_tags.get(self._dist_tag)
        return latest if isinstance(latest, str) and latest else None


class PyPIRegistryClient:
    """Client for the PyPI JSON API."""

    def __init__(
        self,
        index_url: str = PYPI_INDEX_URL,
        *,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._index_url = index_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def package_url(self, name: str) -> str:
        return f"{self._index_url}/pypi/{quote(name, safe='')}/json"

    async def fetch_latest(self, name: str) -> str | None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(self.package_url(name), headers={"Accept": "application/json"})

        if resp.status_code == 404:
            log.debug("registry_package_not_found", package=name)
            return None
        if resp.status_code != 200:
            raise RegistryError(f"PyPI returned HTTP {resp.status_code} for {name}")

        info = _json_object(resp, name).get("info")
        if not isinstance(info, dict):
            raise RegistryError(f"PyPI response for {name} has no info block")
        version = info.get("version")
        return version if isinstance(version, str) and version else None


def _json_object(resp: httpx.Response, name: str) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as exc:
        raise RegistryError(f"Registry returned invalid JSON for {name}") from exc
    if not isinstance(data, dict):
        raise RegistryError(f"Registry returned unexpected payload for {name}")
    return data


class CachedRegistryClient:
    """Reuses a registry answer for ``interval`` seconds.

    Answers are stored per package in a small JSON file. A broken or
    unreadable cache is treated as empty, and failing to write it never
    fails the lookup.
    """

    def __init__(
        self,
        inner: RegistryClient,
        cache_path: Path,
        interval: float,
        *,
        clock: Any = time.time,
    ) -> None:
        self._inner = inner
        self._cache_path = cache_path
        self._interval = interval
        self._clock = clock

    def _load(self) -> dict[str, Any]:
        try:
            raw = json.loads(self._cache_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return raw if isinstance(raw, dict) else {}

    def _save(self, entries: dict[str, Any]) -> None:
        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            self._cache_path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        except OSError as exc:
            log.debug("update_cache_write_failed", path=str(self._cache_path), error=str(exc))

    async def fetch_latest(self, name: str) -> str | None:
        now = self._clock()
        entries = await asyncio.to_thread(self._load)
        entry = entries.get(name)
        if isinstance(entry, dict):
            checked_at = entry.get("checked_at")
            if isinstance(checked_at, int | float) and 0 <= now - checked_at < self._interval:
                log.debug("update_cache_hit", package=name)
                latest = entry.get("latest")
                return latest if isinstance(latest, str) else None

        latest = await self._inner.fetch_latest(name)
        entries[name] = {"latest": latest, "checked_at": now}
        await asyncio.to_thread(self._save, entries)
        return latest


def default_registry(settings: Settings) -> RegistryClient:
    """Build the registry client selected by configuration."""
    client: RegistryClient
    if settings.registry == "pypi":
        client = PyPIRegistryClient(settings.registry_url or PYPI_INDEX_URL)
    else:
        client = NpmRegistryClient(
            settings.registry_url or NPM_REGISTRY_URL,
            dist_tag=settings.dist_tag,
        )

    if settings.update_check_interval > 0:
        return CachedRegistryClient(
            client,
            settings.cache_dir / CACHE_FILE_NAME,
            settings.update_check_interval,
        )
    return client
