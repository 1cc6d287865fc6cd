"""Tests for the self-update installer."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cli_updater.installer import UpdateFailedError, apply_update, install_command
from cli_updater.metadata import PackageIdentity

SPAWN = "cli_updater.installer.asyncio.create_subprocess_exec"


def _make_reader(identity: PackageIdentity | None = None, **kwargs: object) -> AsyncMock:
    reader = AsyncMock()
    reader.get_identity = AsyncMock(return_value=identity, **kwargs)
    return reader


def _make_process(returncode: int) -> MagicMock:
    proc = MagicMock()
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestInstallCommand:
    """Tests for install_command."""

    @pytest.mark.parametrize(
        ("manager", "expected"),
        [
            ("npm", ["npm", "install", "-g", "pkg"]),
            ("pnpm", ["pnpm", "add", "-g", "pkg"]),
            ("yarn", ["yarn", "global", "add", "pkg"]),
            ("bun", ["bun", "add", "-g", "pkg"]),
            ("pipx", ["pipx", "upgrade", "pkg"]),
            ("uv", ["uv", "tool", "upgrade", "pkg"]),
            ("pip", ["pip", "install", "--upgrade", "pkg"]),
        ],
    )
    def test_known_managers(self, manager, expected) -> None:
        assert install_command(manager, "pkg") == expected

    def test_unknown_manager_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported package manager"):
            install_command("cargo", "pkg")


class TestApplyUpdate:
    """Tests for apply_update."""

    async def test_missing_metadata_resolves_without_spawning(self, make_settings) -> None:
        with patch(SPAWN, new_callable=AsyncMock) as mock_spawn:
            result = await apply_update(reader=_make_reader(None), settings=make_settings())

        assert result is None
        mock_spawn.assert_not_called()

    async def test_missing_name_resolves_without_spawning(self, make_settings) -> None:
        reader = _make_reader(PackageIdentity(name=None, version="1.0.0"))
        with patch(SPAWN, new_callable=AsyncMock) as mock_spawn:
            await apply_update(reader=reader, settings=make_settings())

        mock_spawn.assert_not_called()

    async def test_spawns_global_install_with_inherited_stdio(self, make_settings) -> None:
        reader = _make_reader(PackageIdentity(name="test-package", version=None))
        with patch(SPAWN, new_callable=AsyncMock, return_value=_make_process(0)) as mock_spawn:
            await apply_update(reader=reader, settings=make_settings())

        mock_spawn.assert_awaited_once_with("npm", "install", "-g", "test-package")
        # No stdio redirection: the child writes straight to the terminal
        assert mock_spawn.call_args.kwargs == {}

    async def test_uses_configured_package_manager(self, make_settings) -> None:
        reader = _make_reader(PackageIdentity(name="test-package", version="1.0.0"))
        with patch(SPAWN, new_callable=AsyncMock, return_value=_make_process(0)) as mock_spawn:
            await apply_update(reader=reader, settings=make_settings(package_manager="yarn"))

        mock_spawn.assert_awaited_once_with("yarn", "global", "add", "test-package")

    async def test_pypi_registry_upgrades_with_pipx(self, make_settings) -> None:
        reader = _make_reader(PackageIdentity(name="cli-updater", version="0.1.0"))
        with patch(SPAWN, new_callable=AsyncMock, return_value=_make_process(0)) as mock_spawn:
            await apply_update(reader=reader, settings=make_settings(registry="pypi"))

        mock_spawn.assert_awaited_once_with("pipx", "upgrade", "cli-updater")

    async def test_exit_code_zero_resolves(self, make_settings) -> None:
        proc = _make_process(0)
        reader = _make_reader(PackageIdentity(name="test-package", version="1.0.0"))
        with patch(SPAWN, new_callable=AsyncMock, return_value=proc):
            result = await apply_update(reader=reader, settings=make_settings())

        assert result is None
        proc.wait.assert_awaited_once()

    async def test_nonzero_exit_code_raises(self, make_settings) -> None:
        reader = _make_reader(PackageIdentity(name="test-package", version="1.0.0"))
        with patch(SPAWN, new_callable=AsyncMock, return_value=_make_process(1)):
            with pytest.raises(UpdateFailedError, match="Update failed with exit code 1") as exc:
                await apply_update(reader=reader, settings=make_settings())

        assert exc.value.exit_code == 1

    async def test_spawn_error_is_reraised_unchanged(self, make_settings) -> None:
        error = FileNotFoundError(2, "No such file or directory", "npm")
        reader = _make_reader(PackageIdentity(name="test-package", version="1.0.0"))
        with patch(SPAWN, new_callable=AsyncMock, side_effect=error):
            with pytest.raises(FileNotFoundError) as exc:
                await apply_update(reader=reader, settings=make_settings())

        assert exc.value is error

    async def test_metadata_failure_propagates(self, make_settings) -> None:
        error = RuntimeError("Failed to get package.json")
        reader = _make_reader(side_effect=error)
        with patch(SPAWN, new_callable=AsyncMock) as mock_spawn:
            with pytest.raises(RuntimeError) as exc:
                await apply_update(reader=reader, settings=make_settings())

        assert exc.value is error
        mock_spawn.assert_not_called()

    async def test_uses_default_reader_from_settings(self, make_settings) -> None:
        settings = make_settings()
        reader = _make_reader(None)
        with patch("cli_updater.installer.default_reader", return_value=reader) as mock_default:
            await apply_update(settings=settings)

        mock_default.assert_called_once_with(settings)
        reader.get_identity.assert_awaited_once()


class TestUpdateFailedError:
    """Tests for UpdateFailedError."""

    def test_message_and_exit_code(self) -> None:
        err = UpdateFailedError(127)
        assert str(err) == "Update failed with exit code 127"
        assert err.exit_code == 127
        assert isinstance(err, RuntimeError)
