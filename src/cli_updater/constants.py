"""Centralized constants for cli-updater."""

# Registries
NPM_REGISTRY_URL = "https://registry.npmjs.org"
PYPI_INDEX_URL = "https://pypi.org"

# npm abbreviated metadata document (dist-tags + versions only)
NPM_ABBREVIATED_ACCEPT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"

# Update check (seconds)
CHECK_TIMEOUT_SECONDS = 2.0
HTTP_TIMEOUT_SECONDS = 10.0

# Cache file name inside the configured cache directory
CACHE_FILE_NAME = "update-check.json"

# Global install arguments per package manager; the package name is appended
INSTALL_ARGS: dict[str, tuple[str, ...]] = {
    "npm": ("install", "-g"),
    "pnpm": ("add", "-g"),
    "yarn": ("global", "add"),
    "bun": ("add", "-g"),
    "pipx": ("upgrade",),
    "uv": ("tool", "upgrade"),
    "pip": ("install", "--upgrade"),
}

# Package managers that install from each registry; the first is the default
REGISTRY_PACKAGE_MANAGERS: dict[str, tuple[str, ...]] = {
    "npm": ("npm", "pnpm", "yarn", "bun"),
    "pypi": ("pipx", "uv", "pip"),
}
