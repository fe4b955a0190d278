"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for storyblok-cdn:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.storyblok-cdn/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Settings** -- A single :class:`~storyblok_cdn.models.Settings` JSON file
  storing defaults (token source, cache invalidation mode, output format).
* **Precedence resolution** -- :func:`resolve_client_config` merges CLI
  flags, environment variables, the project-local ``storyblok.json`` and the
  settings file into the :class:`~storyblok_cdn.models.ClientConfig` used
  by the clients.
* **Token resolution** -- :func:`resolve_credential` reads the token from a
  literal value, an environment variable, or a file.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from storyblok_cdn.exceptions import ConfigError
from storyblok_cdn.models import ClientConfig, Settings

_APP_NAME = "storyblok-cdn"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "storyblok.json"

ENV_TOKEN = "STORYBLOK_TOKEN"
ENV_AUTO_CACHE_INVALIDATION = "STORYBLOK_AUTO_CACHE_INVALIDATION"
ENV_BASE_URL = "STORYBLOK_BASE_URL"
ENV_TIMEOUT = "STORYBLOK_TIMEOUT"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/storyblok-cdn/`` (default
    ``~/.config/storyblok-cdn/``). On macOS/Windows: ``~/.storyblok-cdn/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/storyblok-cdn/`` (default
    ``~/.local/share/storyblok-cdn/``). On macOS/Windows:
    ``~/.storyblok-cdn/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings file ---


def settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_settings() -> Settings:
    """Load the settings file from the config directory.

    Returns:
        The deserialised :class:`~storyblok_cdn.models.Settings`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist the settings atomically to disk."""
    data = settings.model_dump(mode="json")
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local overrides from ``./storyblok.json``.

    The file holds any subset of the :class:`~storyblok_cdn.models.Settings`
    keys and sits between the settings file and environment variables in the
    precedence chain.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Precedence resolution ---


def resolve_settings() -> Settings:
    """Merge the project-local file over the settings file.

    Raises:
        ConfigError: If either file is invalid or the merge fails validation.
    """
    settings = load_settings()
    project = load_project_config()
    if project is None:
        return settings
    try:
        return Settings.model_validate({**settings.model_dump(), **project})
    except ValidationError as exc:
        raise ConfigError(f"Invalid project config: {exc}") from exc


def resolve_client_config(
    cli_token: Optional[str] = None,
    cli_auto_cache_invalidation: Optional[bool] = None,
    cli_base_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
) -> ClientConfig:
    """Resolve the client configuration with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_*`` arguments)
        2. Environment variables (``STORYBLOK_TOKEN``,
           ``STORYBLOK_AUTO_CACHE_INVALIDATION``, ``STORYBLOK_BASE_URL``,
           ``STORYBLOK_TIMEOUT``)
        3. Project config (``./storyblok.json``)
        4. User settings (``~/.config/storyblok-cdn/config.json``)
        5. Defaults

    Raises:
        ConfigError: If no token can be found or a value is invalid.
    """
    settings = resolve_settings()

    token = cli_token or os.environ.get(ENV_TOKEN)
    if not token and settings.token_source:
        token = resolve_credential(settings.token_source)
    if not token:
        raise ConfigError(
            f"No access token configured. Pass --token, set {ENV_TOKEN}, "
            "or run 'storyblok-cdn config set token_source <token>'"
        )

    auto = settings.auto_cache_invalidation
    env_auto = os.environ.get(ENV_AUTO_CACHE_INVALIDATION)
    if env_auto is not None:
        auto = _parse_bool(env_auto, ENV_AUTO_CACHE_INVALIDATION)
    if cli_auto_cache_invalidation is not None:
        auto = cli_auto_cache_invalidation

    base_url = cli_base_url or os.environ.get(ENV_BASE_URL) or settings.base_url

    timeout = settings.timeout
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            timeout = float(env_timeout)
        except ValueError:
            raise ConfigError(f"{ENV_TIMEOUT} must be a number, got: {env_timeout}") from None
    if cli_timeout is not None:
        timeout = cli_timeout

    try:
        return ClientConfig(
            token=token,
            auto_cache_invalidation=auto,
            base_url=base_url,
            timeout=timeout,
            verify_ssl=settings.verify_ssl,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got: {value}")


# --- Token source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve the access token from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used verbatim as the token

    Raises:
        ConfigError: If the variable is unset or the file cannot be read.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Token file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read token file {path}: {exc}") from exc

    return source
