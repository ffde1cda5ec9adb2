"""Configuration management with XDG paths and precedence resolution.

This module handles all persistent configuration for envauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.envauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~envauth.models.GlobalConfig`
  JSON file storing the manifest name, options key, auth file location and
  plugin lists.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the global config into the effective
  configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Optional

from envauth.exceptions import ConfigError
from envauth.models import GlobalConfig

_APP_NAME = "envauth"
_CONFIG_FILENAME = "config.json"
_AUTH_FILENAME = "auth.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/envauth/`` (default ``~/.config/envauth/``).
    On macOS/Windows: ``~/.envauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/envauth/`` (default ``~/.local/share/envauth/``).
    On macOS/Windows: ``~/.envauth/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~envauth.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Precedence resolution ---


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {value!r}")


def resolve_config(
    cli_auth_file: Optional[str] = None,
    cli_native_tokens: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_auth_file``, ``cli_native_tokens``)
        2. Environment variables (``ENVAUTH_AUTH_FILE``,
           ``ENVAUTH_OPTIONS_KEY``, ``ENVAUTH_NATIVE_TOKENS``)
        3. User config (``~/.config/envauth/config.json``)
        4. Defaults

    Raises:
        ConfigError: If the global config is invalid or
            ``ENVAUTH_NATIVE_TOKENS`` is not a boolean.
    """
    config = load_global_config()

    # 2. Environment variables
    env_auth_file = os.environ.get("ENVAUTH_AUTH_FILE")
    if env_auth_file:
        config.auth_file = env_auth_file
    env_options_key = os.environ.get("ENVAUTH_OPTIONS_KEY")
    if env_options_key:
        config.options_key = env_options_key
    env_native = os.environ.get("ENVAUTH_NATIVE_TOKENS")
    if env_native:
        config.native_token_schemes = _parse_bool("ENVAUTH_NATIVE_TOKENS", env_native)

    # 1. CLI flags
    if cli_auth_file is not None:
        config.auth_file = cli_auth_file
    if cli_native_tokens is not None:
        config.native_token_schemes = cli_native_tokens

    return config


def auth_file_path(config: GlobalConfig) -> Path:
    """Return the auth store path for *config*.

    Uses ``config.auth_file`` (with ``~`` expanded) when set, otherwise
    ``<config_dir>/auth.json``.
    """
    if config.auth_file:
        return Path(config.auth_file).expanduser()
    return get_config_dir() / _AUTH_FILENAME


def manifest_path(config: GlobalConfig, cwd: Optional[Path] = None) -> Path:
    """Return the manifest path: ``config.manifest_filename`` in the working directory."""
    return (cwd if cwd is not None else Path.cwd()) / config.manifest_filename
