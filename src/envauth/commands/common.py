"""Helpers shared by the CLI commands."""

from __future__ import annotations

from typing import Optional

import typer

from envauth.auth.mapper import CredentialMapper
from envauth.config import manifest_path, resolve_config
from envauth.environment import EnvironmentSource, get_environment_source
from envauth.exceptions import EnvAuthError
from envauth.manifest import require_manifest
from envauth.models import GlobalConfig
from envauth.output import error


def load_config(
    auth_file: Optional[str] = None, native_tokens: Optional[bool] = None
) -> GlobalConfig:
    """Resolve the effective config, exiting with the error's code on failure."""
    try:
        return resolve_config(cli_auth_file=auth_file, cli_native_tokens=native_tokens)
    except EnvAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def environment_for(config: GlobalConfig) -> EnvironmentSource:
    return get_environment_source(marker=config.manifest_filename, filename=config.env_filename)


def build_mapper(config: GlobalConfig) -> CredentialMapper:
    """Return a mapper for the manifest in the working directory.

    Raises:
        typer.Exit: If the manifest does not exist.
    """
    path = manifest_path(config)
    try:
        require_manifest(path)
    except EnvAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    return CredentialMapper(
        environment_for(config),
        path,
        options_key=config.options_key,
        native_token_schemes=config.native_token_schemes,
    )
