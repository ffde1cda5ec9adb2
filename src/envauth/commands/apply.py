"""Apply command -- write environment credentials to the auth store.

Runs the ``env-auth`` plugin the way a host package manager would
(activation followed by the ``init`` event) and reports what was written.
With ``--dry-run`` nothing is persisted.
"""

from __future__ import annotations

from typing import Optional

import typer

from envauth.auth.store import AuthSink, InMemoryAuthSink, JsonAuthStore
from envauth.commands.common import build_mapper, environment_for, load_config
from envauth.config import auth_file_path
from envauth.exceptions import AuthStoreError
from envauth.models import AuthenticationEntry
from envauth.output import error, info, mask_secret, print_table, success
from envauth.plugins.env_auth import EnvironmentAuthPlugin
from envauth.plugins.manager import PluginManager


def _row(entry: AuthenticationEntry, native_token_schemes: bool) -> list[str]:
    key, value = entry.setting(native_token_schemes)
    section = key.partition(".")[0]
    if isinstance(value, dict):
        return [entry.host, section, value.get("username") or "", mask_secret(value.get("password"))]
    return [entry.host, section, "", mask_secret(value)]


def apply_command(
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show what would be written without writing it."
    ),
    auth_file: Optional[str] = typer.Option(
        None, "--auth-file", help="Auth store to write (default: <config dir>/auth.json)."
    ),
    native_tokens: Optional[bool] = typer.Option(
        None,
        "--native-tokens/--no-native-tokens",
        help="Write GitHub/GitLab tokens as github-oauth/gitlab-token.",
    ),
) -> None:
    """Resolve repository credentials and write them to the auth store.

    Example::

        envauth apply
        envauth apply --dry-run --json
        envauth apply --auth-file ~/.composer/auth.json --native-tokens
    """
    config = load_config(auth_file, native_tokens)
    build_mapper(config)  # fails early when the manifest is missing

    sink: AuthSink
    if dry_run:
        sink = InMemoryAuthSink()
    else:
        store = JsonAuthStore(auth_file_path(config))
        try:
            store.load()
        except AuthStoreError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None
        sink = store

    plugin = EnvironmentAuthPlugin(environment=environment_for(config))
    manager = PluginManager()
    try:
        manager.load_plugin(plugin.name, plugin, config, sink)
        manager.get_hook_runner().run_init()
        entries = plugin.applied_entries
        failure = plugin.last_error
    finally:
        manager.cleanup()

    if failure is not None:
        error(str(failure))
        raise typer.Exit(code=failure.exit_code)

    if not entries:
        info("No repository credentials resolved from the environment.")
        return

    print_table(
        ["Host", "Section", "Username", "Secret"],
        [_row(entry, config.native_token_schemes) for entry in entries],
        title="Applied credentials",
    )
    if dry_run:
        info(f"Dry run: {len(entries)} host(s) not written.")
    else:
        success(f"Wrote credentials for {len(entries)} host(s) to {auth_file_path(config)}")
