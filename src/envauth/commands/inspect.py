"""Inspect commands -- show what envauth sees without writing anything.

* ``envauth hosts`` -- the descriptor declared for each repository host and
  whether its variables resolve.
* ``envauth vars`` -- the ``.env`` file that was loaded and its variables.
* ``envauth headers URL`` -- the auth headers a download from *URL* gets.

Secret values are always masked.
"""

from __future__ import annotations

import typer

from envauth.auth.schemes import classify_host
from envauth.commands.common import build_mapper, environment_for, load_config
from envauth.environment import LoadStatus
from envauth.exceptions import InvalidUsageError
from envauth.manifest import host_of
from envauth.models import AuthScheme, TokenDescriptor
from envauth.output import error, info, mask_secret, print_table, warning


def hosts_command() -> None:
    """List repository hosts with an env-auth descriptor.

    Example::

        envauth hosts
        envauth hosts --json
    """
    config = load_config()
    mapper = build_mapper(config)
    descriptors = mapper.collect_descriptors()
    if not descriptors:
        info(f"No repositories declare '{config.options_key}' in {mapper.manifest_path}")
        return

    rows: list[list[str]] = []
    for host, descriptor in descriptors.items():
        if isinstance(descriptor, TokenDescriptor):
            scheme = classify_host(host)
        else:
            scheme = AuthScheme.HTTP_BASIC
        status = "resolved" if mapper.resolve(host, descriptor) else "unresolved"
        rows.append([host, descriptor.kind, ", ".join(descriptor.variables), scheme.value, status])

    print_table(["Host", "Kind", "Variables", "Scheme", "Status"], rows, title="Repositories")


def vars_command() -> None:
    """Show variables loaded from the project's .env file.

    Example::

        envauth vars
    """
    config = load_config()
    source = environment_for(config)
    result = source.load_result

    if result.status is LoadStatus.ERROR:
        warning(f"Could not load {result.path}: {result.detail}")
        return
    if result.status is LoadStatus.ABSENT:
        info(f"No {config.env_filename} file found.")
        return

    info(f"Loaded {result.path}")
    rows = [
        [
            name,
            mask_secret(value),
            "system (overrides file)" if source.shadowed_by_system(name) else "file",
        ]
        for name, value in sorted(source.all_loaded_variables().items())
    ]
    print_table(["Name", "Value", "Effective source"], rows, title="Environment file")


def headers_command(
    url: str = typer.Argument(help="Download URL to authenticate."),
) -> None:
    """Show the auth headers that would be sent to URL.

    Example::

        envauth headers https://github.com/acme/widgets/archive/v1.zip
    """
    if not host_of(url):
        exc = InvalidUsageError(f"URL has no host: {url}")
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    config = load_config()
    mapper = build_mapper(config)
    match = mapper.find_descriptor_for_url(url)
    if match is None:
        info(f"No repository in {mapper.manifest_path} matches the host of {url}")
        return

    headers = mapper.build_headers(match.descriptor, url)
    if not headers:
        warning(f"Repository {match.url} matches, but {', '.join(match.descriptor.variables)} "
                "is unset or empty")
        return

    rows: list[list[str]] = []
    for name, value in headers.items():
        prefix, sep, secret = value.rpartition(" ")
        rows.append([name, f"{prefix}{sep}{mask_secret(secret)}"])
    print_table(["Header", "Value"], rows, title=f"Headers for {match.host}")
