"""envauth -- Repository credentials from environment variables.

This package resolves package-repository credentials from the process
environment or a project ``.env`` file and writes them into a package
manager's persisted authentication configuration (``auth.json``). Which
repository uses which variables is declared in the project manifest::

    {
        "repositories": [
            {
                "url": "https://github.com/acme/widgets.git",
                "options": {"envauth/env-auth": "GITHUB_TOKEN"}
            }
        ]
    }

Secrets never have to live in version-controlled files.

Modules:
    environment: ``.env`` discovery and variable lookup with precedence.
    manifest: Manifest reading and auth descriptor decoding.
    models: Pydantic models shared across the package.
    auth: Credential mapping and authentication sinks.
    plugins: Host lifecycle hooks and the ``env-auth`` plugin.
    config: XDG-aware configuration and precedence resolution.
    app: Typer CLI entry point.
"""

__version__ = "0.3.0"
