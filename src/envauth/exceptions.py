"""Exception hierarchy for envauth.

All exceptions inherit from :class:`EnvAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`envauth.exit_codes`.
The top-level error handler in :func:`envauth.app.main` catches
``EnvAuthError`` and exits with the appropriate code.

Credential resolution itself never raises: missing variables, malformed
manifests and unknown descriptor shapes all degrade to "no authentication
for this host". These exceptions cover configuration, the persisted auth
store and plugin loading.

Subclass hierarchy::

    EnvAuthError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- ManifestError       (exit 7)
    +-- AuthStoreError      (exit 8)
    +-- PluginError         (exit 10)
"""

from envauth.exit_codes import (
    EXIT_AUTH_STORE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_ERROR,
    EXIT_PLUGIN_ERROR,
)


class EnvAuthError(Exception):
    """Base exception for all envauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(EnvAuthError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(EnvAuthError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class ManifestError(EnvAuthError):
    """Raised when a manifest is required but cannot be used."""

    exit_code = EXIT_MANIFEST_ERROR


class AuthStoreError(EnvAuthError):
    """Raised when the persisted auth store cannot be read or written."""

    exit_code = EXIT_AUTH_STORE_ERROR


class PluginError(EnvAuthError):
    """Raised when a plugin fails to load, initialise, or execute a hook."""

    exit_code = EXIT_PLUGIN_ERROR
