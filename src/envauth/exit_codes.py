"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~envauth.exceptions.EnvAuthError` subclass.
Wrapper scripts can inspect the exit code to determine the failure class
without parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_MANIFEST_ERROR = 7
"""The project manifest could not be read where it was strictly required."""

EXIT_AUTH_STORE_ERROR = 8
"""The persisted authentication store could not be read or written."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load, activate, or execute."""
