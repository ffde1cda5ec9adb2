"""Environment authentication plugin.

Implements the ``env-auth`` plugin, which writes repository credentials
resolved from environment variables into the host's auth store and adds
auth headers to matching downloads.

See Also:
    :class:`~envauth.plugins.env_auth.plugin.EnvironmentAuthPlugin`
"""

from envauth.plugins.env_auth.plugin import EnvironmentAuthPlugin

__all__ = ["EnvironmentAuthPlugin"]
