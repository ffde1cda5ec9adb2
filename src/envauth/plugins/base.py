"""Abstract base class for envauth plugins.

Every plugin must subclass :class:`Plugin` and implement the :attr:`name`
property. The lifecycle hooks (``activate``, ``deactivate``, ``uninstall``,
``on_init``, ``on_pre_request``, ``on_error``, ``cleanup``) are optional --
default implementations are no-ops so plugins only override what they need.

Plugins are registered as entry points in the ``envauth.plugins`` group
and discovered at runtime by :class:`~envauth.plugins.manager.PluginManager`.

Example:
    Minimal plugin implementation::

        class MyPlugin(Plugin):
            @property
            def name(self) -> str:
                return "my-plugin"

            def on_pre_request(self, method, url, headers, params):
                headers["X-Custom"] = "value"
                return {"headers": headers, "params": params}
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from envauth.auth.store import AuthSink
from envauth.models import GlobalConfig


class Plugin(ABC):
    """Base class for all envauth plugins.

    The plugin lifecycle mirrors the host package manager's:

    1. Instantiation -- the :class:`PluginManager` calls the no-arg constructor.
    2. :meth:`activate` -- called once with the configuration and the auth
       sink the plugin may write to.
    3. :meth:`on_init` -- the host's initialisation event, fired after all
       plugins are active.
    4. :meth:`on_pre_request` -- called before each download.
    5. :meth:`deactivate` then :meth:`cleanup` -- called during shutdown;
       :meth:`uninstall` when the plugin is removed.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique plugin name used for discovery and logging."""
        ...

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return ""

    def activate(self, config: GlobalConfig, sink: AuthSink) -> None:
        """Called once when the plugin is loaded by the :class:`PluginManager`.

        Args:
            config: The effective envauth configuration.
            sink: The authentication store the plugin may write to.
        """

    def deactivate(self) -> None:
        """Called when the plugin is unloaded."""

    def uninstall(self) -> None:
        """Called when the plugin is removed from the host."""

    def on_init(self) -> None:
        """Called on the host's initialisation event, after activation."""

    def on_pre_request(
        self, method: str, url: str, headers: dict[str, str], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Called before each HTTP request (package download) is sent.

        The returned dict replaces the originals for subsequent plugins in
        the chain.

        Returns:
            A dict with ``"headers"`` and ``"params"`` keys.
        """
        return {"headers": headers, "params": params}

    def on_error(self, error: Exception) -> None:
        """Called when a request or a hook raised an error.

        Exceptions raised inside this method are swallowed by the
        :class:`~envauth.plugins.hooks.HookRunner`.
        """

    def cleanup(self) -> None:
        """Called once during shutdown to release plugin resources."""
