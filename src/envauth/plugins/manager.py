"""Plugin manager -- discovery, activation, and lifecycle management.

:class:`PluginManager` discovers plugins registered as Python entry points,
applies the enable/disable lists from the configuration, activates each
plugin against an auth sink, and hands out a cached
:class:`~envauth.plugins.hooks.HookRunner`.

Third-party packages register plugins under the ``envauth.plugins`` group::

    [project.entry-points."envauth.plugins"]
    my-plugin = "my_package.plugin:MyPlugin"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from envauth.auth.store import AuthSink
from envauth.exceptions import PluginError
from envauth.models import GlobalConfig
from envauth.plugins.base import Plugin
from envauth.plugins.hooks import HookRunner

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "envauth.plugins"
"""The entry-point group name used for plugin discovery."""


class PluginManager:
    """Discovers, activates, and tears down envauth plugins.

    When ``config.plugins.enabled`` is non-empty only those plugins are
    loaded; otherwise every discovered plugin not listed in
    ``config.plugins.disabled`` is.

    Example::

        manager = PluginManager()
        manager.discover(config, JsonAuthStore(auth_file_path(config)))
        manager.get_hook_runner().run_init()
    """

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}
        self._hook_runner: Optional[HookRunner] = None

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, config: GlobalConfig, sink: AuthSink) -> list[str]:
        """Discover and activate plugins registered as entry points.

        Returns:
            Names of the plugins that were loaded. Plugins that fail to
            load are logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        enabled_set = set(config.plugins.enabled)
        disabled_set = set(config.plugins.disabled)

        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            name = ep.name
            if enabled_set and name not in enabled_set:
                logger.debug("Plugin '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Plugin '%s' is disabled, skipping", name)
                continue

            try:
                plugin_cls = ep.load()
                self.load_plugin(name, plugin_cls(), config, sink)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", name, exc)

        return loaded_names

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(
        self, name: str, plugin: Plugin, config: GlobalConfig, sink: AuthSink
    ) -> None:
        """Activate *plugin* and register it under *name*.

        Raises:
            PluginError: If a plugin with the same *name* is already loaded.
        """
        if name in self._plugins:
            raise PluginError(f"Plugin '{name}' is already loaded")

        plugin.activate(config, sink)
        self._plugins[name] = plugin
        self._hook_runner = None
        logger.info("Loaded plugin '%s' v%s", name, plugin.version)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_plugin(self, name: str) -> Plugin:
        """Return the loaded plugin registered as *name*.

        Raises:
            PluginError: If no plugin with that name is loaded.
        """
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginError(f"Plugin '{name}' is not loaded") from None

    def list_plugins(self) -> list[dict[str, str]]:
        """Return ``name``/``version``/``description`` for every loaded plugin."""
        return [
            {
                "name": plugin.name,
                "version": plugin.version,
                "description": plugin.description,
            }
            for plugin in self._plugins.values()
        ]

    def get_hook_runner(self) -> HookRunner:
        """Return a cached :class:`HookRunner` over the loaded plugins.

        The cache is invalidated whenever the set of loaded plugins changes.
        """
        if self._hook_runner is None:
            self._hook_runner = HookRunner(list(self._plugins.values()))
        return self._hook_runner

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def uninstall(self, name: str) -> None:
        """Deactivate, uninstall and forget the plugin registered as *name*.

        Raises:
            PluginError: If no plugin with that name is loaded.
        """
        plugin = self.get_plugin(name)
        plugin.deactivate()
        plugin.uninstall()
        del self._plugins[name]
        self._hook_runner = None

    def cleanup(self) -> None:
        """Deactivate and clean up every plugin, then reset internal state.

        A failure in one plugin is logged and does not prevent the others
        from being cleaned up.
        """
        for name, plugin in self._plugins.items():
            try:
                plugin.deactivate()
                plugin.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up plugin '%s': %s", name, exc)
        self._plugins.clear()
        self._hook_runner = None
