"""Plugin system for envauth -- discovery, activation, and lifecycle hooks.

Packages register plugins by declaring an entry point in the
``envauth.plugins`` group. At runtime, :class:`PluginManager` discovers and
activates them, and the :class:`HookRunner` fires the host's ``init``,
pre-request and error events across all active plugins.

Key classes:

* :class:`Plugin` -- Abstract base class that all plugins must extend.
* :class:`PluginManager` -- Discovers, loads, and manages plugin lifecycle.
* :class:`HookRunner` -- Executes hooks across loaded plugins in order.
* :class:`HookContext` -- Mutable dataclass carrying request state
  through the hook chain.

Example::

    from envauth.plugins import HookContext, PluginManager

    manager = PluginManager()
    manager.discover(config, sink)
    runner = manager.get_hook_runner()
    runner.run_init()
    ctx = runner.run_pre_request(HookContext(method="GET", url=dist_url))
"""

from envauth.plugins.base import Plugin
from envauth.plugins.hooks import HookContext, HookRunner
from envauth.plugins.manager import PluginManager

__all__ = ["Plugin", "HookContext", "HookRunner", "PluginManager"]
