"""Hook context dataclass and runner for the plugin lifecycle.

* :class:`HookContext` -- mutable request state threaded through the
  pre-request hook chain.
* :class:`HookRunner` -- executes ``on_init``, ``on_pre_request`` and
  ``on_error`` across all loaded plugins in registration order.

The pre-request chain is a pipeline: each plugin receives the headers and
params produced by the previous one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from envauth.plugins.base import Plugin

logger = logging.getLogger(__name__)


@dataclass
class HookContext:
    """Mutable context object threaded through the plugin hook chain.

    Attributes:
        method: HTTP method (e.g. ``"GET"``).
        url: The fully resolved request URL.
        headers: Request headers dict (mutable).
        params: Request query parameters dict (mutable).
        error: Exception instance if an error occurred, otherwise ``None``.
    """

    method: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    error: Optional[Exception] = None


class HookRunner:
    """Executes plugin hooks across all loaded plugins in registration order.

    The runner holds a snapshot of the plugin list taken at creation time;
    obtain a new one from the manager after loading more plugins.
    """

    def __init__(self, plugins: list[Plugin]) -> None:
        self._plugins = list(plugins)

    def run_init(self) -> None:
        """Fire the host initialisation event on every plugin."""
        for plugin in self._plugins:
            plugin.on_init()

    def run_pre_request(self, ctx: HookContext) -> HookContext:
        """Execute ``on_pre_request`` hooks across all plugins.

        Returns:
            The same *ctx* instance with potentially modified headers
            and params.
        """
        for plugin in self._plugins:
            result = plugin.on_pre_request(ctx.method, ctx.url, ctx.headers, ctx.params)
            if isinstance(result, dict):
                ctx.headers = result.get("headers", ctx.headers)
                ctx.params = result.get("params", ctx.params)
        return ctx

    def run_error(self, error: Exception) -> None:
        """Execute ``on_error`` hooks across all plugins.

        An exception raised by one plugin's handler is logged and does not
        stop the remaining plugins from being notified.
        """
        for plugin in self._plugins:
            try:
                plugin.on_error(error)
            except Exception as exc:
                logger.debug("Error hook of plugin '%s' failed: %s", plugin.name, exc)
