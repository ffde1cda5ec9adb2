"""Environment authentication plugin.

This module provides :class:`EnvironmentAuthPlugin`, which applies
credentials from environment variables to the host's auth store:

* on :meth:`~EnvironmentAuthPlugin.activate`, so credentials are in place
  before any repository is contacted;
* again on the host's ``init`` event, in case activation did not complete;
* per request in :meth:`~EnvironmentAuthPlugin.on_pre_request`, adding the
  auth header for the repository whose host matches the download URL.

Problems with the auth store are logged and never propagate: missing
credentials must not block package operations that do not need them.

See Also:
    :class:`envauth.auth.mapper.CredentialMapper` for the resolution rules.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from envauth.auth.mapper import CredentialMapper
from envauth.auth.store import AuthSink
from envauth.config import manifest_path
from envauth.environment import EnvironmentSource, get_environment_source
from envauth.exceptions import AuthStoreError
from envauth.models import AuthenticationEntry, GlobalConfig
from envauth.plugins.base import Plugin

logger = logging.getLogger(__name__)


class EnvironmentAuthPlugin(Plugin):
    """Apply repository credentials from environment variables.

    Args:
        environment: Variable source. Defaults to the process-wide
            :func:`~envauth.environment.get_environment_source` instance.
    """

    def __init__(self, environment: Optional[EnvironmentSource] = None) -> None:
        self._environment = environment
        self._mapper: Optional[CredentialMapper] = None
        self._sink: Optional[AuthSink] = None
        self._applied: Optional[list[AuthenticationEntry]] = None
        self._last_error: Optional[AuthStoreError] = None

    @property
    def name(self) -> str:
        return "env-auth"

    @property
    def description(self) -> str:
        return "Repository credentials from environment variables and .env"

    @property
    def mapper(self) -> Optional[CredentialMapper]:
        return self._mapper

    @property
    def applied_entries(self) -> list[AuthenticationEntry]:
        """Entries written by the last successful application."""
        return list(self._applied or [])

    @property
    def last_error(self) -> Optional[AuthStoreError]:
        """The auth store failure of the last attempt, or ``None``."""
        return self._last_error

    def activate(self, config: GlobalConfig, sink: AuthSink) -> None:
        environment = self._environment
        if environment is None:
            environment = get_environment_source(
                marker=config.manifest_filename, filename=config.env_filename
            )
        self._mapper = CredentialMapper(
            environment,
            manifest_path(config),
            options_key=config.options_key,
            native_token_schemes=config.native_token_schemes,
        )
        self._sink = sink
        self._apply()

    def on_init(self) -> None:
        self._apply()

    def _apply(self) -> None:
        if self._applied is not None or self._mapper is None or self._sink is None:
            return
        try:
            self._applied = self._mapper.resolve_and_apply(self._sink)
            self._last_error = None
        except AuthStoreError as exc:
            self._last_error = exc
            logger.warning("Could not apply environment credentials: %s", exc)

    def on_pre_request(
        self, method: str, url: str, headers: dict[str, str], params: dict[str, Any]
    ) -> dict[str, Any]:
        if self._mapper is not None:
            auth_headers = self._mapper.headers_for_url(url)
            if auth_headers:
                headers = {**headers, **auth_headers}
        return {"headers": headers, "params": params}

    def deactivate(self) -> None:
        self._mapper = None
        self._sink = None
        self._applied = None
        self._last_error = None
