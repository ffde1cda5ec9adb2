"""Credential mapper -- from manifest descriptors to authentication settings.

The :class:`CredentialMapper` is the centre of envauth. For every repository
in the manifest that declares an ``env-auth`` option it:

1. derives the repository host from its URL,
2. resolves the referenced variable(s) through an
   :class:`~envauth.environment.EnvironmentSource`,
3. turns the result into an :class:`~envauth.models.AuthenticationEntry`
   whose scheme is chosen by :func:`~envauth.auth.schemes.classify_host`, and
4. writes it to an :class:`~envauth.auth.store.AuthSink`.

A host whose variables are unset or empty is skipped without error, and
only one entry per host is written: when the manifest lists a host twice,
the later repository wins.

The mapper can also produce request headers for a single URL
(:meth:`CredentialMapper.build_headers`), which the
:class:`~envauth.plugins.env_auth.EnvironmentAuthPlugin` uses before
downloads.

See Also:
    :mod:`envauth.auth.schemes` for the host classification table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Optional

from envauth.auth.schemes import basic_headers, classify_host, token_headers
from envauth.auth.store import AuthSink
from envauth.environment import EnvironmentSource
from envauth.manifest import host_of, iter_repositories, load_manifest, parse_descriptor
from envauth.models import (
    DEFAULT_OPTIONS_KEY,
    TOKEN_USERNAME,
    AuthenticationEntry,
    AuthScheme,
    BasicDescriptor,
    Descriptor,
    RepositoryMatch,
    TokenDescriptor,
)

logger = logging.getLogger(__name__)


class CredentialMapper:
    """Resolve manifest auth descriptors and apply them to an auth sink.

    The manifest is re-read on every call, so the mapper always reflects
    the file on disk.

    Args:
        environment: Source used to look up variable values.
        manifest_path: Path to the ``composer.json``-shaped manifest.
        options_key: Repository ``options`` key holding the descriptor.
        native_token_schemes: Write GitHub/GitLab tokens under
            ``github-oauth`` / ``gitlab-token`` instead of normalising them
            to ``http-basic`` with username ``"token"``.

    Example::

        mapper = CredentialMapper(EnvironmentSource(), Path("composer.json"))
        applied = mapper.resolve_and_apply(JsonAuthStore(auth_path))
    """

    def __init__(
        self,
        environment: EnvironmentSource,
        manifest_path: Path,
        options_key: str = DEFAULT_OPTIONS_KEY,
        native_token_schemes: bool = False,
    ) -> None:
        self._environment = environment
        self._manifest_path = manifest_path
        self._options_key = options_key
        self._native_token_schemes = native_token_schemes

    @property
    def manifest_path(self) -> Path:
        return self._manifest_path

    @property
    def native_token_schemes(self) -> bool:
        return self._native_token_schemes

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _iter_declared(self) -> Iterator[tuple[str, str, Any]]:
        """Yield ``(url, host, raw option)`` for repositories carrying the options key."""
        for repository in iter_repositories(load_manifest(self._manifest_path)):
            if self._options_key not in repository.options:
                continue
            host = host_of(repository.url)
            if not host:
                logger.debug("Skipping repository without a host: %s", repository.url)
                continue
            yield repository.url, host, repository.options[self._options_key]

    def _iter_matches(self) -> list[RepositoryMatch]:
        matches: list[RepositoryMatch] = []
        for url, host, raw in self._iter_declared():
            descriptor = parse_descriptor(raw)
            if descriptor is None:
                logger.debug("Skipping unrecognised %s option for %s", self._options_key, host)
                continue
            matches.append(RepositoryMatch(url=url, host=host, descriptor=descriptor))
        return matches

    def collect_descriptors(self) -> dict[str, Descriptor]:
        """Return the descriptor declared for each host.

        Later manifest entries for the same host replace earlier ones.
        """
        return {match.host: match.descriptor for match in self._iter_matches()}

    def find_descriptor_for_url(self, url: str) -> Optional[RepositoryMatch]:
        """Return the first repository whose declared URL shares *url*'s host.

        Returns:
            The matching repository, or ``None`` when *url* has no host or
            no repository matches. Only the first repository on the host is
            considered: when its option has an unrecognised shape the result
            is ``None``, even if a later repository on the same host would
            decode.
        """
        host = host_of(url)
        if not host:
            return None
        for repo_url, repo_host, raw in self._iter_declared():
            if repo_host != host:
                continue
            descriptor = parse_descriptor(raw)
            if descriptor is None:
                logger.debug("Unrecognised %s option for %s", self._options_key, repo_url)
                return None
            return RepositoryMatch(url=repo_url, host=repo_host, descriptor=descriptor)
        return None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _value(self, name: str) -> Optional[str]:
        value = self._environment.lookup(name)
        return value if value else None

    def resolve(self, host: str, descriptor: Descriptor) -> Optional[AuthenticationEntry]:
        """Resolve *descriptor* for *host* into an entry.

        Returns:
            ``None`` if any referenced variable is unset or empty.
        """
        if isinstance(descriptor, TokenDescriptor):
            token = self._value(descriptor.variable)
            if token is None:
                return None
            scheme = classify_host(host)
            if scheme is AuthScheme.HTTP_BASIC:
                return AuthenticationEntry(
                    host=host, scheme=scheme, username=TOKEN_USERNAME, password=token
                )
            return AuthenticationEntry(host=host, scheme=scheme, token=token)

        username = self._value(descriptor.username)
        password = self._value(descriptor.password)
        if username is None or password is None:
            return None
        return AuthenticationEntry(
            host=host, scheme=AuthScheme.HTTP_BASIC, username=username, password=password
        )

    def resolve_entries(self) -> list[AuthenticationEntry]:
        """Resolve every host in the manifest, dropping unresolved ones."""
        entries: list[AuthenticationEntry] = []
        for host, descriptor in self.collect_descriptors().items():
            entry = self.resolve(host, descriptor)
            if entry is None:
                logger.debug(
                    "No credentials for %s: %s unset or empty",
                    host,
                    ", ".join(descriptor.variables),
                )
                continue
            entries.append(entry)
        return entries

    def resolve_and_apply(self, sink: AuthSink) -> list[AuthenticationEntry]:
        """Resolve every host and write one setting per host to *sink*.

        Returns:
            The entries that were written, in manifest order.

        Raises:
            AuthStoreError: If the sink cannot be written.
        """
        entries = self.resolve_entries()
        for entry in entries:
            key, value = entry.setting(self._native_token_schemes)
            sink.add_config_setting(key, value)
            logger.info("Applied %s credentials for %s", key.partition(".")[0], entry.host)
        return entries

    # ------------------------------------------------------------------
    # Request headers
    # ------------------------------------------------------------------

    def build_headers(self, descriptor: Descriptor, url: str) -> dict[str, str]:
        """Return the request headers authenticating *url* with *descriptor*.

        Token descriptors use the header of the URL host's scheme; basic
        descriptors use ``Authorization: Basic``.

        Returns:
            The headers to add, or an empty dict when the credentials do not
            resolve or *url* has no host.
        """
        if isinstance(descriptor, BasicDescriptor):
            username = self._value(descriptor.username)
            password = self._value(descriptor.password)
            if username is None or password is None:
                return {}
            return basic_headers(username, password)

        token = self._value(descriptor.variable)
        host = host_of(url)
        if token is None or not host:
            return {}
        return token_headers(host, token)

    def headers_for_url(self, url: str) -> dict[str, str]:
        """Look up the repository for *url* and return its auth headers."""
        match = self.find_descriptor_for_url(url)
        if match is None:
            return {}
        return self.build_headers(match.descriptor, url)
