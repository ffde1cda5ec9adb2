"""Credential mapping and authentication sinks.

The main entry points are:

- :class:`CredentialMapper` -- resolves manifest descriptors against the
  environment and writes the results to a sink.
- :class:`AuthSink` -- abstract destination for ``<section>.<host>``
  settings, implemented by :class:`JsonAuthStore` (``auth.json`` on disk)
  and :class:`InMemoryAuthSink`.
- :func:`classify_host` -- picks the auth scheme for a host.

Typical usage::

    from envauth.auth import CredentialMapper, JsonAuthStore
    from envauth.environment import get_environment_source

    mapper = CredentialMapper(get_environment_source(), Path("composer.json"))
    mapper.resolve_and_apply(JsonAuthStore(Path("auth.json")))
"""

from envauth.auth.mapper import CredentialMapper
from envauth.auth.schemes import basic_headers, classify_host, token_headers
from envauth.auth.store import AuthSink, InMemoryAuthSink, JsonAuthStore

__all__ = [
    "AuthSink",
    "CredentialMapper",
    "InMemoryAuthSink",
    "JsonAuthStore",
    "basic_headers",
    "classify_host",
    "token_headers",
]
