"""Canonical Pydantic models shared across all envauth modules.

The models fall into two groups:

**Credential models** -- produced while mapping manifest descriptors to
authentication settings:
    :class:`TokenDescriptor`, :class:`BasicDescriptor`, :data:`Descriptor`,
    :class:`RepositoryMatch`, :class:`AuthScheme`, and
    :class:`AuthenticationEntry`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`PluginsConfig`, and :class:`GlobalConfig`.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_OPTIONS_KEY = "envauth/env-auth"
"""Repository ``options`` key that carries an auth descriptor."""

TOKEN_USERNAME = "token"
"""Username written alongside a token stored as HTTP Basic credentials."""


# --- Descriptors ---


class TokenDescriptor(BaseModel):
    """A single environment variable holding a token.

    Declared in the manifest as a bare string::

        "options": {"envauth/env-auth": "GITHUB_TOKEN"}
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["token"] = "token"
    variable: str = Field(description="Environment variable holding the token")

    @property
    def variables(self) -> tuple[str, ...]:
        return (self.variable,)


class BasicDescriptor(BaseModel):
    """A pair of environment variables holding a username and password.

    Declared in the manifest as an object::

        "options": {"envauth/env-auth": {"username": "REPO_USER", "password": "REPO_PASS"}}

    Both fields must be strings; values are never coerced.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    kind: Literal["basic"] = "basic"
    username: str = Field(description="Environment variable holding the username")
    password: str = Field(description="Environment variable holding the password")

    @property
    def variables(self) -> tuple[str, ...]:
        return (self.username, self.password)


Descriptor = Annotated[
    Union[TokenDescriptor, BasicDescriptor], Field(discriminator="kind")
]
"""Tagged union of the two descriptor shapes, discriminated on ``kind``."""


class RepositoryMatch(BaseModel):
    """A manifest repository whose host matched a looked-up URL."""

    url: str
    host: str
    descriptor: Descriptor


# --- Authentication entries ---


class AuthScheme(str, enum.Enum):
    """Authentication encoding chosen for a host."""

    HTTP_BASIC = "http-basic"
    GITHUB_OAUTH = "github-oauth"
    GITLAB_TOKEN = "gitlab-token"


class AuthenticationEntry(BaseModel):
    """A resolved credential for one host, ready to write to an auth sink.

    ``http-basic`` entries carry ``username`` and ``password``; the token
    schemes carry ``token``. A generic bearer token is represented as
    ``http-basic`` with the fixed username ``"token"``.

    Example::

        entry = AuthenticationEntry(
            host="github.com", scheme=AuthScheme.GITHUB_OAUTH, token="abc123"
        )
        entry.setting()
        # ('http-basic.github.com', {'username': 'token', 'password': 'abc123'})
    """

    host: str
    scheme: AuthScheme
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    def setting(self, native_token_schemes: bool = False) -> tuple[str, Any]:
        """Return the ``(key, value)`` pair to write to an auth sink.

        Args:
            native_token_schemes: Write GitHub/GitLab tokens under their own
                ``github-oauth`` / ``gitlab-token`` sections. When ``False``
                they are normalised to ``http-basic`` with username
                ``"token"``.

        Returns:
            A key of the form ``<section>.<host>`` and its payload.
        """
        if self.scheme is AuthScheme.HTTP_BASIC:
            return (
                f"{AuthScheme.HTTP_BASIC.value}.{self.host}",
                {"username": self.username, "password": self.password},
            )
        if native_token_schemes:
            return f"{self.scheme.value}.{self.host}", self.token
        return (
            f"{AuthScheme.HTTP_BASIC.value}.{self.host}",
            {"username": TOKEN_USERNAME, "password": self.token},
        )


# --- Configuration ---


class OutputConfig(BaseModel):
    """Output formatting preferences."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class PluginsConfig(BaseModel):
    """Plugin enable/disable lists."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """Global envauth configuration stored in ``config.json``.

    Example::

        GlobalConfig(auth_file="~/.composer/auth.json", native_token_schemes=True)
    """

    manifest_filename: str = Field(
        default="composer.json",
        description="Manifest file read from the working directory; also marks the project root",
    )
    env_filename: str = Field(
        default=".env", description="Environment file looked up in the project root"
    )
    options_key: str = Field(
        default=DEFAULT_OPTIONS_KEY,
        description="Repository options key holding the auth descriptor",
    )
    native_token_schemes: bool = Field(
        default=False,
        description="Write GitHub/GitLab tokens as github-oauth/gitlab-token "
        "instead of http-basic",
    )
    auth_file: Optional[str] = Field(
        default=None,
        description="Path to the persisted auth store (default: <config_dir>/auth.json)",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
