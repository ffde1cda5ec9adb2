"""Host classification and request-header encodings.

A host is classified by loose substring matching, so self-hosted
installations such as ``github.acme.internal`` or ``gitlab.example.org``
get the same treatment as the public services:

========================================  ==================  ===============================
Host                                      Scheme              Request header
========================================  ==================  ===============================
``github.com`` or contains ``github``     ``github-oauth``    ``Authorization: token <v>``
``gitlab.com`` or contains ``gitlab``     ``gitlab-token``    ``PRIVATE-TOKEN: <v>``
anything else                             ``http-basic``      ``Authorization: Bearer <v>``
========================================  ==================  ===============================

Username/password pairs always use HTTP Basic (:rfc:`7617`).
"""

from __future__ import annotations

import base64

from envauth.models import AuthScheme


def classify_host(host: str) -> AuthScheme:
    """Return the scheme used for a token on *host*.

    Matching is case-sensitive and the first rule that applies wins.
    """
    if host == "github.com" or "github" in host:
        return AuthScheme.GITHUB_OAUTH
    if host == "gitlab.com" or "gitlab" in host:
        return AuthScheme.GITLAB_TOKEN
    return AuthScheme.HTTP_BASIC


def token_headers(host: str, token: str) -> dict[str, str]:
    """Return the header that carries *token* for *host*."""
    scheme = classify_host(host)
    if scheme is AuthScheme.GITHUB_OAUTH:
        return {"Authorization": f"token {token}"}
    if scheme is AuthScheme.GITLAB_TOKEN:
        return {"PRIVATE-TOKEN": token}
    return {"Authorization": f"Bearer {token}"}


def basic_headers(username: str, password: str) -> dict[str, str]:
    """Return an ``Authorization: Basic`` header for the credential pair."""
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}
