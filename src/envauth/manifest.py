"""Manifest reading and auth descriptor decoding.

The manifest is a ``composer.json``-shaped JSON document. Only the
``repositories`` section matters here::

    {
        "repositories": [
            {"url": "https://github.com/acme/widgets.git",
             "options": {"envauth/env-auth": "GITHUB_TOKEN"}},
            {"url": "https://repo.example.com",
             "options": {"envauth/env-auth": {"username": "REPO_USER",
                                              "password": "REPO_PASS"}}}
        ]
    }

Everything in this module is lenient: a missing or malformed manifest,
a repository without a URL, or a descriptor of an unknown shape is skipped
rather than reported as an error.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from envauth.exceptions import ManifestError
from envauth.models import BasicDescriptor, Descriptor, TokenDescriptor

logger = logging.getLogger(__name__)


class ManifestRepository(BaseModel):
    """One entry of the manifest's ``repositories`` section."""

    model_config = ConfigDict(extra="allow")

    url: str
    options: dict[str, Any] = Field(default_factory=dict)


def load_manifest(path: Path) -> dict[str, Any]:
    """Read the manifest at *path*.

    Returns:
        The parsed document, or an empty dict when the file is missing,
        unreadable, not valid JSON, or not a JSON object.
    """
    if not path.is_file():
        logger.debug("No manifest at %s", path)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable manifest %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring manifest %s: top level is not an object", path)
        return {}
    return data


def require_manifest(path: Path) -> dict[str, Any]:
    """Like :func:`load_manifest` but raise when the file does not exist.

    Used by the CLI, where a missing manifest is almost always a mistake
    worth reporting.

    Raises:
        ManifestError: If *path* is not a file.
    """
    if not path.is_file():
        raise ManifestError(f"Manifest not found: {path}")
    return load_manifest(path)


def iter_repositories(manifest: dict[str, Any]) -> Iterator[ManifestRepository]:
    """Yield the well-formed repository entries of *manifest* in order.

    ``repositories`` may be a list or an object keyed by name; for an
    object the values are used in document order.
    """
    repositories = manifest.get("repositories")
    if isinstance(repositories, dict):
        repositories = list(repositories.values())
    if not isinstance(repositories, list):
        return

    for raw in repositories:
        if not isinstance(raw, dict):
            continue
        try:
            yield ManifestRepository.model_validate(raw)
        except ValidationError:
            logger.debug("Skipping repository entry without a usable url: %r", raw.get("url"))


def parse_descriptor(raw: Any) -> Optional[Descriptor]:
    """Decode a raw ``env-auth`` option into a descriptor.

    A string becomes a :class:`~envauth.models.TokenDescriptor`; an object
    with string ``username`` and ``password`` fields becomes a
    :class:`~envauth.models.BasicDescriptor`. Any other shape yields
    ``None``.
    """
    if isinstance(raw, str):
        return TokenDescriptor(variable=raw)
    if isinstance(raw, dict):
        try:
            return BasicDescriptor.model_validate(
                {"username": raw.get("username"), "password": raw.get("password")}
            )
        except ValidationError:
            return None
    return None


def host_of(url: str) -> Optional[str]:
    """Return the hostname of *url*, or ``None`` if it has none.

    Hostnames are lowercased, as :mod:`urllib.parse` normalises them.
    """
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None
