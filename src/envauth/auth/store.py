"""Authentication sinks -- where resolved credentials are written.

A sink is addressed with dotted keys of the form ``<section>.<host>``,
mirroring the package manager's ``auth.json`` layout::

    {
        "http-basic": {"repo.example.com": {"username": "u", "password": "p"}},
        "github-oauth": {"github.com": "ghp_..."}
    }

The key is split at the first dot only, since hosts contain dots
themselves. Writing a key replaces its previous value wholesale; fields of
an old credential are never merged into a new one.

:class:`JsonAuthStore` persists to disk with
:func:`~envauth.files.atomic_write` and ``0o600`` permissions so that secrets
are never world-readable, even momentarily.
:class:`InMemoryAuthSink` keeps everything in memory for dry runs.
"""

from __future__ import annotations

import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from envauth.exceptions import AuthStoreError
from envauth.files import atomic_write


def split_key(key: str) -> tuple[str, str]:
    """Split ``"<section>.<host>"`` into its two parts.

    Raises:
        AuthStoreError: If *key* has no dot or an empty part.
    """
    section, sep, host = key.partition(".")
    if not sep or not section or not host:
        raise AuthStoreError(f"Invalid auth setting key: {key!r}")
    return section, host


class AuthSink(ABC):
    """Destination for authentication settings."""

    @abstractmethod
    def add_config_setting(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    @abstractmethod
    def get_config_setting(self, key: str) -> Optional[Any]:
        """Return the value stored under *key*, or ``None``."""
        ...

    @abstractmethod
    def remove_config_setting(self, key: str) -> None:
        """Delete *key* if present."""
        ...


class InMemoryAuthSink(AuthSink):
    """Auth sink that only keeps settings in memory."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def add_config_setting(self, key: str, value: Any) -> None:
        section, host = split_key(key)
        self._data.setdefault(section, {})[host] = copy.deepcopy(value)

    def get_config_setting(self, key: str) -> Optional[Any]:
        section, host = split_key(key)
        return copy.deepcopy(self._data.get(section, {}).get(host))

    def remove_config_setting(self, key: str) -> None:
        section, host = split_key(key)
        hosts = self._data.get(section)
        if hosts is not None:
            hosts.pop(host, None)
            if not hosts:
                del self._data[section]

    def as_dict(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._data)


class JsonAuthStore(AuthSink):
    """Auth sink persisted as an ``auth.json`` file.

    Every write re-reads the file so that sections owned by other tools
    are preserved.

    Args:
        path: Location of the JSON file. It does not need to exist yet.

    Example::

        store = JsonAuthStore(Path("~/.composer/auth.json").expanduser())
        store.add_config_setting("http-basic.repo.example.com",
                                 {"username": "u", "password": "p"})
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """The filesystem path of the auth file."""
        return self._path

    def load(self) -> dict[str, Any]:
        """Return the whole document, or an empty dict if the file does not exist.

        Raises:
            AuthStoreError: If the file exists but cannot be read or is not
                a JSON object. The file is left untouched.
        """
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise AuthStoreError(f"Cannot read auth file {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise AuthStoreError(f"Auth file {self._path} does not contain a JSON object")
        return data

    def add_config_setting(self, key: str, value: Any) -> None:
        section, host = split_key(key)
        data = self.load()
        hosts = data.get(section)
        if not isinstance(hosts, dict):
            hosts = {}
            data[section] = hosts
        hosts[host] = value
        self._save(data)

    def get_config_setting(self, key: str) -> Optional[Any]:
        section, host = split_key(key)
        hosts = self.load().get(section)
        if not isinstance(hosts, dict):
            return None
        return hosts.get(host)

    def remove_config_setting(self, key: str) -> None:
        section, host = split_key(key)
        data = self.load()
        hosts = data.get(section)
        if not isinstance(hosts, dict) or host not in hosts:
            return
        del hosts[host]
        if not hosts:
            del data[section]
        self._save(data)

    def _save(self, data: dict[str, Any]) -> None:
        try:
            atomic_write(self._path, json.dumps(data, indent=4) + "\n", mode=0o600)
        except OSError as exc:
            raise AuthStoreError(f"Cannot write auth file {self._path}: {exc}") from exc
