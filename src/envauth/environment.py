"""Environment variable lookup backed by the process environment and a ``.env`` file.

:class:`EnvironmentSource` answers :meth:`~EnvironmentSource.lookup` with a
fixed precedence:

1. The ambient system environment (``os.environ`` unless another mapping
   is injected).
2. Variables loaded from the project's ``.env`` file.

The ``.env`` file lives in the *project root*: the nearest ancestor of the
working directory (inclusive) that contains the manifest file, or the
working directory itself when there is none. Only that one file is ever
considered, and it is loaded at most once per :class:`EnvironmentSource`.
Parsing is delegated to python-dotenv's :func:`~dotenv.dotenv_values`,
which returns a mapping without modifying ``os.environ``.
python-dotenv expands ``${VAR}`` references against ``os.environ``, so
expansion only happens when the source reads ``os.environ``. With an injected
mapping, references are kept as written.

Any failure while locating, reading or parsing the file is recorded in a
:class:`LoadResult` and otherwise ignored, so a broken ``.env`` never
blocks unrelated work.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "composer.json"
DEFAULT_ENV_FILENAME = ".env"


class LoadStatus(str, enum.Enum):
    """Outcome of the single ``.env`` load."""

    LOADED = "loaded"
    ABSENT = "absent"
    ERROR = "error"


class LoadResult(BaseModel):
    """Result of locating and parsing the ``.env`` file.

    Attributes:
        status: Whether variables were loaded, no file existed, or loading
            failed.
        path: The file that was (or failed to be) read.
        variables: Parsed variables. Always empty unless ``status`` is
            :attr:`LoadStatus.LOADED`.
        detail: Error description when ``status`` is :attr:`LoadStatus.ERROR`.
    """

    status: LoadStatus
    path: Optional[Path] = None
    variables: dict[str, str] = Field(default_factory=dict)
    detail: Optional[str] = None


def find_project_root(start: Path, marker: str = DEFAULT_MARKER) -> Path:
    """Return the nearest directory at or above *start* containing *marker*.

    The walk stops below the filesystem root (the first directory whose
    parent is itself). Falls back to *start* when no directory qualifies.
    """
    current = start
    while current != current.parent:
        if (current / marker).exists():
            return current
        current = current.parent
    return start


def find_environment_file(root: Path, filename: str = DEFAULT_ENV_FILENAME) -> Optional[Path]:
    """Return ``root/filename`` if it is a readable file, else ``None``."""
    candidate = root / filename
    if candidate.is_file() and os.access(candidate, os.R_OK):
        return candidate
    return None


class EnvironmentSource:
    """Variable lookup with system-over-file precedence.

    The ``.env`` file is loaded when the source is constructed; later
    :meth:`ensure_loaded` calls are no-ops.

    Args:
        system_env: Read-only mapping consulted first. Defaults to
            ``os.environ``. Pass a :class:`collections.ChainMap` to merge
            several namespaces.
        cwd: Directory the project-root search starts from. Defaults to
            the current working directory at load time.
        marker: File name identifying the project root.
        filename: Name of the environment file inside the project root.

    Example::

        source = EnvironmentSource(system_env={"TOKEN": "from-system"})
        source.lookup("TOKEN")   # "from-system", even if .env sets TOKEN
    """

    def __init__(
        self,
        system_env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
        marker: str = DEFAULT_MARKER,
        filename: str = DEFAULT_ENV_FILENAME,
    ) -> None:
        self._system_env: Mapping[str, str] = os.environ if system_env is None else system_env
        self._cwd = cwd
        self._marker = marker
        self._filename = filename
        self._result: Optional[LoadResult] = None
        self.ensure_loaded()

    @property
    def load_result(self) -> LoadResult:
        """The result of the one-time ``.env`` load."""
        return self.ensure_loaded()

    def lookup(self, name: str) -> Optional[str]:
        """Return the value of *name*, or ``None`` if it is not defined.

        System values shadow file values. Empty strings are returned as
        they are; callers decide whether an empty value counts.
        """
        value = self._system_env.get(name)
        if value is not None:
            return value
        return self.ensure_loaded().variables.get(name)

    def shadowed_by_system(self, name: str) -> bool:
        """Return True if a system value hides the file value of *name*."""
        return name in self.ensure_loaded().variables and self._system_env.get(name) is not None

    def all_loaded_variables(self) -> dict[str, str]:
        """Return a copy of the variables loaded from the ``.env`` file only."""
        return dict(self.ensure_loaded().variables)

    def ensure_loaded(self) -> LoadResult:
        """Locate and parse the ``.env`` file on first call; return the cached result after."""
        if self._result is None:
            self._result = self._load()
            if self._result.status is LoadStatus.ERROR:
                logger.warning(
                    "Ignoring environment file %s: %s",
                    self._result.path,
                    self._result.detail,
                )
        return self._result

    def _load(self) -> LoadResult:
        path: Optional[Path] = None
        try:
            start = self._cwd if self._cwd is not None else Path.cwd()
            root = find_project_root(start, self._marker)
            path = find_environment_file(root, self._filename)
            if path is None:
                logger.debug("No %s file in %s", self._filename, root)
                return LoadResult(status=LoadStatus.ABSENT)
            parsed = dotenv_values(path, interpolate=self._system_env is os.environ)
        except (OSError, UnicodeDecodeError) as exc:
            return LoadResult(status=LoadStatus.ERROR, path=path, detail=str(exc))

        variables = {key: value for key, value in parsed.items() if value is not None}
        logger.debug("Loaded %d variables from %s", len(variables), path)
        return LoadResult(status=LoadStatus.LOADED, path=path, variables=variables)


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_source: Optional[EnvironmentSource] = None


def get_environment_source(
    marker: str = DEFAULT_MARKER, filename: str = DEFAULT_ENV_FILENAME
) -> EnvironmentSource:
    """Return the process-wide :class:`EnvironmentSource`, creating it on first use.

    Sharing one instance keeps the ``.env`` file to a single load per
    process, however many times the host activates the plugin. *marker*
    and *filename* only take effect on the call that creates the instance.
    """
    global _source
    if _source is None:
        _source = EnvironmentSource(marker=marker, filename=filename)
    return _source


def reset_environment_source() -> None:
    """Discard the process-wide instance (used by tests)."""
    global _source
    _source = None
