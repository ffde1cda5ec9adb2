"""Atomic file writes.

:func:`atomic_write` writes to a temporary file in the target's directory
and renames it over the target, so readers see either the old file or the
new one and never a partial write.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    Args:
        path: Destination file. Missing parent directories are created.
        data: Text to write (UTF-8).
        mode: Permission bits applied to the temporary file before any data
            is written, e.g. ``0o600`` for files holding secrets.

    Raises:
        OSError: If the file cannot be written. The temp file is removed and
            an existing *path* is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise
