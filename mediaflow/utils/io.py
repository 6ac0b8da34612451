"""File helpers shared by the stores."""

import os
import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO


@contextmanager
def atomic_write(path: Path, encoding: str = "utf-8") -> Iterator[TextIO]:
    """Write to a temp file in the target directory, then rename over ``path``.

    Readers never observe a half-written file. On error the temp file is
    removed and the original (if any) is left untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# Generated ids are "wf_<hex12>" and "run_YYYYMMDD_HHMMSS_<hex8>"
_KEY_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]{0,127}")


def validate_key(key: str) -> None:
    """
    Reject storage keys that could escape the storage directory.

    A key becomes a single file name under ``workflows/`` or ``runs/``, so
    only letters, digits, ``_``, ``-`` and ``.`` are accepted, it must not
    start with a dot or separator, and ``..`` never appears.

    Raises:
        ValueError: If the key is empty or not a plain file-name stem
    """
    if not key or not key.strip():
        raise ValueError("Storage key cannot be empty")
    if not _KEY_PATTERN.fullmatch(key) or ".." in key:
        raise ValueError(f"Invalid storage key {key!r}: expected letters, digits, '_', '-' or '.'")
