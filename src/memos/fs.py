"""File write primitives used by the memo store."""

from __future__ import annotations

import contextlib
import os
import uuid
from pathlib import Path


def write_new_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Write *text* to *path*, which must not exist yet.

    Raises ``FileExistsError`` without touching the existing file. A failed
    write removes the partially written file before re-raising.
    """
    path = Path(path)
    with open(path, "x", encoding=encoding, newline="") as fh:
        try:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        except BaseException:
            fh.close()
            with contextlib.suppress(OSError):
                path.unlink()
            raise


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Replace *path* with *text* via a temp file in the same directory.

    Readers see either the old or the new content, never a torn write.
    """
    path = Path(path)
    tmp_path = path.parent / f".{path.name}.tmp-{uuid.uuid4().hex}"
    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        tmp_path.replace(path)
    finally:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
