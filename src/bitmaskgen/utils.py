"""Shared utilities for bitmaskgen."""

import contextlib
import os
from pathlib import Path


def atomic_write_text(filepath: Path, text: str, encoding: str = "utf-8") -> None:
    """Write text to a file atomically, creating parent directories."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = filepath.with_suffix(filepath.suffix + ".tmp")
    try:
        tmp_path.write_text(text, encoding=encoding)
        os.replace(tmp_path, filepath)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise


def write_if_changed(filepath: Path, text: str) -> bool:
    """Atomically write *text* unless *filepath* already holds it.

    Returns True when the file was written.
    """
    with contextlib.suppress(FileNotFoundError):
        if filepath.read_text(encoding="utf-8") == text:
            return False
    atomic_write_text(filepath, text)
    return True
