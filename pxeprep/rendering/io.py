"""File I/O operations for rendering."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def discard(path: Path) -> None:
    """Remove a scratch file if it still exists."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def stage_text(path: Path, text: str, mode: int = 0o644) -> Path:
    """Write text to a temporary file next to ``path``.

    The temporary file lives in the destination directory so a later
    ``os.replace`` stays on one filesystem, and it already carries ``mode``
    when it is moved into place.

    Args:
        path: Final destination file path
        text: Text content to write
        mode: File permissions (octal)

    Returns:
        Path of the staged temporary file
    """
    ensure_parent(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_path, mode)
    except BaseException:
        discard(tmp_path)
        raise
    return tmp_path


def commit(staged: Path, path: Path) -> None:
    """Atomically move a staged file onto its destination."""
    os.replace(staged, path)


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    staged = stage_text(path, text, mode)
    try:
        commit(staged, path)
    finally:
        discard(staged)
