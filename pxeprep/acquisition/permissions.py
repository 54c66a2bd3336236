"""Permission normalization for the asset tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o644
EXEC_MODE = 0o755


def normalize_tree(
    root: Path, top_dirs: Iterable[Path], executables: Iterable[Path] = ()
) -> int:
    """Make directories traversable, files readable and loaders executable.

    Args:
        root: Project root
        top_dirs: Directories (relative to root) to walk
        executables: Files (relative to root) that get the executable mode

    Returns:
        Number of paths whose mode was set
    """
    exec_paths = {(root / path).resolve() for path in executables}
    changed = 0

    for top in top_dirs:
        base = root / top
        if not base.is_dir():
            continue
        os.chmod(base, DIR_MODE)
        changed += 1
        for dirpath, dirnames, filenames in os.walk(base):
            for name in dirnames:
                os.chmod(Path(dirpath) / name, DIR_MODE)
                changed += 1
            for name in filenames:
                path = Path(dirpath) / name
                if path.is_symlink():
                    continue
                mode = EXEC_MODE if path.resolve() in exec_paths else FILE_MODE
                os.chmod(path, mode)
                changed += 1

    logger.debug(f"Normalized permissions on {changed} path(s)")
    return changed
