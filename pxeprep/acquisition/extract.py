"""Extraction of a single binary from a downloaded archive."""

from __future__ import annotations

import fnmatch
import logging
import zipfile
from pathlib import Path

from ..core.errors import ExtractionError
from ..rendering.io import commit, discard, ensure_parent

logger = logging.getLogger(__name__)


def extract_member(archive: Path, pattern: str, destination: Path) -> str:
    """Copy the first archive member matching ``pattern`` to ``destination``.

    Args:
        archive: Zip archive path
        pattern: Glob matched against member base names (e.g. ``*.bin``)
        destination: Output file path

    Returns:
        Name of the extracted member
    """
    try:
        with zipfile.ZipFile(archive) as bundle:
            members = sorted(
                info.filename
                for info in bundle.infolist()
                if not info.is_dir()
                and fnmatch.fnmatch(Path(info.filename).name, pattern)
            )
            if not members:
                raise ExtractionError(
                    f"No member matching {pattern!r} in {archive.name}"
                )
            member = members[0]
            ensure_parent(destination)
            scratch = destination.with_name(f".{destination.name}.extract")
            try:
                with bundle.open(member) as source, scratch.open("wb") as target:
                    while chunk := source.read(64 * 1024):
                        target.write(chunk)
                commit(scratch, destination)
            finally:
                discard(scratch)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ExtractionError(f"Cannot extract {archive.name}: {exc}") from exc

    logger.debug(f"Extracted {member} from {archive.name} to {destination}")
    return member
