from __future__ import annotations

import os
from pathlib import Path

from karate_testgen.config import CONTROLLER_SUFFIX
from karate_testgen.errors import FilesystemError

SKIPPED_DIRS = {".git"}


def _raise_walk_error(exc: OSError) -> None:
    raise FilesystemError(f"Unable to scan {exc.filename}: {exc.strerror}") from exc


def find_artifacts(root: Path, suffix: str = CONTROLLER_SUFFIX) -> list[Path]:
    """Return every file below ``root`` whose name ends with ``suffix``.

    Order follows the filesystem walk; callers should not rely on it.
    """
    root = Path(root)
    if not root.is_dir():
        raise FilesystemError(f"Working copy not found: {root}")

    matches: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames[:] = [name for name in dirnames if name not in SKIPPED_DIRS]
        for name in filenames:
            if name.endswith(suffix):
                matches.append(Path(dirpath) / name)
    return matches
