from __future__ import annotations

import os
import tempfile
from pathlib import Path

from karate_testgen.config import FEATURE_SUFFIX, SOURCE_SUFFIX
from karate_testgen.errors import FilesystemError


def feature_file_name(source: Path | str, source_suffix: str = SOURCE_SUFFIX, target_suffix: str = FEATURE_SUFFIX) -> str:
    """Map ``FooController.java`` to ``FooController.feature``.

    Only a trailing ``source_suffix`` is replaced; other names just get
    ``target_suffix`` appended.
    """
    name = Path(source).name
    if source_suffix and name.endswith(source_suffix):
        name = name[: -len(source_suffix)]
    return name + target_suffix


def _default_file_mode() -> int:
    # os.umask can only be read by setting it.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_feature_file(output_dir: Path, file_name: str, content: str) -> Path:
    """Write ``content`` to ``output_dir/file_name``, replacing any existing file."""
    output_dir = Path(output_dir)
    target = output_dir / file_name
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=output_dir, prefix=f".{file_name}.", suffix=".tmp")
    except OSError as exc:
        raise FilesystemError(f"Unable to prepare {target}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, target)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise FilesystemError(f"Unable to write {target}: {exc}") from exc

    return target
