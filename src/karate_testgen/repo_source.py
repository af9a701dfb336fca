"""Working-copy acquisition and the git subprocess helper shared with the publisher."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

from karate_testgen.errors import FilesystemError, RemoteAccessError


class CommandFailed(Exception):
    """A subprocess exited with a non-zero status."""

    def __init__(self, display: str, returncode: int, stderr: str):
        self.display = display
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({display}): {stderr}")


def run_cmd(cmd: list[str], display: str | None = None) -> str:
    """Run a command and return stdout, raising ``CommandFailed`` on failure.

    ``display`` replaces the rendered command in error messages, for commands
    whose arguments carry credentials. Git never prompts for credentials;
    a rejected login fails the command instead.
    """
    shown = display if display is not None else " ".join(cmd)
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=False,
            stdin=subprocess.DEVNULL,
            env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
        )
    except FileNotFoundError as exc:
        raise CommandFailed(shown, 127, f"executable not found: {cmd[0]}") from exc
    if proc.returncode != 0:
        raise CommandFailed(shown, proc.returncode, proc.stderr.strip())
    return proc.stdout


def remove_tree(path: Path) -> None:
    """Delete ``path`` and everything below it."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        raise FilesystemError(f"Unable to remove existing working copy {path}: {exc}") from exc


def acquire(remote_url: str, local_path: Path) -> Path:
    """Produce a fresh clone of ``remote_url`` at ``local_path``.

    Whatever already lives at ``local_path`` is deleted first, so re-running
    against a dirty directory always yields a clean checkout of the remote's
    default branch.

    Raises:
        FilesystemError: If the previous working copy cannot be removed.
        RemoteAccessError: If the clone fails (network, auth, bad URL).
    """
    local_path = Path(local_path)
    if local_path.exists() or local_path.is_symlink():
        remove_tree(local_path)

    try:
        run_cmd(["git", "clone", "--quiet", remote_url, str(local_path)])
    except CommandFailed as exc:
        raise RemoteAccessError(f"Unable to clone {remote_url}: {exc.stderr}") from exc

    return local_path.resolve()
