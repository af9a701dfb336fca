"""Commit generated features on a new branch and push it to ``origin``."""

from __future__ import annotations

import base64
from pathlib import Path

from karate_testgen.config import DEFAULT_GIT_USERNAME
from karate_testgen.errors import AuthError, VcsError
from karate_testgen.repo_source import CommandFailed, run_cmd

REMOTE_NAME = "origin"

AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "invalid username or password",
    "permission denied",
    "returned error: 401",
    "returned error: 403",
)


def _is_auth_failure(stderr: str) -> bool:
    lowered = stderr.lower()
    return any(marker in lowered for marker in AUTH_FAILURE_MARKERS)


class Publisher:
    """Creates the publication branch, commits everything, and pushes it."""

    def __init__(self, token: str | None, username: str = DEFAULT_GIT_USERNAME, remote: str = REMOTE_NAME):
        if not token or not token.strip():
            raise AuthError("Missing GITHUB_TOKEN")
        self.token = token.strip()
        self.username = username
        self.remote = remote

    def _git(self, working_copy: Path, args: list[str]) -> str:
        try:
            return run_cmd(["git", "-C", str(working_copy), *args])
        except CommandFailed as exc:
            raise VcsError(str(exc)) from exc

    def _auth_header(self) -> str:
        pair = f"{self.username}:{self.token}".encode("utf-8")
        return "Authorization: Basic " + base64.b64encode(pair).decode("ascii")

    def branch_exists(self, working_copy: Path, branch_name: str) -> bool:
        try:
            run_cmd(["git", "-C", str(working_copy), "rev-parse", "--verify", "--quiet", f"refs/heads/{branch_name}"])
        except CommandFailed:
            return False
        return True

    def publish(self, working_copy: Path, branch_name: str, commit_message: str) -> None:
        """Branch, stage, commit, and push.

        Raises:
            VcsError: If the branch exists, nothing changed, or git fails.
            AuthError: If the remote rejects the credential.
        """
        working_copy = Path(working_copy)
        if self.branch_exists(working_copy, branch_name):
            raise VcsError(f"Branch already exists: {branch_name}")

        self._git(working_copy, ["checkout", "-b", branch_name])
        self._git(working_copy, ["add", "-A"])
        if not self._git(working_copy, ["status", "--porcelain"]).strip():
            raise VcsError(f"Nothing to commit on branch {branch_name}")
        self._git(working_copy, ["commit", "--quiet", "-m", commit_message])
        self.push(working_copy, branch_name)

    def push(self, working_copy: Path, branch_name: str) -> None:
        cmd = [
            "git",
            "-C",
            str(working_copy),
            "-c",
            f"http.extraHeader={self._auth_header()}",
            "push",
            "--quiet",
            self.remote,
            branch_name,
        ]
        display = f"git -C {working_copy} push {self.remote} {branch_name}"
        try:
            run_cmd(cmd, display=display)
        except CommandFailed as exc:
            if _is_auth_failure(exc.stderr):
                raise AuthError(f"Remote rejected credentials for {self.username}: {exc.stderr}") from exc
            raise VcsError(str(exc)) from exc
