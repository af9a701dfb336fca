"""Exception classes for the test generation pipeline."""

from __future__ import annotations

from pathlib import Path


class KarateTestgenError(Exception):
    """Base exception for pipeline failures.

    ``stage`` and ``artifact`` are filled in by the orchestrator so the final
    message says where the run stopped.
    """

    def __init__(self, message: str, stage: str | None = None, artifact: Path | None = None):
        self.message = message
        self.stage = stage
        self.artifact = artifact
        super().__init__(message)

    def __str__(self) -> str:
        prefix = ""
        if self.stage:
            prefix = f"[{self.stage}] "
        if self.artifact is not None:
            prefix += f"{self.artifact}: "
        return f"{prefix}{self.message}"


class FilesystemError(KarateTestgenError):
    """Raised when a local disk operation fails."""


class RemoteAccessError(KarateTestgenError):
    """Raised when the remote repository cannot be cloned."""


class AuthError(KarateTestgenError):
    """Raised when a credential is missing or rejected."""


class ProtocolError(KarateTestgenError):
    """Raised when the completion service answers with an error or an unexpected payload."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        stage: str | None = None,
        artifact: Path | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, stage=stage, artifact=artifact)


class VcsError(KarateTestgenError):
    """Raised when a branch, commit, or push operation fails."""
