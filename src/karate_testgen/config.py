"""Run configuration, resolved once from the process environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr

from karate_testgen.errors import AuthError

DEFAULT_REPO_URL = "https://github.com/saivijaykumar/BankManagement.git"
DEFAULT_WORK_DIR = Path("temp-repo")
DEFAULT_BRANCH_NAME = "karate-tests-poc"
DEFAULT_FEATURE_DIR = Path("src/test/resources/karate")
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL_NAME = "gpt-4"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_COMMIT_MESSAGE = "Add generated Karate tests"
DEFAULT_GIT_USERNAME = "your-github-username"

CONTROLLER_SUFFIX = "Controller.java"
SOURCE_SUFFIX = ".java"
FEATURE_SUFFIX = ".feature"

OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"
GITHUB_USERNAME_ENV = "GITHUB_USERNAME"


def _read_secret(environ: Mapping[str, str], name: str) -> SecretStr | None:
    value = (environ.get(name) or "").strip()
    return SecretStr(value) if value else None


class PipelineConfig(BaseModel):
    """Everything one pipeline run needs, secrets included."""

    repo_url: str = DEFAULT_REPO_URL
    work_dir: Path = DEFAULT_WORK_DIR
    branch_name: str = DEFAULT_BRANCH_NAME
    feature_dir: Path = DEFAULT_FEATURE_DIR
    controller_suffix: str = CONTROLLER_SUFFIX
    source_suffix: str = SOURCE_SUFFIX
    feature_suffix: str = FEATURE_SUFFIX
    api_url: str = DEFAULT_API_URL
    model_name: str = DEFAULT_MODEL_NAME
    temperature: float = Field(DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    request_timeout: float = Field(120.0, gt=0)
    max_retries: int = Field(2, ge=0)
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    git_username: str = DEFAULT_GIT_USERNAME
    openai_api_key: SecretStr | None = None
    github_token: SecretStr | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> PipelineConfig:
        """Build a config from ``environ`` (default ``os.environ``) plus explicit overrides.

        This is the only place that reads credentials from the environment.
        Blank values are treated as unset. ``None`` overrides are ignored so
        CLI options that were not given fall back to the defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "openai_api_key": _read_secret(env, OPENAI_API_KEY_ENV),
            "github_token": _read_secret(env, GITHUB_TOKEN_ENV),
        }
        username = (env.get(GITHUB_USERNAME_ENV) or "").strip()
        if username:
            values["git_username"] = username
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def missing_credentials(self) -> list[str]:
        missing = []
        if self.openai_api_key is None or not self.openai_api_key.get_secret_value():
            missing.append(OPENAI_API_KEY_ENV)
        if self.github_token is None or not self.github_token.get_secret_value():
            missing.append(GITHUB_TOKEN_ENV)
        return missing

    def require_credentials(self) -> None:
        """Raise ``AuthError`` unless both secrets are present."""
        missing = self.missing_credentials()
        if missing:
            raise AuthError(f"Missing required environment variable(s): {', '.join(missing)}")
