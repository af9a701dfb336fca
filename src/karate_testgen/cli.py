"""Typer-based CLI for generating and publishing Karate tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import typer

from karate_testgen.config import (
    CONTROLLER_SUFFIX,
    DEFAULT_API_URL,
    DEFAULT_BRANCH_NAME,
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_FEATURE_DIR,
    DEFAULT_MODEL_NAME,
    DEFAULT_REPO_URL,
    DEFAULT_TEMPERATURE,
    DEFAULT_WORK_DIR,
    GITHUB_TOKEN_ENV,
    OPENAI_API_KEY_ENV,
    PipelineConfig,
)
from karate_testgen.errors import KarateTestgenError
from karate_testgen.pipeline import run_pipeline

app = typer.Typer(add_completion=False, help="karate-testgen: generate Karate tests for REST controllers")


@app.command("run")
def run(
    repo_url: str = typer.Option(DEFAULT_REPO_URL, "--repo-url", help="Remote git repository to clone"),
    work_dir: Path = typer.Option(DEFAULT_WORK_DIR, "--work-dir", help="Local working copy (wiped first)"),
    branch: str = typer.Option(DEFAULT_BRANCH_NAME, "--branch", help="Branch to create and push"),
    feature_dir: Path = typer.Option(
        DEFAULT_FEATURE_DIR, "--feature-dir", help="Output directory relative to the working copy"
    ),
    suffix: str = typer.Option(CONTROLLER_SUFFIX, "--suffix", help="Filename suffix of controller files"),
    model_name: str = typer.Option(DEFAULT_MODEL_NAME, "--model", help="Chat completions model"),
    temperature: float = typer.Option(DEFAULT_TEMPERATURE, min=0.0, max=2.0, help="Sampling temperature"),
    commit_message: str = typer.Option(DEFAULT_COMMIT_MESSAGE, "--commit-message", help="Commit message"),
    git_username: str | None = typer.Option(
        None, "--git-username", help="Username paired with GITHUB_TOKEN for the push"
    ),
    api_url: str = typer.Option(DEFAULT_API_URL, "--api-url", help="Chat completions endpoint URL"),
    timeout: float = typer.Option(120.0, min=1.0, help="Per-request timeout in seconds"),
    max_retries: int = typer.Option(2, min=0, help="Retries after network failures"),
) -> None:
    """Clone, generate one feature per controller, then push a new branch."""
    try:
        config = PipelineConfig.from_env(
            repo_url=repo_url,
            work_dir=work_dir,
            branch_name=branch,
            feature_dir=feature_dir,
            controller_suffix=suffix,
            model_name=model_name,
            temperature=temperature,
            commit_message=commit_message,
            git_username=git_username,
            api_url=api_url,
            request_timeout=timeout,
            max_retries=max_retries,
        )
        result = run_pipeline(config, progress_callback=typer.echo)
    except KarateTestgenError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Run complete. branch={result.branch} features={len(result.features)}")


@app.command("doctor")
def doctor() -> None:
    """Print local environment diagnostics used by the CLI."""
    config = PipelineConfig.from_env()
    missing = config.missing_credentials()
    typer.echo(f"{OPENAI_API_KEY_ENV} set: {OPENAI_API_KEY_ENV not in missing}")
    typer.echo(f"{GITHUB_TOKEN_ENV} set: {GITHUB_TOKEN_ENV not in missing}")
    typer.echo(f"git available: {shutil.which('git') is not None}")


if __name__ == "__main__":
    app()
