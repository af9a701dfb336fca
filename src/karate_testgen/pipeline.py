"""End-to-end run: clone, locate controllers, generate features, publish."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from pydantic import SecretStr

from karate_testgen.config import PipelineConfig
from karate_testgen.errors import FilesystemError, KarateTestgenError
from karate_testgen.generator import ChatCompletionsGenerator
from karate_testgen.locator import find_artifacts
from karate_testgen.models import ControllerArtifact, GeneratedFeature, PipelineResult
from karate_testgen.publisher import Publisher
from karate_testgen.repo_source import acquire
from karate_testgen.writer import feature_file_name, write_feature_file

TOTAL_STEPS = 4


class FeatureGenerator(Protocol):
    def generate_test(self, controller_code: str) -> str: ...


def _secret(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value is not None else None


@contextmanager
def _stage(name: str, artifact: Path | None = None) -> Iterator[None]:
    """Tag pipeline errors raised inside the block with where they happened."""
    try:
        yield
    except KarateTestgenError as exc:
        if exc.stage is None:
            exc.stage = name
        if exc.artifact is None and artifact is not None:
            exc.artifact = artifact
        raise


def read_artifact(path: Path) -> ControllerArtifact:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FilesystemError(f"Unable to read controller: {exc}") from exc
    return ControllerArtifact(path=path, content=content)


def run_pipeline(
    config: PipelineConfig,
    generator: FeatureGenerator | None = None,
    publisher: Publisher | None = None,
    progress_callback: Callable[[str], None] | None = None,
) -> PipelineResult:
    """Run every stage in order and return the written features.

    Credentials are checked before anything touches the disk or network.
    Any pipeline error aborts the run; features written before the failure
    stay on disk but nothing is pushed.

    Args:
        config: Resolved run configuration.
        generator: Optional object with ``generate_test``; defaults to a
            ``ChatCompletionsGenerator`` built from ``config``.
        publisher: Optional ``Publisher``; defaults to one built from ``config``.
        progress_callback: Receives one line per progress event.
    """

    def report(message: str) -> None:
        if progress_callback:
            progress_callback(message)

    owned_generator: ChatCompletionsGenerator | None = None
    with _stage("configure"):
        if generator is None and publisher is None:
            config.require_credentials()
        if publisher is None:
            publisher = Publisher(token=_secret(config.github_token), username=config.git_username)
        if generator is None:
            owned_generator = ChatCompletionsGenerator(
                api_key=_secret(config.openai_api_key),
                model_name=config.model_name,
                temperature=config.temperature,
                api_url=config.api_url,
                timeout=config.request_timeout,
                max_retries=config.max_retries,
            )
            generator = owned_generator

    try:
        report(f"[1/{TOTAL_STEPS}] Cloning {config.repo_url} into {config.work_dir}")
        with _stage("acquire"):
            working_copy = acquire(config.repo_url, config.work_dir)

        report(f"[2/{TOTAL_STEPS}] Locating *{config.controller_suffix} files")
        with _stage("locate"):
            controllers = find_artifacts(working_copy, suffix=config.controller_suffix)
        report(f"    found {len(controllers)} controller(s)")

        report(f"[3/{TOTAL_STEPS}] Generating Karate features with {config.model_name}")
        output_dir = working_copy / config.feature_dir
        features: list[GeneratedFeature] = []
        written_by: dict[Path, Path] = {}
        for path in controllers:
            with _stage("read", path):
                artifact = read_artifact(path)
            with _stage("generate", path):
                feature_text = generator.generate_test(artifact.content)
            with _stage("write", path):
                name = feature_file_name(path, config.source_suffix, config.feature_suffix)
                target = write_feature_file(output_dir, name, feature_text)
            if target in written_by:
                report(f"Warning: {target} from {written_by[target]} overwritten by {path}")
            written_by[target] = path
            report(f"Generated test: {target}")
            features.append(GeneratedFeature(source=path, target=target))

        report(f"[4/{TOTAL_STEPS}] Publishing branch {config.branch_name}")
        with _stage("publish"):
            publisher.publish(working_copy, config.branch_name, config.commit_message)

        report(f"Pushed branch: {config.branch_name}")
        return PipelineResult(branch=config.branch_name, features=features)
    finally:
        if owned_generator is not None:
            owned_generator.close()
