from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from karate_testgen.config import PipelineConfig

USER_CONTROLLER = """package com.bank.web;

@RestController
@RequestMapping("/users")
public class UserController {
    @GetMapping("/{id}")
    public User get(@PathVariable Long id) { return service.find(id); }
}
"""

ORDER_CONTROLLER = """package com.bank.web;

@RestController
public class OrderController {
    @PostMapping("/orders")
    public Order create(@RequestBody Order order) { return service.save(order); }
}
"""

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def git(*args: str, cwd: Path | None = None) -> str:
    cmd = ["git", *args]
    return subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, check=True).stdout


@pytest.fixture
def git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate git from user/system config and give it a commit identity."""
    global_config = tmp_path / "gitconfig"
    global_config.write_text("", encoding="utf-8")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "author@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "author@example.com")


@pytest.fixture
def bare_remote(tmp_path: Path, git_env: None) -> Path:
    """A bare repository holding two controllers and one unrelated file."""
    seed = tmp_path / "seed"
    controllers = seed / "src" / "main" / "java" / "com" / "bank" / "web"
    controllers.mkdir(parents=True)
    (controllers / "UserController.java").write_text(USER_CONTROLLER, encoding="utf-8")
    (controllers / "OrderController.java").write_text(ORDER_CONTROLLER, encoding="utf-8")
    (seed / "README.md").write_text("# Bank\n", encoding="utf-8")

    git("init", "--quiet", cwd=seed)
    git("add", "-A", cwd=seed)
    git("commit", "--quiet", "-m", "Initial import", cwd=seed)

    remote = tmp_path / "remote.git"
    git("clone", "--quiet", "--bare", str(seed), str(remote))
    return remote


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig.from_env(
        environ={"OPENAI_API_KEY": "sk-test", "GITHUB_TOKEN": "ghp-test"},
        repo_url="https://example.com/bank.git",
        work_dir=tmp_path / "temp-repo",
    )
