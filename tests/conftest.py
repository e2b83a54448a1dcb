"""Shared fixtures for autoupdater tests."""

import json
from pathlib import Path

import pytest
from loguru import logger

from autoupdater.errors import CommandFailed
from autoupdater.runner import ExecutionResult

ENV_VARS = (
    "REPO_PATH", "BRANCH", "INTERVAL_MINUTES", "RESTART_CMD", "LOG_FILE",
    "RUN_NPM_INSTALL", "RUN_NPM_BUILD", "RUN_MAKE_BUILD", "BOOTSTRAP_BUILD",
    "BUILD_OUTPUT_DIR", "COMMAND_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment out of the configuration."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeRunner:
    """
    Scripted stand-in for CommandRunner.

    ``responses`` maps a command string to its stdout, ``failures`` lists
    commands that raise CommandFailed. A pull moves HEAD to the remote tip.
    """

    def __init__(self, branch: str = "main"):
        self.branch = branch
        self.calls: list[tuple[str, str]] = []
        self.responses: dict[str, str] = {}
        self.failures: set[str] = set()

    def set_commits(self, local: str, remote: str) -> None:
        self.responses["git rev-parse HEAD"] = local
        self.responses[f"git rev-parse origin/{self.branch}"] = remote

    @property
    def commands(self) -> list[str]:
        return [cmd for cmd, _ in self.calls]

    def run(self, command, cwd) -> ExecutionResult:
        cmd = command if isinstance(command, str) else " ".join(command)
        self.calls.append((cmd, str(cwd)))
        if cmd in self.failures:
            raise CommandFailed(cmd, 1, f"{cmd}: boom")
        if cmd == f"git pull origin {self.branch}":
            self.responses["git rev-parse HEAD"] = self.responses[f"git rev-parse origin/{self.branch}"]
        return ExecutionResult(command=cmd, returncode=0, stdout=self.responses.get(cmd, ""))


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A checkout with a Node project that has already been built."""
    path = tmp_path / "repo"
    (path / ".git").mkdir(parents=True)
    (path / "package.json").write_text(json.dumps({
        "name": "app",
        "scripts": {"build": "tsc", "start": "node dist/index.js"},
    }))
    (path / "dist").mkdir()
    (path / "dist" / "index.js").write_text("console.log('hi')")
    return path


@pytest.fixture
def log_lines():
    """Capture log messages emitted during the test."""
    lines: list[str] = []
    handler_id = logger.add(lambda msg: lines.append(msg.record["message"]), level="DEBUG")
    yield lines
    logger.remove(handler_id)
