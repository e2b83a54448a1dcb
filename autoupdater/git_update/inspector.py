"""Queries and git operations against the local checkout."""

import json
from pathlib import Path

from loguru import logger

from autoupdater.errors import CommandFailed
from autoupdater.git_update.types import ChangeSet, CommitRef
from autoupdater.runner import CommandRunner


class RepositoryInspector:
    """
    Reads the state of one checkout and applies git operations to it.

    Every git call goes through the command runner with the repository as
    working directory, so failures surface as ``CommandFailed``.
    """

    def __init__(self, repo_path: Path | str, runner: CommandRunner):
        self.repo_path = Path(repo_path).expanduser()
        self.runner = runner

    def _git(self, *args: str) -> str:
        return self.runner.run(["git", *args], self.repo_path).stdout

    # ========== Read-only queries ==========

    def is_repository(self) -> bool:
        """Check for the .git marker."""
        return (self.repo_path / ".git").exists()

    def current_commit(self) -> CommitRef:
        return CommitRef(self._git("rev-parse", "HEAD"))

    def fetch_remote(self, branch: str) -> None:
        """Download refs for the branch without touching the working tree."""
        self._git("fetch", "origin", branch)

    def remote_commit(self, branch: str) -> CommitRef:
        return CommitRef(self._git("rev-parse", f"origin/{branch}"))

    def is_dirty(self) -> bool:
        """True when tracked or untracked files are modified."""
        return bool(self._git("status", "--porcelain"))

    def changed_paths(self, before: CommitRef, after: CommitRef) -> ChangeSet:
        """
        List paths that differ between two commits.

        A failed diff yields an empty set flagged ``ok=False`` instead of
        raising; it must not abort an otherwise successful update.
        """
        try:
            # -z keeps non-ASCII paths unquoted.
            output = self._git("diff", "--name-only", "-z", before.sha, after.sha)
        except CommandFailed as e:
            logger.warning(f"Could not compute changed files: {e}")
            return ChangeSet.failed(e.stderr or str(e))
        paths = tuple(path for path in output.split("\0") if path)
        return ChangeSet(paths=paths)

    # ========== Mutations ==========

    def stash(self) -> None:
        """Set local changes aside. They are never re-applied automatically."""
        self._git("stash")

    def pull(self, branch: str) -> str:
        return self._git("pull", "origin", branch)

    # ========== Filesystem probes ==========

    def has_file(self, name: str) -> bool:
        return (self.repo_path / name).exists()

    def has_build_script(self) -> bool:
        """Check whether package.json declares a "build" script."""
        manifest = self.repo_path / "package.json"
        if not manifest.exists():
            return False
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {manifest}: {e}")
            return False
        scripts = data.get("scripts") if isinstance(data, dict) else None
        return isinstance(scripts, dict) and bool(scripts.get("build"))

    def build_output_present(self, output_dir: str) -> bool:
        """True if the build output directory exists and is not empty."""
        path = self.repo_path / output_dir
        return path.is_dir() and any(path.iterdir())
