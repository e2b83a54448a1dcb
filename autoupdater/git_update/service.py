"""Update reconciler: one pass of fetch, compare, pull, rebuild, restart."""

from pathlib import Path

from loguru import logger

from autoupdater.config.schema import UpdaterConfig
from autoupdater.errors import CommandFailed, RepositoryNotFoundError, UpdaterError
from autoupdater.git_update.classifier import build_required, dependencies_changed
from autoupdater.git_update.inspector import RepositoryInspector
from autoupdater.git_update.types import ChangeSet, ReconcilerState, UpdateOutcome
from autoupdater.runner import CommandRunner


class UpdateReconciler:
    """
    Brings the checkout up to date with its upstream branch.

    Steps run in a fixed order and the first failing command ends the pass:
    1. Verify the checkout and, if enabled, bootstrap a missing build
    2. Fetch and compare local HEAD with the remote branch tip
    3. Stash local changes if any, then pull
    4. Install dependencies / build when the changed files call for it
    5. Run ``make build`` and the restart command when configured

    Nothing is rolled back on failure; the next pass starts from whatever
    state the checkout was left in.
    """

    def __init__(
        self,
        config: UpdaterConfig,
        runner: CommandRunner | None = None,
        inspector: RepositoryInspector | None = None,
    ):
        self.config = config
        self.capabilities = config.capabilities
        self.runner = runner or CommandRunner(timeout=config.command_timeout)
        self.inspector = inspector or RepositoryInspector(config.repo_dir, self.runner)
        self.state = ReconcilerState.IDLE

    def run_pass(self) -> UpdateOutcome:
        """
        Run one reconciliation pass. Never raises for a failed step.

        After a failure ``state`` stays FAILED until the next pass starts.
        """
        logger.info("─── Checking for updates ───────────────────────────")
        self.state = ReconcilerState.IDLE
        outcome = UpdateOutcome(status="failed")

        try:
            self._update(outcome)
        except UpdaterError as e:
            outcome.status = "failed"
            outcome.error = str(e)
            outcome.failed_in = self.state
            self.state = ReconcilerState.FAILED
            logger.error(f"Update failed: {e}")
            if isinstance(e, CommandFailed) and e.stderr:
                logger.error(f"stderr: {e.stderr}")
        else:
            self.state = ReconcilerState.IDLE

        return outcome

    def _update(self, outcome: UpdateOutcome) -> None:
        if not self.inspector.is_repository():
            raise RepositoryNotFoundError(str(self.inspector.repo_path))

        if self.capabilities.bootstrap_build_enabled:
            self._bootstrap_build(outcome)

        self.state = ReconcilerState.CHECKING
        branch = self.config.branch
        before = self.inspector.current_commit()
        outcome.before = before
        logger.info(f"Local commit: {before.short}")

        self.inspector.fetch_remote(branch)
        after = self.inspector.remote_commit(branch)
        outcome.after = after
        logger.info(f"Remote commit: {after.short}")

        if before == after:
            outcome.status = "no_change"
            logger.info("✓ No changes. The service is up to date.")
            return

        logger.success(f"🔄 Changes detected! Updating {before.short} → {after.short}")

        self.state = ReconcilerState.APPLYING
        if self.inspector.is_dirty():
            logger.warning("Local changes found. Stashing them before pulling...")
            self.inspector.stash()
            outcome.steps_completed.append("git_stash")

        pull_output = self.inspector.pull(branch)
        outcome.steps_completed.append("git_pull")
        logger.info(f"git pull: {pull_output}")

        changes = self.inspector.changed_paths(before, after)
        outcome.changes = changes
        if changes.ok:
            logger.info(f"Changed files: {', '.join(changes)}")
        else:
            logger.warning("Changed files unknown, treating the change set as empty.")

        self._install(changes, outcome)
        self._build(changes, outcome)
        self._make(outcome)
        self._restart(outcome)

        outcome.status = "updated"
        logger.success("✅ Update completed successfully.")

    # ========== Steps ==========

    def _run(self, command: list[str] | str, cwd: Path | None = None) -> str:
        return self.runner.run(command, cwd or self.inspector.repo_path).stdout

    def _bootstrap_build(self, outcome: UpdateOutcome) -> None:
        """Build a checkout that was never built, before comparing versions."""
        if not self.capabilities.build_enabled or not self.inspector.has_build_script():
            return
        output_dir = self.config.build_output_dir
        if self.inspector.build_output_present(output_dir):
            return

        logger.warning(f"⚠ {output_dir}/ is missing or empty. Running initial build...")
        if self.capabilities.install_enabled and self.inspector.has_file("package.json"):
            self.state = ReconcilerState.INSTALLING
            logger.info("📦 Running npm install...")
            # Full install: building needs the dev dependencies.
            self._run(["npm", "install"])
            outcome.steps_completed.append("bootstrap_install")
            logger.success("npm install completed.")

        self.state = ReconcilerState.BUILDING
        logger.info("🔨 Running npm run build...")
        self._run(["npm", "run", "build"])
        outcome.steps_completed.append("bootstrap_build")
        logger.success("✅ Initial build completed. The service can start.")

    def _install(self, changes: ChangeSet, outcome: UpdateOutcome) -> None:
        if not self.capabilities.install_enabled:
            logger.info("npm install disabled → skipping.")
            return
        if not self.inspector.has_file("package.json"):
            logger.info("No package.json → skipping npm install.")
            return
        if not dependencies_changed(changes):
            logger.info("Dependencies unchanged → skipping npm install.")
            return

        self.state = ReconcilerState.INSTALLING
        logger.info("📦 Dependencies changed → running npm install...")
        self._run(["npm", "install", "--omit=dev"])
        outcome.steps_completed.append("npm_install")
        logger.success("npm install completed.")

    def _build(self, changes: ChangeSet, outcome: UpdateOutcome) -> None:
        if not self.capabilities.build_enabled:
            logger.info("npm run build disabled → skipping.")
            return
        if not self.inspector.has_build_script():
            logger.info("No build script in package.json → skipping npm run build.")
            return

        if build_required(changes):
            logger.info("🔨 Source files changed → running npm run build...")
        elif (
            self.capabilities.bootstrap_build_enabled
            and not self.inspector.build_output_present(self.config.build_output_dir)
        ):
            logger.info(f"🔨 {self.config.build_output_dir}/ missing → running npm run build...")
        else:
            logger.info("No source changes → skipping npm run build.")
            return

        self.state = ReconcilerState.BUILDING
        self._run(["npm", "run", "build"])
        outcome.steps_completed.append("npm_build")
        logger.success("npm run build completed.")

    def _make(self, outcome: UpdateOutcome) -> None:
        if not self.capabilities.make_enabled or not self.inspector.has_file("Makefile"):
            return

        self.state = ReconcilerState.BUILDING
        logger.info("🔨 Makefile found → running make build...")
        self._run(["make", "build"])
        outcome.steps_completed.append("make_build")
        logger.success("make build completed.")

    def _restart(self, outcome: UpdateOutcome) -> None:
        restart_cmd = self.config.restart_cmd
        if not restart_cmd:
            logger.warning("⚠ No restart command configured. Restart the service manually.")
            return

        self.state = ReconcilerState.RESTARTING
        logger.info(f"🔁 Restarting service: {restart_cmd}")
        # Run from the daemon's own directory, not the repository.
        self._run(restart_cmd, cwd=Path.cwd())
        outcome.steps_completed.append("restart")
        logger.success("Service restarted successfully.")
