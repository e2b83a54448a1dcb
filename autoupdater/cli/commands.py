"""CLI commands for autoupdater."""

import asyncio
import signal
from typing import Any

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from autoupdater import __logo__, __version__

app = typer.Typer(
    name="autoupdater",
    help=f"{__logo__} autoupdater - keep a checkout in sync with its upstream branch",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} autoupdater v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """autoupdater - keep a checkout in sync with its upstream branch."""
    pass


# Options shared by every command. Unset options leave the environment
# value (or the default) in place.
REPO_OPTION = typer.Option(None, "--repo", help="Path to the git checkout")
BRANCH_OPTION = typer.Option(None, "--branch", help="Branch to follow")
INTERVAL_OPTION = typer.Option(None, "--interval", help="Polling interval in minutes")
RESTART_OPTION = typer.Option(None, "--restart-cmd", help="Command that restarts the service")
LOG_OPTION = typer.Option(None, "--log", help="Log file (empty string disables it)")
INSTALL_OPTION = typer.Option(None, "--install/--no-install", help="Run npm install when dependencies change")
BUILD_OPTION = typer.Option(None, "--build/--no-build", help="Run npm run build when sources change")
MAKE_OPTION = typer.Option(None, "--make/--no-make", help="Run make build when a Makefile exists")
BOOTSTRAP_OPTION = typer.Option(None, "--bootstrap/--no-bootstrap", help="Build first if the build output is missing")
TIMEOUT_OPTION = typer.Option(None, "--timeout", help="Timeout per command in seconds")


def _load_config(**overrides: Any):
    from autoupdater.config.loader import load_config

    try:
        return load_config(**overrides)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red]\n{e}")
        raise typer.Exit(2)


def _overrides(
    repo, branch, interval, restart_cmd, log, install, build, make, bootstrap, timeout
) -> dict[str, Any]:
    return {
        "repo_path": repo,
        "branch": branch,
        "interval_minutes": interval,
        "restart_cmd": restart_cmd,
        "log_file": log,
        "run_npm_install": install,
        "run_npm_build": build,
        "run_make_build": make,
        "bootstrap_build": bootstrap,
        "command_timeout": timeout,
    }


def _log_banner(config) -> None:
    logger.info("══════════════════════════════════════════════════════")
    logger.info("  autoupdater started")
    logger.info(f"  Repo:     {config.repo_path}")
    logger.info(f"  Branch:   {config.branch}")
    logger.info(f"  Interval: every {config.interval_minutes} minutes")
    logger.info(f"  Restart:  {config.restart_cmd or '(not configured)'}")
    logger.info("══════════════════════════════════════════════════════")


# ============================================================================
# Daemon
# ============================================================================


@app.command()
def run(
    repo: str = REPO_OPTION,
    branch: str = BRANCH_OPTION,
    interval: int = INTERVAL_OPTION,
    restart_cmd: str = RESTART_OPTION,
    log: str = LOG_OPTION,
    install: bool = INSTALL_OPTION,
    build: bool = BUILD_OPTION,
    make: bool = MAKE_OPTION,
    bootstrap: bool = BOOTSTRAP_OPTION,
    timeout: int = TIMEOUT_OPTION,
    verbose: bool = typer.Option(False, "--verbose", help="Debug output"),
):
    """Poll the remote branch and apply updates until stopped."""
    from autoupdater.git_update.scheduler import UpdateScheduler
    from autoupdater.git_update.service import UpdateReconciler
    from autoupdater.logging import setup_logging

    config = _load_config(
        **_overrides(repo, branch, interval, restart_cmd, log, install, build, make, bootstrap, timeout)
    )
    setup_logging(config.log_file, verbose)
    _log_banner(config)

    scheduler = UpdateScheduler(UpdateReconciler(config), config.interval_seconds)

    async def run_scheduler():
        task = asyncio.create_task(scheduler.run_forever())
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, task.cancel)
        try:
            await task
        except asyncio.CancelledError:
            pass

    asyncio.run(run_scheduler())
    console.print("Shutting down...")


@app.command()
def check(
    repo: str = REPO_OPTION,
    branch: str = BRANCH_OPTION,
    restart_cmd: str = RESTART_OPTION,
    log: str = LOG_OPTION,
    install: bool = INSTALL_OPTION,
    build: bool = BUILD_OPTION,
    make: bool = MAKE_OPTION,
    bootstrap: bool = BOOTSTRAP_OPTION,
    timeout: int = TIMEOUT_OPTION,
    verbose: bool = typer.Option(False, "--verbose", help="Debug output"),
):
    """Run a single update pass and exit (1 if it failed)."""
    from autoupdater.git_update.service import UpdateReconciler
    from autoupdater.logging import setup_logging

    config = _load_config(
        **_overrides(repo, branch, None, restart_cmd, log, install, build, make, bootstrap, timeout)
    )
    setup_logging(config.log_file, verbose)

    outcome = UpdateReconciler(config).run_pass()
    if not outcome.succeeded:
        raise typer.Exit(1)


# ============================================================================
# Config
# ============================================================================


@app.command("config")
def show_config(
    repo: str = REPO_OPTION,
    branch: str = BRANCH_OPTION,
    interval: int = INTERVAL_OPTION,
    restart_cmd: str = RESTART_OPTION,
    log: str = LOG_OPTION,
    install: bool = INSTALL_OPTION,
    build: bool = BUILD_OPTION,
    make: bool = MAKE_OPTION,
    bootstrap: bool = BOOTSTRAP_OPTION,
    timeout: int = TIMEOUT_OPTION,
):
    """Show the resolved configuration."""
    config = _load_config(
        **_overrides(repo, branch, interval, restart_cmd, log, install, build, make, bootstrap, timeout)
    )

    table = Table(title="autoupdater configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in config.model_dump().items():
        shown = "[dim]not set[/dim]" if value is None else str(value)
        table.add_row(name, shown)

    console.print(table)

    if not (config.repo_dir / ".git").exists():
        console.print(f"[yellow]Warning: no git repository at {config.repo_dir}[/yellow]")
