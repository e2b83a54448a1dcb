"""Synchronous execution of external commands."""

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from autoupdater.errors import CommandFailed


@dataclass
class ExecutionResult:
    """Outcome of a single external command."""
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""


class CommandRunner:
    """
    Runs one external command at a time and waits for it.

    Argument lists are executed directly; plain strings go through the shell
    (used for operator-supplied commands such as the restart command).
    Each command gets its own process group so a timeout kills everything
    it spawned. There are no retries at this layer.
    """

    def __init__(self, timeout: int | None = 600):
        self.timeout = timeout

    def run(self, command: list[str] | str, cwd: Path | str) -> ExecutionResult:
        """
        Run a command in the given working directory.

        Args:
            command: Argument list, or a shell command string.
            cwd: Working directory for the process.

        Returns:
            Exit status and captured output of a successful run.

        Raises:
            CommandFailed: On non-zero exit, timeout, or a process that
                could not be started.
        """
        shell = isinstance(command, str)
        display = command if shell else " ".join(command)
        logger.info(f"$ {display}")

        try:
            proc = subprocess.Popen(
                command,
                cwd=cwd,
                shell=shell,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            # Missing executable or missing working directory.
            raise CommandFailed(display, "not found", str(e)) from e
        except PermissionError as e:
            raise CommandFailed(display, "permission denied", str(e)) from e

        with proc:
            try:
                stdout, stderr = proc.communicate(timeout=self.timeout)
            except subprocess.TimeoutExpired as e:
                _kill_process_group(proc)
                _, stderr = proc.communicate()
                raise CommandFailed(display, f"timed out after {self.timeout}s", _decode(stderr)) from e

        result = ExecutionResult(
            command=display,
            returncode=proc.returncode,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )
        if result.returncode != 0:
            raise CommandFailed(display, result.returncode, result.stderr)
        return result


def _kill_process_group(proc: subprocess.Popen) -> None:
    if not hasattr(os, "killpg"):
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace").strip()
