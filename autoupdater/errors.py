"""Exceptions raised by the update pipeline."""


class UpdaterError(Exception):
    """Base error for a failed reconciliation step."""


class CommandFailed(UpdaterError):
    """An external command exited non-zero, timed out, or could not start."""

    def __init__(self, command: str, exit_info: int | str, stderr: str = ""):
        self.command = command
        self.exit_info = exit_info
        self.stderr = stderr
        if isinstance(exit_info, int):
            detail = f"exit code {exit_info}"
        else:
            detail = exit_info
        super().__init__(f"Command '{command}' failed ({detail})")


class RepositoryNotFoundError(UpdaterError):
    """The configured path is not a git checkout."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No git repository found at: {path}")
