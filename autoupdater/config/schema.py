"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Capabilities(BaseModel):
    """Optional pipeline steps the reconciler is allowed to run."""

    model_config = ConfigDict(frozen=True)

    install_enabled: bool = True
    build_enabled: bool = True
    make_enabled: bool = True
    bootstrap_build_enabled: bool = True


class UpdaterConfig(BaseSettings):
    """
    Runtime configuration for the updater.

    Values come from defaults, then environment variables named after the
    fields (REPO_PATH, BRANCH, ...), then keyword arguments, which win.
    The instance is frozen once built.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    repo_path: str = "."
    branch: str = "main"
    interval_minutes: int = Field(default=30, gt=0)
    restart_cmd: str | None = None

    run_npm_install: bool = True
    run_npm_build: bool = True
    run_make_build: bool = True
    bootstrap_build: bool = True

    build_output_dir: str = "dist"
    command_timeout: int | None = Field(default=600, gt=0)
    log_file: str | None = "./auto-updater.log"

    @field_validator(
        "run_npm_install", "run_npm_build", "run_make_build", "bootstrap_build",
        mode="before",
    )
    @classmethod
    def _toggle(cls, value):
        # Only the literal "false" turns a step off.
        if isinstance(value, str):
            return value.strip().lower() != "false"
        return value

    @field_validator("restart_cmd", "log_file", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def repo_dir(self) -> Path:
        """Repository path with ~ expanded."""
        return Path(self.repo_path).expanduser()

    @property
    def interval_seconds(self) -> int:
        return self.interval_minutes * 60

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(
            install_enabled=self.run_npm_install,
            build_enabled=self.run_npm_build,
            make_enabled=self.run_make_build,
            bootstrap_build_enabled=self.bootstrap_build,
        )
