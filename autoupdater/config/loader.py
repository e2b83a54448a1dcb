"""Configuration loading utilities."""

from typing import Any

from autoupdater.config.schema import UpdaterConfig


def load_config(**overrides: Any) -> UpdaterConfig:
    """
    Build the configuration snapshot.

    Overrides left as None (CLI flags that were not given) fall through to
    the environment and then to the defaults.

    Args:
        **overrides: Field values taking precedence over the environment.

    Returns:
        Frozen configuration object.
    """
    return UpdaterConfig(**{k: v for k, v in overrides.items() if v is not None})
