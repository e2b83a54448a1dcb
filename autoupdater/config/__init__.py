"""Configuration module for autoupdater."""

from autoupdater.config.loader import load_config
from autoupdater.config.schema import Capabilities, UpdaterConfig

__all__ = ["Capabilities", "UpdaterConfig", "load_config"]
