"""Configuration and secret resolution for providers"""

from .config import Config, ConfigError
from .secrets import SecretStore

__all__ = ["Config", "ConfigError", "SecretStore"]
