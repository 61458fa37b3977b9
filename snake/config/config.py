"""Configuration handle used to resolve provider settings and secrets"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from .secrets import SecretStore, default_config_dir

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration value is missing or unusable"""
    def __init__(self, key: str, message: str | None = None):
        self.key = key
        self.message = message or f"Configuration value not found: {key}"
        super().__init__(self.message)


class Config:
    """Resolves configuration values and secrets.

    Values are looked up in the process environment first, then in the
    JSON config file (plain values) or the secret store (secrets). The
    handle is passed explicitly to providers so construction stays
    deterministic in tests.
    """

    def __init__(
        self,
        values: dict[str, Any] | None = None,
        secrets: SecretStore | Mapping[str, str] | None = None,
        env: Mapping[str, str] | None = None,
    ):
        self.values = values or {}
        self.secrets = secrets if secrets is not None else {}
        self.env = env if env is not None else os.environ

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from file"""
        if path is None:
            # Look for snake.json in current dir or the config dir
            candidates = [
                Path.cwd() / "snake.json",
                default_config_dir() / "config.json",
            ]
            for p in candidates:
                if p.exists():
                    path = p
                    break

        values = {}
        if path and path.exists():
            values = json.loads(path.read_text())
            logger.debug(f"Loaded config from {path}")

        return cls(values=values, secrets=SecretStore())

    def get(self, key: str, default: str | None = None) -> str:
        """Get a plain configuration value"""
        if key in self.env:
            return self.env[key]
        if key in self.values:
            return str(self.values[key])
        if default is not None:
            return default
        raise ConfigError(key)

    def get_secret(self, key: str) -> str:
        """Get a secret value; the value itself is never logged"""
        if self.env.get(key):
            return self.env[key]
        value = self.secrets.get(key)
        if value:
            return value
        raise ConfigError(key, f"Secret not found: {key}. Set the {key} environment variable.")

    def has(self, key: str, secret: bool = False) -> bool:
        try:
            if secret:
                self.get_secret(key)
            else:
                self.get(key)
        except ConfigError:
            return False
        return True
