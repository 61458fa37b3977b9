"""File-based secret storage for provider API keys"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def default_config_dir() -> Path:
    override = os.environ.get("SNAKE_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".config" / "snake"


class SecretStore:
    """Simple file-based secret storage, readable only by the owner"""

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = config_dir or default_config_dir()
        self.secrets_file = self.config_dir / "secrets.json"

    def _load(self) -> dict:
        if self.secrets_file.exists():
            try:
                return json.loads(self.secrets_file.read_text())
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Ignoring unreadable secrets file {self.secrets_file}: {type(e).__name__}")
                return {}
        return {}

    def _save(self, data: dict):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.secrets_file.write_text(json.dumps(data, indent=2))
        self.secrets_file.chmod(0o600)

    def get(self, key: str) -> str | None:
        """Get a secret value"""
        return self._load().get(key)

    def set(self, key: str, value: str):
        """Set a secret value"""
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str):
        """Delete a secret value"""
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self) -> list[str]:
        return sorted(self._load().keys())
