"""Client configuration.

Settings come from a TOML file with a ``[sendtovault]`` table::

    [sendtovault]
    api_url      = "https://api.sendtovault.com/v1"
    vault_dir    = "~/Notes"
    inbox_folder = "Inbox"
    min_delay    = 120      # seconds
    max_delay    = 1800
    timeout      = 10.0

Environment variables (all optional; direct kwargs take precedence):
    SENDTOVAULT_API_URL     – base URL of the service
    SENDTOVAULT_VAULT_DIR   – root of the vault notes are written into
    SENDTOVAULT_STATE_PATH  – where credentials and sync state are kept
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from sendtovault import __version__
from sendtovault.errors import ConfigError
from sendtovault.state import DEFAULT_MAX_DELAY, DEFAULT_MIN_DELAY

DEFAULT_API_URL = "https://api.sendtovault.com/v1"
DEFAULT_INBOX_FOLDER = "Inbox"

_ENV_VARS = {
    "api_url": "SENDTOVAULT_API_URL",
    "vault_dir": "SENDTOVAULT_VAULT_DIR",
    "state_path": "SENDTOVAULT_STATE_PATH",
}


@dataclass
class SyncConfig:
    api_url: str = DEFAULT_API_URL
    vault_dir: Path = Path(".")
    state_path: Path | None = None
    inbox_folder: str = DEFAULT_INBOX_FOLDER
    min_delay: float = DEFAULT_MIN_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    timeout: float = 10.0
    client_version: str = __version__

    def __post_init__(self) -> None:
        self.api_url = str(self.api_url).rstrip("/")
        self.vault_dir = Path(self.vault_dir).expanduser()
        if self.state_path is None:
            self.state_path = self.vault_dir / ".sendtovault" / "state.yaml"
        else:
            self.state_path = Path(self.state_path).expanduser()
        try:
            self.min_delay = float(self.min_delay)
            self.max_delay = float(self.max_delay)
            self.timeout = float(self.timeout)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"delays and timeout must be numbers: {exc}") from exc
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigError(f"api_url must be an http(s) URL, got {self.api_url!r}")
        if self.min_delay <= 0 or self.max_delay < self.min_delay:
            raise ConfigError(f"need 0 < min_delay <= max_delay, got {self.min_delay} / {self.max_delay}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if not self.inbox_folder.strip("/"):
            raise ConfigError("inbox_folder must not be empty")

    @classmethod
    def load(cls, path: Path | str | None = None, **overrides: Any) -> "SyncConfig":
        """Merge defaults, the TOML file at *path*, the environment and *overrides*."""
        values: dict[str, Any] = {}
        if path is not None:
            values.update(_read_toml(Path(path)))
        for name, var in _ENV_VARS.items():
            env = os.getenv(var)
            if env:
                values[name] = env
        values.update({k: v for k, v in overrides.items() if v is not None})

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**values)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    section = data.get("sendtovault", data)
    if not isinstance(section, dict):
        raise ConfigError(f"[sendtovault] in {path} must be a table")
    return dict(section)
