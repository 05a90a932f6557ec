"""Credential store: persistence of :class:`~sendtovault.state.SyncState`.

The host owns an opaque key-value blob; this module only knows how to load
and save a plain ``dict`` through a :class:`StateBackend`.  Two backends
ship here:

* :class:`YamlStateBackend` – a YAML file inside the vault (default
  ``.sendtovault/state.yaml``), written atomically.
* :class:`MemoryStateBackend` – a dict, for tests and embedding.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from loguru import logger

from sendtovault.state import Credentials, SyncState


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


@runtime_checkable
class StateBackend(Protocol):
    def load(self) -> dict[str, Any] | None:
        """Return the persisted mapping, or ``None`` when nothing is stored."""
        ...

    def save(self, data: dict[str, Any]) -> None:
        """Replace the persisted mapping with *data*."""
        ...


class YamlStateBackend:
    """Stores state as a YAML document at *path*."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.warning("Ignoring unreadable state file {}: {}", self.path, exc)
            return None
        return data if isinstance(data, dict) else None

    def save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".yaml")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yaml.safe_dump(data, fh, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class MemoryStateBackend:
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = dict(data) if data is not None else None
        self.saves = 0

    def load(self) -> dict[str, Any] | None:
        return dict(self.data) if self.data is not None else None

    def save(self, data: dict[str, Any]) -> None:
        self.data = dict(data)
        self.saves += 1


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def generate_vault_identifier(vault_name: str) -> str:
    """Return a new installation id: the vault name plus a random UUID."""
    return f"{vault_name}-{uuid.uuid4()}"


class CredentialStore:
    """Loads and saves :class:`SyncState` through a backend."""

    def __init__(self, backend: StateBackend, *, vault_name: str = "vault") -> None:
        self.backend = backend
        self.vault_name = vault_name

    def load(self) -> SyncState:
        """Load state, generating and persisting a vault identifier on first use."""
        state = SyncState.from_dict(self.backend.load())
        if not state.vault_identifier:
            state.vault_identifier = generate_vault_identifier(self.vault_name)
            logger.info("Generated vault identifier {}", state.vault_identifier)
            self.save(state)
        return state

    def save(self, state: SyncState) -> None:
        self.backend.save(state.to_dict())

    def replace_credentials(self, state: SyncState, credentials: Credentials) -> None:
        """Swap in new credentials (first registration or rotation) and persist."""
        state.credentials = credentials
        self.save(state)
