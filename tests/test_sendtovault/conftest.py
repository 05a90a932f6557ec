"""Shared fakes for the sync client tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from sendtovault.client import DownloadResponse
from sendtovault.engine import SyncEngine
from sendtovault.materializer import LocalVaultFS, NoteMaterializer
from sendtovault.state import BackoffState, Credentials, SyncState
from sendtovault.store import CredentialStore, MemoryStateBackend

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class RecordingUI:
    """SyncUI double that records every call."""

    def __init__(self) -> None:
        self.notices: list[str] = []
        self.first_run: list[str] = []
        self.paywalls = 0
        self.opened: list[str] = []
        self.clipboard: list[str] = []

    def notify(self, message: str, timeout: float | None = None) -> None:
        self.notices.append(message)

    def prompt_first_run(self, alias: str, on_done: Callable[[], None]) -> None:
        self.first_run.append(alias)
        on_done()

    def prompt_paywall(self) -> None:
        self.paywalls += 1

    def open_note(self, path: str) -> None:
        self.opened.append(path)

    def copy_to_clipboard(self, text: str) -> None:
        self.clipboard.append(text)


class FakeClient:
    """Stands in for SendToVaultClient; replies are queued per endpoint."""

    def __init__(self) -> None:
        self.downloads: list[DownloadResponse | Exception] = []
        self.registrations: list[dict[str, Any] | Exception] = []
        self.download_calls: list[tuple[str, str, datetime]] = []
        self.register_calls: list[tuple[str, bool]] = []
        self.closed = False

    def download(self, vault_identifier: str, passkey: str, since: datetime) -> DownloadResponse:
        self.download_calls.append((vault_identifier, passkey, since))
        reply = self.downloads.pop(0) if self.downloads else DownloadResponse()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def register(self, vault_identifier: str, *, rotate: bool = False) -> dict[str, Any]:
        self.register_calls.append((vault_identifier, rotate))
        reply = self.registrations.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True


def note(note_id: str, title: str, created_iso: str, markdown: str | None = None) -> dict[str, Any]:
    return {
        "id": note_id,
        "title": title,
        "markdown": markdown if markdown is not None else f"# {title}\n",
        "created_iso": created_iso,
    }


@pytest.fixture()
def make_note() -> Callable[..., dict[str, Any]]:
    return note


@pytest.fixture()
def ui() -> RecordingUI:
    return RecordingUI()


@pytest.fixture()
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def backend() -> MemoryStateBackend:
    return MemoryStateBackend()


@pytest.fixture()
def state() -> SyncState:
    return SyncState(
        vault_identifier="notes-1234",
        credentials=Credentials(identity="v-1", secret="pk-1", alias="me@in.sendtovault.com"),
    )


@pytest.fixture()
def engine(tmp_path: Path, client: FakeClient, backend: MemoryStateBackend, state: SyncState, ui: RecordingUI) -> SyncEngine:
    return SyncEngine(
        client,
        CredentialStore(backend),
        state,
        NoteMaterializer(LocalVaultFS(tmp_path)),
        ui=ui,
        backoff=BackoffState(min_delay=10, max_delay=100),
        clock=lambda: NOW,
    )
