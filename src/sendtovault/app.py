"""SendToVaultApp: wires config, store, client, engine and scheduler together.

Usage::

    app = SendToVaultApp(SyncConfig.load("sendtovault.toml"), ui=LogUI())
    app.start()          # registers on first run, then starts polling
    ...
    app.force_sync()     # "Sync Now" button
    app.on_foreground()  # host window regained focus
    app.close()
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

from sendtovault.client import SendToVaultClient
from sendtovault.config import SyncConfig
from sendtovault.engine import PollResult, SyncEngine
from sendtovault.errors import SendToVaultError
from sendtovault.materializer import LocalVaultFS, NoteMaterializer, VaultFS
from sendtovault.registration import describe_registration_error, register
from sendtovault.scheduler import PollScheduler
from sendtovault.state import BackoffState
from sendtovault.store import CredentialStore, StateBackend, YamlStateBackend
from sendtovault.ui import SyncSnapshot, SyncUI

REGISTRATION_ERROR_TIMEOUT = 8.0


class SendToVaultApp:
    """Host-facing lifecycle for the SendToVault sync client."""

    def __init__(
        self,
        config: SyncConfig,
        ui: SyncUI,
        *,
        fs: VaultFS | None = None,
        backend: StateBackend | None = None,
        client: SendToVaultClient | None = None,
        is_foreground: Callable[[], bool] | None = None,
        vault_name: str | None = None,
    ) -> None:
        self.config = config
        self.ui = ui
        self.client = client or SendToVaultClient(
            config.api_url, client_version=config.client_version, timeout=config.timeout
        )
        self.store = CredentialStore(
            backend or YamlStateBackend(config.state_path),
            vault_name=vault_name or config.vault_dir.resolve().name or "vault",
        )
        self.state = self.store.load()
        self.engine = SyncEngine(
            self.client,
            self.store,
            self.state,
            NoteMaterializer(fs or LocalVaultFS(config.vault_dir), folder=config.inbox_folder),
            ui=ui,
            backoff=BackoffState(config.min_delay, config.max_delay),
            is_foreground=is_foreground or (lambda: True),
        )
        self.scheduler = PollScheduler(self.engine)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.state.registered:
            self.start_polling()
        else:
            self.register()

    def start_polling(self) -> None:
        self.scheduler.start(immediate=True)

    def close(self) -> None:
        self.scheduler.stop()
        self.client.close()

    def __enter__(self) -> "SendToVaultApp":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, *, rotate: bool = False) -> bool:
        """Obtain (or rotate) credentials; returns whether it succeeded."""
        try:
            credentials = register(self.client, self.state.vault_identifier, rotate=rotate)
        except SendToVaultError as exc:
            logger.error("Registration failed: {}", exc)
            self.ui.notify(describe_registration_error(exc), REGISTRATION_ERROR_TIMEOUT)
            return False

        self.store.replace_credentials(self.state, credentials)
        if rotate:
            self.ui.notify("Email alias rotated successfully!")
        else:
            self.ui.prompt_first_run(credentials.alias, self.start_polling)
        return True

    def rotate_alias(self) -> bool:
        return self.register(rotate=True)

    def copy_alias(self) -> None:
        if not self.state.credentials:
            return
        self.ui.copy_to_clipboard(self.state.credentials.alias)
        self.ui.notify("Email alias copied to clipboard!")

    # ------------------------------------------------------------------
    # Sync triggers
    # ------------------------------------------------------------------

    def force_sync(self) -> PollResult:
        """Explicit user-requested sync with progress notices."""
        logger.info("Force sync triggered")
        self.ui.notify("Syncing with SendToVault...")
        try:
            result = self.scheduler.poll_now()
        except SendToVaultError as exc:
            logger.error("Force sync failed: {}", exc)
            result = PollResult(ok=False, error=exc)
        if result.skipped:
            self.ui.notify("Sync skipped; try again shortly.")
        elif result.ok:
            self.ui.notify("Sync completed!")
        else:
            self.ui.notify("Sync failed. Please try again.")
        return result

    def on_foreground(self) -> PollResult | None:
        """Host regained focus: poll right away if polling is active."""
        if not self.scheduler.running:
            return None
        logger.debug("Host became visible, triggering immediate poll")
        return self.scheduler.poll_now()

    # ------------------------------------------------------------------
    # Settings / state
    # ------------------------------------------------------------------

    def set_auto_open(self, value: bool) -> None:
        self.state.auto_open_imported = value
        self.store.save(self.state)

    def snapshot(self) -> SyncSnapshot:
        return self.engine.snapshot()
