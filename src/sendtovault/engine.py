"""Sync engine: one poll attempt, from download to persisted state.

Poll flow
---------
1. Skip when the host is in the background or another poll is running.
2. Download notes created after the cursor.
3. On failure: double the backoff delay and leave cursor/quota alone.
4. On success: reset backoff, write each note in order (a failing note is
   reported and skipped), advance the cursor to the newest written note,
   update quota, persist, and push a snapshot to subscribers.
5. If the service flags the account as over quota, raise the paywall.

The engine never schedules itself; :class:`~sendtovault.scheduler.PollScheduler`
re-arms using :attr:`SyncEngine.backoff`.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from loguru import logger

from sendtovault.errors import NotRegisteredError, SendToVaultError
from sendtovault.note import NoteRecord
from sendtovault.quota import apply_response
from sendtovault.state import BackoffState, SyncState
from sendtovault.ui import SyncSnapshot, SyncUI

if TYPE_CHECKING:
    from sendtovault.client import DownloadResponse, SendToVaultClient
    from sendtovault.materializer import NoteMaterializer
    from sendtovault.store import CredentialStore

Subscriber = Callable[[SyncSnapshot], None]


@dataclass(frozen=True)
class PollResult:
    processed_count: int = 0
    latest_timestamp: datetime | None = None
    over_quota: bool = False
    ok: bool = True
    #: True when the attempt was not made at all (background / already running)
    skipped: bool = False
    failed_count: int = 0
    error: SendToVaultError | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncEngine:
    """Owns :class:`SyncState` and :class:`BackoffState` and runs poll attempts."""

    def __init__(
        self,
        client: "SendToVaultClient",
        store: "CredentialStore",
        state: SyncState,
        materializer: "NoteMaterializer",
        *,
        ui: SyncUI,
        backoff: BackoffState | None = None,
        is_foreground: Callable[[], bool] = lambda: True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.store = store
        self.state = state
        self.materializer = materializer
        self.ui = ui
        self.backoff = backoff or BackoffState()
        self.is_foreground = is_foreground
        self.clock = clock
        self._lock = threading.Lock()
        self._subscribers: list[Subscriber] = []
        self._healthy = True

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback* for snapshots; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def snapshot(self) -> SyncSnapshot:
        creds = self.state.credentials
        quota = self.state.quota
        return SyncSnapshot(
            alias=creds.alias if creds else "",
            quota_used=quota.used,
            quota_limit=quota.limit,
            imports_this_period=quota.imports_this_period,
            last_sync=self.state.cursor.last_sync,
            next_delay=self.backoff.current_delay,
            healthy=self._healthy,
        )

    def _publish(self) -> None:
        snap = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snap)
            except Exception:  # noqa: BLE001
                # observers never abort a poll
                logger.exception("Snapshot subscriber {!r} failed", callback)

    # ------------------------------------------------------------------
    # Poll
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def poll(self) -> PollResult:
        """Run one sync attempt; see the module docstring for the flow."""
        if not self.is_foreground():
            logger.debug("Skipping poll: host is in the background")
            return PollResult(skipped=True)
        if not self._lock.acquire(blocking=False):
            logger.debug("Skipping poll: another poll is in flight")
            return PollResult(skipped=True)
        try:
            return self._poll_locked()
        finally:
            self._lock.release()

    def _poll_locked(self) -> PollResult:
        creds = self.state.credentials
        if creds is None:
            raise NotRegisteredError("cannot sync before registering")

        started = time.monotonic()
        since = self.state.cursor.since(self.clock())
        try:
            response = self.client.download(self.state.vault_identifier, creds.secret, since)
        except SendToVaultError as exc:
            return self._on_failure(exc, started)

        self.backoff.record_success()
        self._healthy = True
        result = self._process(response)
        try:
            self.store.save(self.state)
        except OSError as exc:
            # notes are already on disk; the next successful save catches the state up
            logger.warning("Could not persist sync state: {}", exc)
        self._publish()

        if response.over_quota:
            logger.info("Service reports the account is over quota")
            self.ui.prompt_paywall()

        logger.info(
            "Poll finished in {:.0f}ms: {} imported, {} failed, quota {}/{}, {} imports this period",
            (time.monotonic() - started) * 1000,
            result.processed_count,
            result.failed_count,
            self.state.quota.used,
            self.state.quota.limit,
            self.state.quota.imports_this_period,
        )
        return result

    def _on_failure(self, exc: SendToVaultError, started: float) -> PollResult:
        old = self.backoff.current_delay
        self.backoff.record_failure()
        self._healthy = False
        logger.warning(
            "Poll failed after {:.0f}ms ({}: {}); retry delay {}s -> {}s",
            (time.monotonic() - started) * 1000,
            type(exc).__name__,
            exc,
            old,
            self.backoff.current_delay,
        )
        self._publish()
        return PollResult(ok=False, error=exc)

    def _process(self, response: "DownloadResponse") -> PollResult:
        total = len(response.notes)
        processed = 0
        failed = 0
        latest: datetime | None = None

        for position, raw in enumerate(response.notes, start=1):
            try:
                note = NoteRecord.from_dict(raw)
                written = self.materializer.materialize(note)
            except SendToVaultError as exc:
                failed += 1
                title = raw.get("title") if isinstance(raw, dict) else None
                logger.warning("Failed to import note {}/{} ({!r}): {}", position, total, title, exc)
                self.ui.notify(f"Failed to save note: {title or '(untitled)'}")
                continue

            processed += 1
            if latest is None or note.created > latest:
                latest = note.created
            logger.debug("Imported note {}/{}: {}", position, total, note.title)
            self.ui.notify(f"Imported: {note.title}")
            if written.created and self.state.auto_open_imported:
                self.ui.open_note(written.path)

        self.state.quota = apply_response(self.state.quota, response, imported=processed)
        if latest is not None:
            self.state.cursor.advance(latest)

        return PollResult(
            processed_count=processed,
            latest_timestamp=latest,
            over_quota=response.over_quota,
            failed_count=failed,
        )
