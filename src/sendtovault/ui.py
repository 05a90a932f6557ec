"""UI capability interface the sync engine talks through.

The engine never renders anything itself.  Hosts (the marimo notebook, a
desktop shell, a test double) implement :class:`SyncUI` and subscribe to
:class:`SyncSnapshot` updates to refresh badges and panels.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol, runtime_checkable

from loguru import logger


@dataclass(frozen=True)
class SyncSnapshot:
    """Read-only view of sync state pushed to observers after every attempt."""

    alias: str
    quota_used: int
    quota_limit: int
    imports_this_period: int
    last_sync: datetime | None
    next_delay: float
    #: False when the latest attempt failed
    healthy: bool = True


@runtime_checkable
class SyncUI(Protocol):
    def notify(self, message: str, timeout: float | None = None) -> None:
        """Show a transient toast; *timeout* is in seconds."""
        ...

    def prompt_first_run(self, alias: str, on_done: Callable[[], None]) -> None:
        """Show the welcome prompt for a fresh alias; call *on_done* when dismissed."""
        ...

    def prompt_paywall(self) -> None: ...
    def open_note(self, path: str) -> None: ...
    def copy_to_clipboard(self, text: str) -> None: ...


class LogUI:
    """Headless :class:`SyncUI` that writes everything to the log."""

    def notify(self, message: str, timeout: float | None = None) -> None:
        logger.info("[notice] {}", message)

    def prompt_first_run(self, alias: str, on_done: Callable[[], None]) -> None:
        logger.info("Send notes to {} to import them into the vault", alias)
        on_done()

    def prompt_paywall(self) -> None:
        logger.warning("Monthly import quota exceeded; upgrade to keep importing notes")

    def open_note(self, path: str) -> None:
        logger.info("Imported note available at {}", path)

    def copy_to_clipboard(self, text: str) -> None:
        logger.info("Clipboard: {}", text)
